"""Deck and card records plus the bookkeeping around mastery."""
from __future__ import annotations

import random
import uuid
from dataclasses import dataclass, field, replace
from typing import Any, Iterable

from .utils import from_data_url, to_data_url, utc_now_iso


MASTERY_THRESHOLD = 3


def new_id() -> str:
    return uuid.uuid4().hex


@dataclass
class Card:
    name: str
    image: bytes
    progress: int = 0
    id: str = field(default_factory=new_id)
    created_at: str = field(default_factory=utc_now_iso)

    def __post_init__(self) -> None:
        self.name = (self.name or "").strip()
        if not self.name:
            raise ValueError("card name is required")
        if not self.image:
            raise ValueError("card image is required")
        if int(self.progress) < 0:
            raise ValueError("card progress must be >= 0")
        self.progress = int(self.progress)

    @property
    def mastered(self) -> bool:
        return self.progress >= MASTERY_THRESHOLD

    def mark_correct(self) -> None:
        self.progress += 1

    def mark_incorrect(self) -> None:
        self.progress = 0

    def to_dict(self) -> dict[str, Any]:
        return {
            "id": self.id,
            "name": self.name,
            "image": to_data_url(self.image),
            "progress": self.progress,
            "created_at": self.created_at,
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "Card":
        return cls(
            id=str(data.get("id") or new_id()),
            name=str(data.get("name") or ""),
            image=from_data_url(str(data.get("image") or "")),
            progress=int(data.get("progress") or 0),
            created_at=str(data.get("created_at") or utc_now_iso()),
        )


@dataclass
class Deck:
    user_id: str
    name: str
    cards: list[Card] = field(default_factory=list)
    id: str = field(default_factory=new_id)
    created_at: str = field(default_factory=utc_now_iso)
    updated_at: str = field(default_factory=utc_now_iso)

    def card(self, card_id: str) -> Card | None:
        for c in self.cards:
            if c.id == card_id:
                return c
        return None

    def to_dict(self) -> dict[str, Any]:
        return {
            "id": self.id,
            "user_id": self.user_id,
            "name": self.name,
            "cards": [c.to_dict() for c in self.cards],
            "created_at": self.created_at,
            "updated_at": self.updated_at,
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "Deck":
        return cls(
            id=str(data["id"]),
            user_id=str(data["user_id"]),
            name=str(data["name"]),
            cards=[Card.from_dict(c) for c in data.get("cards", [])],
            created_at=str(data.get("created_at") or utc_now_iso()),
            updated_at=str(data.get("updated_at") or utc_now_iso()),
        )


@dataclass(frozen=True)
class DeckStats:
    total_cards: int
    mastered_count: int
    mastered_percent: int


def deck_stats(deck: Deck) -> DeckStats:
    total = len(deck.cards)
    mastered = sum(1 for c in deck.cards if c.mastered)
    # JS Math.round semantics (half up), not banker's rounding
    percent = int(mastered * 100 / total + 0.5) if total else 0
    return DeckStats(total_cards=total, mastered_count=mastered, mastered_percent=percent)


def filter_cards(deck: Deck | None, hide_mastered: bool) -> list[Card]:
    if deck is None:
        return []
    if hide_mastered:
        return [c for c in deck.cards if not c.mastered]
    return list(deck.cards)


def shuffled_cards(cards: Iterable[Card], rng: random.Random | None = None) -> list[Card]:
    out = list(cards)
    (rng or random).shuffle(out)
    return out


def reset_progress(cards: Iterable[Card]) -> list[Card]:
    return [replace(c, progress=0) for c in cards]
