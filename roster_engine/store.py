from __future__ import annotations

import hashlib
from pathlib import Path
from typing import Iterable, Protocol

from .deck import Card, Deck
from .errors import CardNotFound, DeckNotFound
from .utils import load_json, safe_filename_token, utc_now_iso, write_json


class DeckStore(Protocol):
    def find_deck_by_name(self, user_id: str, name: str) -> Deck | None: ...

    def create_deck(self, user_id: str, name: str, cards: Iterable[Card] | None = None) -> Deck: ...

    def append_cards_to_deck(self, user_id: str, deck_id: str, cards: Iterable[Card]) -> Deck: ...


class JsonDeckStore:
    """Per-user deck storage, one JSON file per user id under ``<root>/decks``.

    Every mutation rewrites the user's file once. Concurrent writers are not
    coordinated; the last write wins.
    """

    def __init__(self, root: str | Path):
        self.root = Path(root)
        self.decks_dir = self.root / "decks"

    # --- file io -----------------------------------------------------------

    def _user_path(self, user_id: str) -> Path:
        """``<readable prefix>_<sha256 of the exact id>.json``.

        The prefix is lossy ("Alice" and "alice" share it); the digest keeps
        every distinct id in its own file.
        """
        user_id = str(user_id)
        if not user_id.strip():
            raise ValueError("user_id is required")
        digest = hashlib.sha256(user_id.encode("utf-8")).hexdigest()
        return self.decks_dir / f"{safe_filename_token(user_id, max_len=40)}_{digest}.json"

    def _read_all(self, user_id: str) -> list[Deck]:
        p = self._user_path(user_id)
        if not p.exists():
            return []
        data = load_json(p)
        return [Deck.from_dict(d) for d in data.get("decks", [])]

    def _load(self, user_id: str) -> list[Deck]:
        return [d for d in self._read_all(user_id) if d.user_id == str(user_id)]

    def _save(self, user_id: str, decks: list[Deck]) -> None:
        # decks of another owner found in the same file are written back untouched
        others = [d for d in self._read_all(user_id) if d.user_id != str(user_id)]
        write_json(
            self._user_path(user_id),
            {"user_id": str(user_id), "decks": [d.to_dict() for d in others + decks]},
        )

    def _mutate(self, user_id: str, deck_id: str, fn) -> Deck:
        decks = self._load(user_id)
        for d in decks:
            if d.id == deck_id:
                fn(d)
                d.updated_at = utc_now_iso()
                self._save(user_id, decks)
                return d
        raise DeckNotFound(deck_id)

    # --- decks -------------------------------------------------------------

    def list_decks(self, user_id: str) -> list[Deck]:
        """All decks of the user, most recently updated first."""
        return sorted(self._load(user_id), key=lambda d: d.updated_at, reverse=True)

    def get_deck(self, user_id: str, deck_id: str) -> Deck:
        for d in self._load(user_id):
            if d.id == deck_id:
                return d
        raise DeckNotFound(deck_id)

    def find_deck_by_name(self, user_id: str, name: str) -> Deck | None:
        wanted = (name or "").strip()
        for d in self.list_decks(user_id):
            if d.name == wanted:
                return d
        return None

    def create_deck(self, user_id: str, name: str, cards: Iterable[Card] | None = None) -> Deck:
        name = (name or "").strip()
        if not name:
            raise ValueError("deck name is required")
        decks = self._load(user_id)
        deck = Deck(user_id=str(user_id), name=name, cards=list(cards or []))
        decks.append(deck)
        self._save(user_id, decks)
        return deck

    def update_deck(
        self,
        user_id: str,
        deck_id: str,
        *,
        name: str | None = None,
        cards: Iterable[Card] | None = None,
    ) -> Deck:
        """Rename and/or replace the whole card list (shuffle, bulk progress reset)."""
        new_cards = list(cards) if cards is not None else None

        def apply(d: Deck) -> None:
            if name and name.strip():
                d.name = name.strip()
            if new_cards is not None:
                d.cards = new_cards

        return self._mutate(user_id, deck_id, apply)

    def delete_deck(self, user_id: str, deck_id: str) -> None:
        decks = self._load(user_id)
        kept = [d for d in decks if d.id != deck_id]
        if len(kept) == len(decks):
            raise DeckNotFound(deck_id)
        self._save(user_id, kept)

    # --- cards -------------------------------------------------------------

    def append_cards_to_deck(self, user_id: str, deck_id: str, cards: Iterable[Card]) -> Deck:
        new_cards = list(cards)
        return self._mutate(user_id, deck_id, lambda d: d.cards.extend(new_cards))

    def add_card(self, user_id: str, deck_id: str, name: str, image: bytes) -> Deck:
        card = Card(name=name, image=image, progress=0)
        return self.append_cards_to_deck(user_id, deck_id, [card])

    def update_card_progress(self, user_id: str, deck_id: str, card_id: str, progress: int) -> Deck:
        if isinstance(progress, bool) or not isinstance(progress, int):
            raise ValueError("progress must be a number")
        if progress < 0:
            raise ValueError("progress must be >= 0")

        def apply(d: Deck) -> None:
            card = d.card(card_id)
            if card is None:
                raise CardNotFound(card_id)
            card.progress = progress

        return self._mutate(user_id, deck_id, apply)

    def delete_card(self, user_id: str, deck_id: str, card_id: str) -> Deck:
        def apply(d: Deck) -> None:
            if d.card(card_id) is None:
                raise CardNotFound(card_id)
            d.cards = [c for c in d.cards if c.id != card_id]

        return self._mutate(user_id, deck_id, apply)
