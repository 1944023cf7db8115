"""Flip / reveal / self-grade drilling over one deck."""
from __future__ import annotations

import random
from dataclasses import dataclass

from .deck import Card, Deck, deck_stats, filter_cards, reset_progress, shuffled_cards
from .store import JsonDeckStore


@dataclass
class SessionStats:
    correct: int = 0
    incorrect: int = 0


class PracticeSession:
    """Walks a deck's cards, persisting every grade through the store."""

    def __init__(self, store: JsonDeckStore, user_id: str, deck_id: str, *, hide_mastered: bool = False):
        self.store = store
        self.user_id = user_id
        self.deck_id = deck_id
        self.hide_mastered = hide_mastered
        self.index = 0
        self.showing_name = False
        self.stats = SessionStats()
        self.deck: Deck = store.get_deck(user_id, deck_id)

    @property
    def cards(self) -> list[Card]:
        return filter_cards(self.deck, self.hide_mastered)

    @property
    def current(self) -> Card | None:
        cards = self.cards
        if not cards:
            return None
        return cards[self.index % len(cards)]

    @property
    def finished(self) -> bool:
        """True when every remaining card is hidden as mastered."""
        return not self.cards

    def _reload(self) -> None:
        self.deck = self.store.get_deck(self.user_id, self.deck_id)

    def reveal(self) -> None:
        self.showing_name = not self.showing_name

    def next(self) -> None:
        self.showing_name = False
        cards = self.cards
        self.index = (self.index + 1) % len(cards) if cards else 0

    def previous(self) -> None:
        self.showing_name = False
        cards = self.cards
        self.index = (self.index - 1 + len(cards)) % len(cards) if cards else 0

    def grade(self, correct: bool) -> Card | None:
        """Record a self-grade for the current card and move on.

        Correct adds one to the card's progress, incorrect resets it to 0.
        """
        card = self.current
        if card is None:
            return None
        if correct:
            self.stats.correct += 1
            card.mark_correct()
        else:
            self.stats.incorrect += 1
            card.mark_incorrect()
        self.store.update_card_progress(self.user_id, self.deck_id, card.id, card.progress)
        self._reload()
        self.next()
        return card

    def handle_key(self, key: str) -> None:
        """Keyboard bindings: space flips, arrows move, y/n grade once revealed."""
        if key == " ":
            self.reveal()
        elif key in ("right", "ArrowRight"):
            self.next()
        elif key in ("left", "ArrowLeft"):
            self.previous()
        elif key in ("y", "Y") and self.showing_name:
            self.grade(True)
        elif key in ("n", "N") and self.showing_name:
            self.grade(False)

    def shuffle(self, rng: random.Random | None = None) -> None:
        self.deck = self.store.update_deck(self.user_id, self.deck_id, cards=shuffled_cards(self.deck.cards, rng))
        self.index = 0
        self.showing_name = False

    def reset(self) -> None:
        self.stats = SessionStats()
        self.deck = self.store.update_deck(self.user_id, self.deck_id, cards=reset_progress(self.deck.cards))
        self.index = 0
        self.showing_name = False

    def summary(self) -> str:
        s = deck_stats(self.deck)
        return (
            f"correct={self.stats.correct} incorrect={self.stats.incorrect} "
            f"mastered={s.mastered_count}/{s.total_cards} ({s.mastered_percent}%)"
        )
