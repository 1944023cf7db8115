from __future__ import annotations

from typing import Sequence

from .deck import Card, Deck
from .store import DeckStore


def merge_into_deck(store: DeckStore, user_id: str, deck_name: str, cards: Sequence[Card]) -> Deck:
    """Append ``cards`` to the user's deck named ``deck_name``, creating it if needed.

    The name is the only identity check. Nothing is deduplicated, so merging
    the same roster twice doubles its cards.
    """
    name = (deck_name or "").strip()
    if not name:
        raise ValueError("deck name is required")

    existing = store.find_deck_by_name(user_id, name)
    if existing is not None:
        return store.append_cards_to_deck(user_id, existing.id, cards)
    return store.create_deck(user_id, name, cards)
