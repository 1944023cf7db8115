"""Roster ingestion: document in, cards merged into a named deck out."""
from __future__ import annotations

from dataclasses import dataclass, field

from .deck import Card, Deck
from .errors import IngestError, RosterError
from .merge import merge_into_deck
from .page_provider import Document
from .pipeline import RosterPipeline, to_card_records
from .store import DeckStore
from .types import PageDiagnostics


@dataclass
class IngestResult:
    deck: Deck
    cards_added: int
    cards: list[Card] = field(default_factory=list)
    pages: list[PageDiagnostics] = field(default_factory=list)

    def warnings(self) -> list[str]:
        """Human-readable notes about pages that produced fewer cards than expected."""
        out: list[str] = []
        last = len(self.pages) - 1
        for i, p in enumerate(self.pages):
            if p.names_found == 0:
                out.append(f"no students recognised on page {p.page_number}")
                continue
            if p.names_dropped:
                out.append(
                    f"{p.names_dropped} of {p.names_found} students on page {p.page_number} "
                    f"were skipped (only {p.slots_available} photo slots)"
                )
            elif i != last and p.cards_emitted < p.slots_available:
                out.append(
                    f"{p.cards_emitted} of {p.slots_available} expected students recovered on page {p.page_number}"
                )
            if p.blank_photos:
                out.append(f"{p.blank_photos} photo(s) on page {p.page_number} look blank")
        return out


def ingest_roster(
    document: Document,
    deck_name: str,
    user_id: str,
    *,
    store: DeckStore,
    pipeline: RosterPipeline | None = None,
) -> IngestResult:
    """Extract every student of ``document`` and merge them into ``deck_name``.

    The whole document is walked before anything is written; any failure up
    to that point raises IngestError and leaves the store untouched.
    """
    if not (deck_name or "").strip():
        raise IngestError("deck name is required")

    pipeline = pipeline or RosterPipeline()
    try:
        result = pipeline.run(document)
    except RosterError as e:
        raise IngestError(f"could not process this document: {e}") from e

    cards = to_card_records(result.cards)
    deck = merge_into_deck(store, user_id, deck_name, cards)
    return IngestResult(deck=deck, cards_added=len(cards), cards=cards, pages=result.pages)
