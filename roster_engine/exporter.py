from __future__ import annotations

import csv
from dataclasses import dataclass
from pathlib import Path

from .deck import Deck, filter_cards
from .utils import slugify


@dataclass
class ExportStats:
    cards_seen: int = 0
    cards_exported: int = 0
    cards_skipped_mastered: int = 0


def export_csv(
    deck: Deck,
    out_path: str | Path,
    *,
    include_mastered: bool = True,
) -> ExportStats:
    """Export a deck to CSV, writing each photo as a JPEG beside the CSV.

    CSV columns:
    - name
    - progress
    - mastered
    - image_file (relative to the CSV's directory)
    - card_id

    Card order is the deck order. Raises RuntimeError when nothing is left
    to export.
    """
    out_path = Path(out_path)
    media_dir = out_path.parent / f"{out_path.stem}_media"

    stats = ExportStats(cards_seen=len(deck.cards))
    cards = filter_cards(deck, hide_mastered=not include_mastered)
    stats.cards_skipped_mastered = stats.cards_seen - len(cards)

    if not cards:
        raise RuntimeError(f"No exportable cards in deck {deck.name!r}")

    media_dir.mkdir(parents=True, exist_ok=True)
    out_path.parent.mkdir(parents=True, exist_ok=True)
    with out_path.open("w", newline="", encoding="utf-8") as f:
        writer = csv.DictWriter(f, fieldnames=["name", "progress", "mastered", "image_file", "card_id"])
        writer.writeheader()
        for i, c in enumerate(cards):
            file_name = f"{i:04d}_{slugify(c.name, max_len=40)}.jpg"
            (media_dir / file_name).write_bytes(c.image)
            writer.writerow(
                {
                    "name": c.name,
                    "progress": c.progress,
                    "mastered": "yes" if c.mastered else "no",
                    "image_file": f"{media_dir.name}/{file_name}",
                    "card_id": c.id,
                }
            )
            stats.cards_exported += 1

    return stats
