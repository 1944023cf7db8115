from __future__ import annotations

import html
import shutil
import tempfile
from dataclasses import dataclass
from pathlib import Path

from ..deck import Deck
from ..utils import slugify, stable_int_id


@dataclass
class ApkgExportStats:
    cards_seen: int = 0
    cards_exported: int = 0
    deck_name: str | None = None


def _parse_tags(tags_csv: str | None) -> list[str]:
    if not tags_csv:
        return []
    tags: list[str] = []
    for t in tags_csv.split(","):
        t = t.strip()
        if not t:
            continue
        # Anki tags should not contain spaces
        tags.append(t.replace(" ", "_"))
    return tags


def export_apkg(
    deck: Deck,
    out_path: str | Path,
    *,
    deck_name: str | None = None,
    tags: str | None = None,
) -> ApkgExportStats:
    """Export a deck as an Anki .apkg with embedded photos.

    Model:
    - Fields: Photo, Name
    - Front shows the photo, back reveals the name
    - Model and deck ids are derived from the deck id so re-exports update
      the same Anki deck instead of creating a new one
    """
    try:
        import genanki  # type: ignore
    except Exception as e:  # pragma: no cover
        raise RuntimeError(
            "genanki is required for apkg export. Install with: pip install genanki"
        ) from e

    out_path = Path(out_path)
    deck_name = deck_name or deck.name
    stats = ApkgExportStats(deck_name=deck_name, cards_seen=len(deck.cards))

    if not deck.cards:
        raise RuntimeError(f"Deck {deck.name!r} has no cards to export")

    model = genanki.Model(
        stable_int_id(f"roster_engine:model:{deck.id}"),
        "roster_engine_photo_name",
        fields=[
            {"name": "Photo"},
            {"name": "Name"},
        ],
        templates=[
            {
                "name": "Who is this?",
                "qfmt": "{{Photo}}",
                "afmt": "{{FrontSide}}<hr id=answer>{{Name}}",
            }
        ],
    )
    anki_deck = genanki.Deck(stable_int_id(f"roster_engine:deck:{deck.id}"), deck_name)
    export_tags = _parse_tags(tags)

    media_tmp = Path(tempfile.mkdtemp(prefix="roster_apkg_"))
    try:
        media_files: list[str] = []
        for c in deck.cards:
            # card ids keep media names unique when two students share a name
            media_name = f"{slugify(c.name, max_len=40, add_hash=False)}_{c.id[:12]}.jpg"
            dst = media_tmp / media_name
            dst.write_bytes(c.image)
            media_files.append(str(dst))

            note = genanki.Note(
                model=model,
                fields=[f'<img src="{html.escape(media_name)}">', html.escape(c.name)],
                guid=genanki.guid_for(deck.id, c.id),
            )
            if export_tags:
                note.tags = export_tags
            anki_deck.add_note(note)
            stats.cards_exported += 1

        out_path.parent.mkdir(parents=True, exist_ok=True)
        pkg = genanki.Package(anki_deck)
        pkg.media_files = media_files
        pkg.write_to_file(str(out_path))
    finally:
        shutil.rmtree(media_tmp, ignore_errors=True)

    return stats
