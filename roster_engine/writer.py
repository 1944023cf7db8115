from __future__ import annotations

from dataclasses import dataclass
from typing import Any

from .ingest import IngestResult
from .job import JobPaths
from .utils import slugify, utc_now_iso, write_json


@dataclass
class JobWriter:
    paths: JobPaths

    def write_crops(self, result: IngestResult) -> list[dict[str, Any]]:
        """Write each added card's photo under pages/crops and describe it."""
        rows: list[dict[str, Any]] = []
        slots = self._slot_order(result)
        for card, (page_index, slot_index) in zip(result.cards, slots):
            rel = f"pages/crops/page_{page_index + 1:03d}/slot_{slot_index}_{slugify(card.name, max_len=40)}.jpg"
            abs_path = self.paths.job_dir / rel
            abs_path.parent.mkdir(parents=True, exist_ok=True)
            abs_path.write_bytes(card.image)
            rows.append(
                {
                    "card_id": card.id,
                    "name": card.name,
                    "page_index": page_index,
                    "slot_index": slot_index,
                    "crop_path": rel,
                }
            )
        return rows

    @staticmethod
    def _slot_order(result: IngestResult) -> list[tuple[int, int]]:
        # cards are in page order, then slot order
        out: list[tuple[int, int]] = []
        for p in result.pages:
            out.extend((p.page_index, i) for i in range(p.cards_emitted))
        return out

    def write_final(self, job_meta: dict[str, Any], result: IngestResult) -> None:
        now = utc_now_iso()
        rows = self.write_crops(result)

        pages = [p.to_dict() for p in result.pages]
        metrics = {
            "created_at": job_meta.get("created_at", now),
            "finished": True,
            "completed_at": now,
            "pages_total": len(pages),
            "pages_without_names": sum(1 for p in result.pages if p.names_found == 0),
            "names_found": sum(p.names_found for p in result.pages),
            "names_dropped": sum(p.names_dropped for p in result.pages),
            "blank_photos": sum(p.blank_photos for p in result.pages),
            "cards_total": result.cards_added,
            "pages": pages,
            "warnings": result.warnings(),
        }

        job_out = dict(job_meta)
        job_out["finished"] = True
        job_out["completed_at"] = now
        job_out["deck"] = {"id": result.deck.id, "name": result.deck.name, "cards_total": len(result.deck.cards)}

        write_json(self.paths.result_json, {"job": job_out, "cards": rows})
        write_json(self.paths.metrics_json, metrics)
