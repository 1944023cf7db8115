"""Document orchestration over a fake page renderer."""
from __future__ import annotations

import json
from io import BytesIO

import pytest
from PIL import Image

from roster_engine.errors import DecodeError
from roster_engine.job import create_job_dirs, init_job_outputs
from roster_engine.pipeline import RosterPipeline, to_card_records
from roster_engine.template import template_from_dict

from conftest import SLOT_COLORS, FakeRenderer, close_to, mean_color, roster_fragments


class TestRosterPipeline:
    def test_cards_in_page_then_slot_order(self):
        renderer = FakeRenderer(
            [
                roster_fragments([("Smith", "Jane"), ("Doe", "John"), ("Lee", "Ann"), ("Kim", "Sun")]),
                roster_fragments([("Ortiz", "Luis"), ("Patel", "Riya")]),
            ]
        )
        result = RosterPipeline(renderer=renderer).run(b"%PDF")

        assert [c.name for c in result.cards] == [
            "Jane Smith",
            "John Doe",
            "Ann Lee",
            "Sun Kim",
            "Luis Ortiz",
            "Riya Patel",
        ]
        assert [(c.page_index, c.slot_index) for c in result.cards] == [
            (0, 0), (0, 1), (0, 2), (0, 3), (1, 0), (1, 1),
        ]
        assert close_to(mean_color(result.cards[4].image), SLOT_COLORS[0])
        assert [p.cards_emitted for p in result.pages] == [4, 2]

    def test_page_without_names_is_skipped(self):
        renderer = FakeRenderer(
            [
                roster_fragments([("Smith", "Jane")]),
                [],
                roster_fragments([("Doe", "John")]),
            ]
        )
        result = RosterPipeline(renderer=renderer).run(b"%PDF")

        assert [c.name for c in result.cards] == ["Jane Smith", "John Doe"]
        assert renderer.rendered == [0, 1, 2]
        assert result.pages_without_names == [1]
        assert result.pages[1].names_found == 0

    def test_overfull_page_drops_extra_names(self):
        names = [("Aa", "Xa"), ("Bb", "Xb"), ("Cc", "Xc"), ("Dd", "Xd"), ("Ee", "Xe")]
        result = RosterPipeline(renderer=FakeRenderer([roster_fragments(names)])).run(b"%PDF")

        assert [c.name for c in result.cards] == ["Xa Aa", "Xb Bb", "Xc Cc", "Xd Dd"]
        assert result.names_dropped == 1

    def test_document_opened_once_per_run(self):
        renderer = FakeRenderer([roster_fragments([("Smith", "Jane")])] * 3)
        RosterPipeline(renderer=renderer).run(b"%PDF")
        assert renderer.opened == 1
        assert renderer.rendered == [0, 1, 2]

    def test_process_single_page(self):
        renderer = FakeRenderer([[], roster_fragments([("Doe", "John")])])
        page = RosterPipeline(renderer=renderer).process_page(b"%PDF", 1)
        assert [c.name for c in page.cards] == ["John Doe"]
        assert page.diagnostics.page_index == 1

    def test_renderer_failure_propagates(self):
        renderer = FakeRenderer([roster_fragments([("Smith", "Jane")])] * 3, fail_on=1)
        with pytest.raises(DecodeError):
            RosterPipeline(renderer=renderer).run(b"%PDF")

    def test_uses_render_scale_of_the_page(self):
        renderer = FakeRenderer([roster_fragments([("Smith", "Jane")])], scale_override=1.0)
        result = RosterPipeline(renderer=renderer, scale=2.0).run(b"%PDF")
        assert Image.open(BytesIO(result.cards[0].image)).size == (111, 147)

    def test_injected_template(self):
        two_slot = template_from_dict({"name": "two_up", "slot_count": 2})
        renderer = FakeRenderer([roster_fragments([("Aa", "Xa"), ("Bb", "Xb"), ("Cc", "Xc")])])
        result = RosterPipeline(renderer=renderer, template=two_slot).run(b"%PDF")
        assert len(result.cards) == 2
        assert result.pages[0].slots_available == 2

    def test_invalid_scale(self):
        with pytest.raises(ValueError):
            RosterPipeline(renderer=FakeRenderer([]), scale=0)

    def test_records_page_problems_to_errors_jsonl(self, tmp_path):
        paths = create_job_dirs(tmp_path, "job_001")
        init_job_outputs(paths)
        names = [("Aa", "Xa"), ("Bb", "Xb"), ("Cc", "Xc"), ("Dd", "Xd"), ("Ee", "Xe")]
        renderer = FakeRenderer([[], roster_fragments(names)])
        RosterPipeline(renderer=renderer, paths=paths).run(b"%PDF")

        lines = [json.loads(l) for l in paths.errors_jsonl.read_text(encoding="utf-8").splitlines() if l.strip()]
        assert {"page_id": "page_001", "stage": "names", "message": "no_names_found"} in lines
        assert any(l["page_id"] == "page_002" and "names_dropped=1" in l["message"] for l in lines)


class TestToCardRecords:
    def test_progress_starts_at_zero(self):
        result = RosterPipeline(renderer=FakeRenderer([roster_fragments([("Smith", "Jane")])])).run(b"%PDF")
        cards = to_card_records(result.cards)
        assert len(cards) == 1
        assert cards[0].name == "Jane Smith"
        assert cards[0].progress == 0
        assert cards[0].image == result.cards[0].image
        assert cards[0].id
