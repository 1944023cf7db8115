"""Name extraction from roster text streams."""
from __future__ import annotations

from roster_engine.names import extract_names, extract_names_from_text, join_fragments
from roster_engine.types import TextFragment

from conftest import roster_fragments


class TestJoinFragments:
    def test_joins_in_stream_order_with_spaces(self):
        frags = [TextFragment("Name:", 0, 0), TextFragment("Smith,", 10, 0), TextFragment("Jane", 20, 0)]
        assert join_fragments(frags) == "Name: Smith, Jane"

    def test_empty_stream(self):
        assert join_fragments([]) == ""


class TestExtractNames:
    def test_first_name_then_last_name(self):
        records = extract_names_from_text("Name: Smith, Jane Pronouns: she/her")
        assert [r.full_name for r in records] == ["Jane Smith"]
        assert records[0].first_name == "Jane"
        assert records[0].last_name == "Smith"

    def test_multiple_matches_keep_text_order(self):
        text = "header Name: Smith, Jane Pronouns: she/her x Name: Doe, John Pronouns: he/him footer"
        records = extract_names_from_text(text)
        assert [r.full_name for r in records] == ["Jane Smith", "John Doe"]
        assert records[0].span[0] < records[1].span[0]

    def test_hyphen_and_apostrophe_last_names(self):
        text = "Name: O'Brien-Lee, Mary Ann Pronouns: she/her"
        assert [r.full_name for r in extract_names_from_text(text)] == ["Mary Ann O'Brien-Lee"]

    def test_whitespace_around_label_is_optional(self):
        text = "Name:Nguyen,Bao   Pronouns: he/him"
        assert [r.full_name for r in extract_names_from_text(text)] == ["Bao Nguyen"]

    def test_requires_pronouns_label(self):
        assert extract_names_from_text("Name: Smith, Jane Major: Biology") == []

    def test_no_match_returns_empty_list(self):
        assert extract_names_from_text("Class Roster Spring term") == []

    def test_from_fragments(self):
        frags = roster_fragments([("Smith", "Jane"), ("Doe", "John"), ("Park", "Min Jun")])
        assert [r.full_name for r in extract_names(frags)] == ["Jane Smith", "John Doe", "Min Jun Park"]

    def test_split_fragments_still_match(self):
        frags = [
            TextFragment("Name:", 0, 0),
            TextFragment("Doe,", 0, 0),
            TextFragment("John", 0, 0),
            TextFragment("Pronouns:", 0, 0),
            TextFragment("he/him", 0, 0),
        ]
        assert [r.full_name for r in extract_names(frags)] == ["John Doe"]

    def test_no_upper_bound_on_matches(self):
        letters = "ABCDEFG"
        text = " ".join(f"Name: Last{c}, First{c} Pronouns: x" for c in letters)
        records = extract_names_from_text(text)
        assert [r.full_name for r in records] == [f"First{c} Last{c}" for c in letters]
