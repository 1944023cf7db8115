"""Student name extraction from a page's text stream.

Roster pages label every photo with a line of the form

    Name: Lastname, Firstname Middle  Pronouns: ...

The labels appear in the text stream in the same top-to-bottom order as the
photo slots, so the i-th match belongs to the i-th slot.
"""
from __future__ import annotations

import re
from typing import Iterable

from .types import NameRecord, TextFragment


# last name: letters, hyphens, apostrophes; first name: letters and spaces,
# lazily matched up to the " Pronouns" label.
NAME_PATTERN = re.compile(r"Name:\s*([A-Za-z\-']+),\s*([A-Za-z\s]+?)(?=\s+Pronouns)")


def join_fragments(fragments: Iterable[TextFragment]) -> str:
    return " ".join(f.text for f in fragments)


def extract_names_from_text(text: str) -> list[NameRecord]:
    records: list[NameRecord] = []
    for m in NAME_PATTERN.finditer(text):
        last = m.group(1).strip()
        first = m.group(2).strip()
        records.append(
            NameRecord(
                full_name=f"{first} {last}",
                first_name=first,
                last_name=last,
                span=(m.start(), m.end()),
            )
        )
    return records


def extract_names(fragments: Iterable[TextFragment]) -> list[NameRecord]:
    """Return the page's names in stream order. Empty list when none match."""
    return extract_names_from_text(join_fragments(fragments))
