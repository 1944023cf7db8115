from __future__ import annotations

from contextlib import contextmanager
from pathlib import Path
from typing import Sequence

import pytest
from PIL import Image, ImageDraw

from roster_engine.errors import DecodeError
from roster_engine.store import JsonDeckStore
from roster_engine.template import DRAKE_ROSTER_V1
from roster_engine.types import PageRender, TextFragment


# letter page in points
PAGE_W_PT = 612
PAGE_H_PT = 792

SLOT_COLORS = [
    (200, 30, 30),
    (30, 160, 40),
    (30, 60, 200),
    (220, 180, 20),
]


def roster_fragments(names: Sequence[tuple[str, str]]) -> list[TextFragment]:
    """Text stream of a roster page for (last, first) pairs, one label per slot."""
    frags: list[TextFragment] = [TextFragment(text="Class Roster SPRING", x=24, y=40)]
    for i, (last, first) in enumerate(names):
        y = 100 + i * 163
        frags.append(TextFragment(text=f"Name: {last}, {first}", x=160, y=y))
        frags.append(TextFragment(text="Pronouns: they/them", x=160, y=y + 14))
        frags.append(TextFragment(text="Major: Biology", x=160, y=y + 28))
    return frags


def roster_raster(scale: float = 2.0, slots: int = 4) -> Image.Image:
    """White page with one solid coloured block per template slot."""
    img = Image.new("RGB", (int(PAGE_W_PT * scale), int(PAGE_H_PT * scale)), (255, 255, 255))
    draw = ImageDraw.Draw(img)
    for i in range(slots):
        r = DRAKE_ROSTER_V1.slot_rect(i, scale)
        x0, y0, x1, y1 = r.to_box()
        draw.rectangle([x0, y0, x1 - 1, y1 - 1], fill=SLOT_COLORS[i % len(SLOT_COLORS)])
    return img


class FakeRenderer:
    """In-memory page renderer; ``fail_on`` makes one page raise DecodeError."""

    def __init__(self, pages: list[list[TextFragment]], *, scale_override: float | None = None, fail_on: int | None = None):
        self.pages = pages
        self.fail_on = fail_on
        self.scale_override = scale_override
        self.rendered: list[int] = []
        self.opened = 0

    @property
    def page_count(self) -> int:
        return len(self.pages)

    @contextmanager
    def open(self, document):
        self.opened += 1
        yield self

    def render(self, page_index: int, scale: float) -> PageRender:
        if page_index == self.fail_on:
            raise DecodeError(f"cannot render page {page_index + 1}")
        self.rendered.append(page_index)
        s = self.scale_override or scale
        return PageRender(
            page_index=page_index,
            raster=roster_raster(s),
            scale=s,
            fragments=list(self.pages[page_index]),
        )


def mean_color(jpeg_bytes: bytes) -> tuple[float, float, float]:
    from io import BytesIO

    img = Image.open(BytesIO(jpeg_bytes)).convert("RGB")
    w, h = img.size
    px = [img.getpixel((x, y)) for x in range(w // 4, w - w // 4, 7) for y in range(h // 4, h - h // 4, 7)]
    return tuple(sum(p[c] for p in px) / len(px) for c in range(3))  # type: ignore[return-value]


def close_to(color: Sequence[float], expected: Sequence[int], tol: float = 12.0) -> bool:
    return all(abs(a - b) <= tol for a, b in zip(color, expected))


def write_roster_pdf(path: Path, pages: list[list[tuple[str, str]]]) -> Path:
    """Build a real roster PDF with PyMuPDF: coloured photo blocks plus name labels."""
    import fitz  # PyMuPDF

    doc = fitz.open()
    for names in pages:
        page = doc.new_page(width=PAGE_W_PT, height=PAGE_H_PT)
        page.insert_text((24, 40), "Class Roster", fontsize=11)
        for i, (last, first) in enumerate(names):
            slot = DRAKE_ROSTER_V1.slots()[i % DRAKE_ROSTER_V1.slot_count]
            rgb = tuple(c / 255 for c in SLOT_COLORS[i % len(SLOT_COLORS)])
            rect = fitz.Rect(slot.x, slot.y, slot.x + slot.width, slot.y + slot.height)
            page.draw_rect(rect, color=rgb, fill=rgb)
            y = 100 + i * 163
            page.insert_text((160, y), f"Name: {last}, {first}", fontsize=10)
            page.insert_text((160, y + 14), "Pronouns: she/her", fontsize=10)
    doc.save(str(path))
    doc.close()
    return path


@pytest.fixture
def store(tmp_path: Path) -> JsonDeckStore:
    return JsonDeckStore(tmp_path / "workspace")


@pytest.fixture
def jpeg_bytes() -> bytes:
    from io import BytesIO

    buf = BytesIO()
    Image.new("RGB", (8, 8), (10, 20, 30)).save(buf, format="JPEG")
    return buf.getvalue()
