from __future__ import annotations

from dataclasses import dataclass, field

from PIL import Image


@dataclass(frozen=True)
class TextFragment:
    text: str
    x: float  # document units (points)
    y: float


@dataclass
class PageRender:
    page_index: int  # 0-based
    raster: Image.Image
    scale: float  # pixels per document point
    fragments: list[TextFragment] = field(default_factory=list)

    @property
    def page_id(self) -> str:
        return f"page_{self.page_index + 1:03d}"


@dataclass(frozen=True)
class NameRecord:
    full_name: str
    first_name: str
    last_name: str
    span: tuple[int, int] = (0, 0)  # offsets in the joined text blob


@dataclass(frozen=True)
class PhotoSlot:
    index: int
    x: float
    y: float
    width: float
    height: float


@dataclass(frozen=True)
class PixelRect:
    x: float
    y: float
    width: float
    height: float

    def to_box(self) -> tuple[int, int, int, int]:
        """Integer (left, top, right, bottom) box, truncating toward zero."""
        x0 = int(self.x)
        y0 = int(self.y)
        return x0, y0, x0 + int(self.width), y0 + int(self.height)


@dataclass(frozen=True)
class ExtractedCard:
    name: str
    image: bytes  # JPEG
    page_index: int = 0
    slot_index: int = 0


@dataclass
class PageDiagnostics:
    page_index: int
    names_found: int = 0
    slots_available: int = 0
    cards_emitted: int = 0
    names_dropped: int = 0
    blank_photos: int = 0

    @property
    def page_number(self) -> int:
        return self.page_index + 1

    @property
    def complete(self) -> bool:
        return self.names_found > 0 and self.names_dropped == 0

    def to_dict(self) -> dict[str, int]:
        return {
            "page_index": self.page_index,
            "names_found": self.names_found,
            "slots_available": self.slots_available,
            "cards_emitted": self.cards_emitted,
            "names_dropped": self.names_dropped,
            "blank_photos": self.blank_photos,
        }
