from __future__ import annotations

from dataclasses import dataclass
from io import BytesIO
from typing import Sequence

from PIL import Image

from .errors import SlotOutOfRange
from .quality import measure_slot_fill
from .types import ExtractedCard, NameRecord, PageDiagnostics, PageRender, PixelRect


WHITE = (255, 255, 255)


@dataclass(frozen=True)
class CropConfig:
    jpeg_quality: int = 90
    blank_tolerance: int = 24
    blank_min_ink_ratio: float = 0.05


def flatten_on_white(image: Image.Image) -> Image.Image:
    """Composite onto an opaque white background and return an RGB image."""
    if image.mode == "RGB":
        return image
    if image.mode in ("La", "RGBa"):
        # premultiplied alpha
        image = image.convert(image.mode.upper())
    if "A" in image.getbands() or "transparency" in image.info:
        rgba = image.convert("RGBA")
        bg = Image.new("RGB", rgba.size, WHITE)
        bg.paste(rgba, mask=rgba.getchannel("A"))
        return bg
    return image.convert("RGB")


def crop_slot(raster: Image.Image, rect: PixelRect) -> Image.Image:
    """Crop ``rect`` out of the raster.

    Raises SlotOutOfRange when the rectangle does not fit inside the raster;
    the template is expected to match the page, so this is a caller error.
    """
    box = rect.to_box()
    w, h = raster.size
    x0, y0, x1, y1 = box
    if x0 < 0 or y0 < 0 or x1 > w or y1 > h or x1 <= x0 or y1 <= y0:
        raise SlotOutOfRange(f"slot box {box} outside raster {w}x{h}")
    return flatten_on_white(raster).crop(box)


def encode_jpeg(image: Image.Image, quality: int = 90) -> bytes:
    buf = BytesIO()
    image.convert("RGB").save(buf, format="JPEG", quality=int(quality))
    return buf.getvalue()


def assemble_page_cards(
    render: PageRender,
    names: Sequence[NameRecord],
    rects: Sequence[PixelRect],
    *,
    crop_cfg: CropConfig | None = None,
) -> tuple[list[ExtractedCard], PageDiagnostics]:
    """Pair the i-th name with the i-th slot rectangle and crop its photo.

    Pairing is purely ordinal. Names beyond the last slot are dropped; a page
    with fewer names than slots simply yields fewer cards. Both cases are
    visible only through the returned diagnostics.
    """
    cfg = crop_cfg or CropConfig()
    n = min(len(names), len(rects))

    diag = PageDiagnostics(
        page_index=render.page_index,
        names_found=len(names),
        slots_available=len(rects),
        names_dropped=max(0, len(names) - len(rects)),
    )

    cards: list[ExtractedCard] = []
    for i in range(n):
        crop = crop_slot(render.raster, rects[i])
        fill = measure_slot_fill(
            crop,
            tolerance=cfg.blank_tolerance,
            min_ink_ratio=cfg.blank_min_ink_ratio,
        )
        if fill.is_blank:
            diag.blank_photos += 1
        cards.append(
            ExtractedCard(
                name=names[i].full_name,
                image=encode_jpeg(crop, quality=cfg.jpeg_quality),
                page_index=render.page_index,
                slot_index=i,
            )
        )

    diag.cards_emitted = len(cards)
    return cards, diag
