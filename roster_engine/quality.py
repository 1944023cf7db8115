"""Empty-slot detection for roster photo crops.

A roster page is white paper; a slot that holds a student photo is mostly
covered by pixels that differ from that paper. When the template slot lands
on bare page (a short last page, or a roster whose layout drifted) the crop
is almost all background. The measurement only feeds page diagnostics;
crops are never dropped because of it.
"""
from __future__ import annotations

from dataclasses import dataclass, field

import numpy as np
from PIL import Image


PAPER = (255, 255, 255)

REASON_NO_INK = "NO_INK"


@dataclass
class SlotFill:
    ink_ratio: float  # share of pixels visibly off the paper colour
    contrast: float  # luminance standard deviation, 0 for a flat fill
    ink_box: tuple[int, int, int, int] | None  # (l, t, r, b) of the inked area
    is_blank: bool
    reasons: list[str] = field(default_factory=list)


def measure_slot_fill(
    image: Image.Image,
    *,
    paper: tuple[int, int, int] = PAPER,
    tolerance: int = 24,
    min_ink_ratio: float = 0.05,
) -> SlotFill:
    """Measure how much of a slot crop is covered by something other than paper.

    A pixel counts as ink when any channel is more than ``tolerance`` away
    from ``paper``. A solid-colour photo is fully inked, so it is never blank.
    """
    rgb = np.asarray(image.convert("RGB"), dtype=np.int16)
    ink = np.abs(rgb - np.array(paper, dtype=np.int16)).max(axis=2) > tolerance
    ink_ratio = float(ink.mean()) if ink.size else 0.0

    contrast = float(np.asarray(image.convert("L"), dtype=np.float32).std()) if ink.size else 0.0

    ink_box = None
    if ink.any():
        rows = np.flatnonzero(ink.any(axis=1))
        cols = np.flatnonzero(ink.any(axis=0))
        ink_box = (int(cols[0]), int(rows[0]), int(cols[-1]) + 1, int(rows[-1]) + 1)

    reasons: list[str] = []
    if ink_ratio < min_ink_ratio:
        reasons.append(REASON_NO_INK)

    return SlotFill(
        ink_ratio=ink_ratio,
        contrast=contrast,
        ink_box=ink_box,
        is_blank=bool(reasons),
        reasons=reasons,
    )
