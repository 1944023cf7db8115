from __future__ import annotations

from dataclasses import asdict, dataclass
from pathlib import Path
from typing import Any

from .types import PhotoSlot, PixelRect
from .utils import load_json


@dataclass(frozen=True)
class RosterTemplate:
    """Fixed photo geometry of one roster layout, in document points.

    Slots share one origin column and size and are stacked vertically with a
    uniform pitch between consecutive origins.
    """
    name: str
    version: str
    x0: float
    y0: float
    width: float
    height: float
    pitch: float
    slot_count: int

    def slots(self) -> list[PhotoSlot]:
        return [
            PhotoSlot(index=i, x=self.x0, y=self.y0 + i * self.pitch, width=self.width, height=self.height)
            for i in range(self.slot_count)
        ]

    def slot_rect(self, index: int, scale: float) -> PixelRect:
        if index < 0 or index >= self.slot_count:
            raise IndexError(f"slot index {index} outside template {self.name} (K={self.slot_count})")
        s = float(scale)
        return PixelRect(
            x=self.x0 * s,
            y=(self.y0 + index * self.pitch) * s,
            width=self.width * s,
            height=self.height * s,
        )

    def to_dict(self) -> dict[str, Any]:
        return asdict(self)


# Measured from the Drake class roster PDF (averages over the four photos).
DRAKE_ROSTER_V1 = RosterTemplate(
    name="drake_roster",
    version="1",
    x0=24,
    y0=78,
    width=111,
    height=147,
    pitch=163,
    slot_count=4,
)


def locate_slots(template: RosterTemplate, scale: float) -> list[PixelRect]:
    return [template.slot_rect(i, scale) for i in range(template.slot_count)]


def template_from_dict(data: dict[str, Any] | None, *, default: RosterTemplate = DRAKE_ROSTER_V1) -> RosterTemplate:
    """Build a template from a config section; missing keys fall back to ``default``."""
    if not data:
        return default
    base = default.to_dict()
    unknown = set(data) - set(base)
    if unknown:
        raise ValueError(f"unknown template fields: {sorted(unknown)}")
    base.update(data)
    slot_count = int(base["slot_count"])
    if slot_count < 1:
        raise ValueError("template slot_count must be >= 1")
    return RosterTemplate(
        name=str(base["name"]),
        version=str(base["version"]),
        x0=float(base["x0"]),
        y0=float(base["y0"]),
        width=float(base["width"]),
        height=float(base["height"]),
        pitch=float(base["pitch"]),
        slot_count=slot_count,
    )


def load_template(path: str | Path) -> RosterTemplate:
    return template_from_dict(load_json(path))
