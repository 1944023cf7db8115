from __future__ import annotations

from dataclasses import dataclass, field
from pathlib import Path
from typing import Any

from .cropper import CropConfig
from .template import DRAKE_ROSTER_V1, RosterTemplate, template_from_dict
from .utils import load_json


DEFAULT_RENDER_SCALE = 2.0


@dataclass(frozen=True)
class EngineConfig:
    render: dict[str, Any] = field(default_factory=dict)
    crop: dict[str, Any] = field(default_factory=dict)
    template: dict[str, Any] = field(default_factory=dict)
    blank: dict[str, Any] = field(default_factory=dict)

    @property
    def render_scale(self) -> float:
        scale = float(self.render.get("scale", DEFAULT_RENDER_SCALE))
        if scale <= 0:
            raise ValueError(f"render.scale must be positive, got {scale}")
        return scale

    def roster_template(self) -> RosterTemplate:
        return template_from_dict(self.template, default=DRAKE_ROSTER_V1)

    def crop_config(self) -> CropConfig:
        return CropConfig(
            jpeg_quality=int(self.crop.get("jpeg_quality", 90)),
            blank_tolerance=int(self.blank.get("paper_tolerance", 24)),
            blank_min_ink_ratio=float(self.blank.get("min_ink_ratio", 0.05)),
        )


def load_config(config_path: str | Path | None) -> EngineConfig:
    if config_path is None or not Path(config_path).exists():
        return EngineConfig()
    data = load_json(config_path)
    return EngineConfig(
        render=data.get("render", {}),
        crop=data.get("crop", {}),
        template=data.get("template", {}),
        blank=data.get("blank", {}),
    )
