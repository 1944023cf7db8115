from __future__ import annotations

from dataclasses import dataclass, field
from typing import Sequence

from .cropper import CropConfig, assemble_page_cards
from .deck import Card
from .job import JobPaths, record_error
from .names import extract_names
from .page_provider import Document, PageRenderer, PageSource, PdfPageRenderer
from .template import DRAKE_ROSTER_V1, RosterTemplate, locate_slots
from .types import ExtractedCard, PageDiagnostics


@dataclass
class PageResult:
    cards: list[ExtractedCard]
    diagnostics: PageDiagnostics


@dataclass
class PipelineResult:
    cards: list[ExtractedCard] = field(default_factory=list)
    pages: list[PageDiagnostics] = field(default_factory=list)

    @property
    def pages_without_names(self) -> list[int]:
        return [p.page_index for p in self.pages if p.names_found == 0]

    @property
    def names_dropped(self) -> int:
        return sum(p.names_dropped for p in self.pages)


def to_card_records(extracted: Sequence[ExtractedCard]) -> list[Card]:
    return [Card(name=c.name, image=c.image, progress=0) for c in extracted]


class RosterPipeline:
    """Walks a roster document page by page and collects (name, photo) pairs.

    Pages are processed strictly in order. A renderer failure on any page
    aborts the run with DecodeError; a page without recognisable names just
    contributes nothing.
    """

    def __init__(
        self,
        renderer: PageRenderer | None = None,
        template: RosterTemplate = DRAKE_ROSTER_V1,
        scale: float = 2.0,
        crop_cfg: CropConfig | None = None,
        paths: JobPaths | None = None,
    ):
        if scale <= 0:
            raise ValueError(f"render scale must be positive, got {scale}")
        self.renderer = renderer or PdfPageRenderer()
        self.template = template
        self.scale = float(scale)
        self.crop_cfg = crop_cfg or CropConfig()
        self.paths = paths

    def process_page(self, document: Document, page_index: int) -> PageResult:
        with self.renderer.open(document) as source:
            return self._process(source, page_index)

    def _process(self, source: PageSource, page_index: int) -> PageResult:
        render = source.render(page_index, self.scale)

        names = extract_names(render.fragments)
        rects = locate_slots(self.template, render.scale)
        cards, diag = assemble_page_cards(render, names, rects, crop_cfg=self.crop_cfg)

        if self.paths is not None:
            if diag.names_found == 0:
                record_error(self.paths, page_id=render.page_id, stage="names", message="no_names_found")
            if diag.names_dropped:
                record_error(
                    self.paths,
                    page_id=render.page_id,
                    stage="assemble",
                    message=f"names_dropped={diag.names_dropped} slots={diag.slots_available}",
                )
            if diag.blank_photos:
                record_error(
                    self.paths,
                    page_id=render.page_id,
                    stage="assemble",
                    message=f"blank_photos={diag.blank_photos}",
                )
        return PageResult(cards=cards, diagnostics=diag)

    def run(self, document: Document) -> PipelineResult:
        result = PipelineResult()
        with self.renderer.open(document) as source:
            for i in range(source.page_count):
                page = self._process(source, i)
                result.cards.extend(page.cards)
                result.pages.append(page.diagnostics)
        return result
