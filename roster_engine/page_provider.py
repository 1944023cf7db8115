from __future__ import annotations

from contextlib import contextmanager
from dataclasses import dataclass
from io import BytesIO
from pathlib import Path
from typing import ContextManager, Iterator, Protocol, Union

from PIL import Image

from .errors import DecodeError, ImageRosterError
from .types import PageRender, TextFragment


Document = Union[bytes, str, Path]

IMAGE_EXTS = {".png", ".jpg", ".jpeg", ".webp", ".bmp", ".tif", ".tiff", ".gif"}


class PageSource(Protocol):
    """One opened document; valid only inside the renderer's ``open`` block."""

    @property
    def page_count(self) -> int: ...

    def render(self, page_index: int, scale: float) -> PageRender: ...


class PageRenderer(Protocol):
    def open(self, document: Document) -> ContextManager[PageSource]: ...


def _open_pdf(document: Document):
    doc = _open_raw(document)
    if doc.page_count < 1:
        doc.close()
        raise DecodeError("document has no pages")
    return doc


def _open_raw(document: Document):
    try:
        import fitz  # PyMuPDF
    except Exception as e:  # pragma: no cover
        raise RuntimeError("PyMuPDF is required to read roster PDFs. Install pymupdf.") from e

    if isinstance(document, (str, Path)):
        path = Path(document)
        if path.suffix.lower() in IMAGE_EXTS:
            raise ImageRosterError(
                f"{path.name} is an image; use the PDF version of the roster or add students manually"
            )
        try:
            return fitz.open(path)
        except Exception as e:
            raise DecodeError(f"cannot open {path.name}: {e}") from e

    try:
        return fitz.open(stream=bytes(document), filetype="pdf")
    except Exception as e:
        raise DecodeError(f"cannot open document: {e}") from e


def _page_fragments(page) -> list[TextFragment]:
    """Text spans in content-stream order with their baseline origins."""
    fragments: list[TextFragment] = []
    data = page.get_text("dict")
    for block in data.get("blocks", []):
        if block.get("type", 0) != 0:
            continue
        for line in block.get("lines", []):
            for span in line.get("spans", []):
                text = span.get("text") or ""
                if not text.strip():
                    continue
                x, y = span.get("origin", (0.0, 0.0))
                fragments.append(TextFragment(text=text, x=float(x), y=float(y)))
    return fragments


class PdfPageSource:
    """An open PyMuPDF document. Not safe to share across threads."""

    def __init__(self, doc):
        self._doc = doc

    @property
    def page_count(self) -> int:
        return int(self._doc.page_count)

    def render(self, page_index: int, scale: float) -> PageRender:
        if page_index < 0 or page_index >= self.page_count:
            raise DecodeError(f"page index {page_index} out of range (pages={self.page_count})")
        try:
            import fitz  # PyMuPDF

            page = self._doc.load_page(page_index)
            pix = page.get_pixmap(matrix=fitz.Matrix(scale, scale), alpha=False)
            img = Image.open(BytesIO(pix.tobytes("png"))).convert("RGB")
            fragments = _page_fragments(page)
        except Exception as e:
            raise DecodeError(f"cannot render page {page_index + 1}: {e}") from e
        return PageRender(page_index=page_index, raster=img, scale=float(scale), fragments=fragments)


@dataclass(frozen=True)
class PdfPageRenderer:
    """Renders roster PDF pages with PyMuPDF.

    ``open`` parses the document once for a whole run. ``page_count`` and
    ``render`` are one-shot helpers that open and close it per call.
    """

    @contextmanager
    def open(self, document: Document) -> Iterator[PdfPageSource]:
        doc = _open_pdf(document)
        try:
            yield PdfPageSource(doc)
        finally:
            doc.close()

    def page_count(self, document: Document) -> int:
        with self.open(document) as source:
            return source.page_count

    def render(self, document: Document, page_index: int, scale: float) -> PageRender:
        with self.open(document) as source:
            return source.render(page_index, scale)


def iter_pages(renderer: PageRenderer, document: Document, scale: float) -> Iterator[PageRender]:
    with renderer.open(document) as source:
        for i in range(source.page_count):
            yield source.render(i, scale)
