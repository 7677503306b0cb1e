"""Upload type sniffing and lightweight PDF page statistics."""
from __future__ import annotations

from dataclasses import dataclass
import mimetypes
from pathlib import Path
from typing import TYPE_CHECKING, Literal, Optional

if TYPE_CHECKING:  # pragma: no cover
    import fitz


SourceKind = Literal["pdf", "spreadsheet", "document", "text", "image", "unknown"]


@dataclass(slots=True)
class PageFeature:
    """Text and image coverage of one PDF page."""

    page_number: int
    word_count: int
    glyph_count: int
    page_area: float
    image_area: float

    @property
    def image_fraction(self) -> float:
        """Fraction of the page covered by raster images (0.0 – 1.0)."""

        if self.page_area <= 0:
            return 0.0
        return min(1.0, self.image_area / self.page_area)


@dataclass(slots=True)
class SniffResult:
    """Result from sniffing an uploaded file."""

    path: Path
    mime_type: Optional[str]
    kind: SourceKind

    def is_pdf(self) -> bool:
        return self.kind == "pdf"


_PDF_SIGNATURE = b"%PDF"
_ZIP_SIGNATURE = b"PK\x03\x04"

_SPREADSHEET_EXTS = {
    ".csv",
    ".tsv",
    ".xls",
    ".xlsx",
    ".xlsm",
}

_DOCUMENT_EXTS = {".docx", ".doc"}

_TEXT_EXTS = {".txt", ".md"}

_IMAGE_EXTS = {".png", ".jpg", ".jpeg", ".tif", ".tiff", ".bmp", ".gif", ".webp"}

_DOCX_MIME = "application/vnd.openxmlformats-officedocument.wordprocessingml.document"
_XLSX_MIME = "application/vnd.openxmlformats-officedocument.spreadsheetml.sheet"


def sniff_path(path: Path) -> SniffResult:
    """Identify what kind of source an uploaded file is."""

    if not path.exists():
        raise FileNotFoundError(path)

    suffix = path.suffix.lower()
    mime_type, _ = mimetypes.guess_type(path.name)

    if _looks_like_pdf(path):
        return SniffResult(path=path, mime_type=mime_type or "application/pdf", kind="pdf")

    if suffix in _SPREADSHEET_EXTS:
        if suffix == ".csv":
            mime_type = mime_type or "text/csv"
        elif suffix == ".tsv":
            mime_type = mime_type or "text/tab-separated-values"
        else:
            mime_type = mime_type or _XLSX_MIME
        return SniffResult(path=path, mime_type=mime_type, kind="spreadsheet")

    if suffix in _DOCUMENT_EXTS:
        return SniffResult(path=path, mime_type=mime_type or _DOCX_MIME, kind="document")

    if suffix in _TEXT_EXTS:
        return SniffResult(path=path, mime_type=mime_type or "text/plain", kind="text")

    if suffix in _IMAGE_EXTS:
        return SniffResult(path=path, mime_type=mime_type or "image/unknown", kind="image")

    if mime_type == "application/pdf":
        return SniffResult(path=path, mime_type=mime_type, kind="pdf")

    return SniffResult(path=path, mime_type=mime_type, kind="unknown")


def compute_page_features(page: "fitz.Page", *, sort_words: bool = True) -> PageFeature:
    """Count words and glyphs and measure image coverage for a PyMuPDF page."""

    page_area = float(page.rect.width * page.rect.height)
    word_count = 0
    glyph_count = 0
    for word in page.get_text("words", sort=sort_words):
        text = word[4]
        word_count += 1
        glyph_count += len(text.strip())

    image_area = 0.0
    try:
        blocks = page.get_text("dict", sort=sort_words)["blocks"]
    except RuntimeError:
        blocks = []
    for block in blocks:
        if block.get("type") == 1:
            x0, y0, x1, y1 = block.get("bbox", (0.0, 0.0, 0.0, 0.0))
            image_area += max(0.0, float(x1) - float(x0)) * max(0.0, float(y1) - float(y0))

    return PageFeature(
        page_number=page.number + 1,
        word_count=word_count,
        glyph_count=glyph_count,
        page_area=page_area,
        image_area=image_area,
    )


def _looks_like_pdf(path: Path) -> bool:
    """Return True if the file extension or header suggests a PDF document."""

    if path.suffix.lower() == ".pdf":
        return True

    with path.open("rb") as handle:
        prefix = handle.read(len(_PDF_SIGNATURE))
    return prefix.startswith(_PDF_SIGNATURE)


def looks_like_zip(path: Path) -> bool:
    """``.docx`` and ``.xlsx`` files are zip containers."""

    with path.open("rb") as handle:
        return handle.read(len(_ZIP_SIGNATURE)) == _ZIP_SIGNATURE
