"""Plain text extraction from PDF rosters built on top of PyMuPDF."""
from __future__ import annotations

from dataclasses import dataclass, field
import logging
from pathlib import Path
from typing import List

from .sniff_mime import compute_page_features

try:  # pragma: no cover - import guarded for environments without PyMuPDF
    import fitz  # type: ignore
except ImportError:  # pragma: no cover
    fitz = None  # type: ignore[assignment]


LOGGER = logging.getLogger(__name__)


@dataclass(slots=True)
class PageText:
    """Text of one page in reading order."""

    page_number: int
    text: str
    word_count: int
    glyph_count: int
    image_fraction: float


@dataclass(slots=True)
class PdfTextExtraction:
    """Container for a PDF's textual content."""

    pages: List[PageText] = field(default_factory=list)
    likely_scanned: bool = False

    @property
    def text(self) -> str:
        return "\n".join(page.text for page in self.pages if page.text)


def extract_pdf_text(path: Path, *, sort: bool = True) -> PdfTextExtraction:
    """Extract per-page text from a PDF, flagging pages without a text layer."""

    if fitz is None:  # pragma: no cover
        raise RuntimeError("PyMuPDF is required to extract PDF text.")

    pages: List[PageText] = []
    with fitz.open(path) as document:  # type: ignore[call-arg]
        for page in document:
            feature = compute_page_features(page, sort_words=sort)
            pages.append(
                PageText(
                    page_number=page.number + 1,
                    text=page.get_text("text", sort=sort).strip(),
                    word_count=feature.word_count,
                    glyph_count=feature.glyph_count,
                    image_fraction=feature.image_fraction,
                )
            )

    likely_scanned = _is_likely_scanned(pages)
    if likely_scanned:
        LOGGER.warning("%s looks like a scanned PDF; roll numbers may not be readable", path.name)
    return PdfTextExtraction(pages=pages, likely_scanned=likely_scanned)


def _is_likely_scanned(pages: List[PageText]) -> bool:
    """Pages that are mostly image with almost no glyphs have no usable text layer."""

    if not pages:
        return False
    sparse = [page for page in pages if page.glyph_count < 50]
    avg_image_fraction = sum(page.image_fraction for page in pages) / len(pages)
    return len(sparse) == len(pages) and (avg_image_fraction >= 0.5 or not any(p.glyph_count for p in pages))
