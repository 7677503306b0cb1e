"""Raw text from Word documents via python-docx."""
from __future__ import annotations

import logging
from pathlib import Path
from typing import List

import docx

from .sniff_mime import looks_like_zip

LOGGER = logging.getLogger(__name__)


class UnsupportedDocumentError(ValueError):
    """Raised for uploads whose format cannot be read."""


def read_docx_text(path: Path) -> str:
    """Paragraph text followed by table cell text, one line per paragraph or row."""

    if path.suffix.lower() == ".doc" or not looks_like_zip(path):
        raise UnsupportedDocumentError(
            f"{path.name} is not a .docx file; save legacy Word documents as .docx first"
        )

    document = docx.Document(str(path))
    lines: List[str] = [paragraph.text for paragraph in document.paragraphs]
    for table in document.tables:
        for row in table.rows:
            cells = [cell.text.strip() for cell in row.cells]
            lines.append(" ".join(cell for cell in cells if cell))

    text = "\n".join(line for line in lines if line.strip())
    LOGGER.debug("Read %d lines of text from %s", text.count("\n") + 1 if text else 0, path.name)
    return text


__all__ = ["UnsupportedDocumentError", "read_docx_text"]
