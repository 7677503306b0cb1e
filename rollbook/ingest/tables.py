"""Roster table extraction from PDFs using pdfplumber."""
from __future__ import annotations

from dataclasses import dataclass, field
import logging
from pathlib import Path
from typing import Any, Callable, Dict, List, Optional, Sequence

from rollbook.normalize.fields import FIELD_ALIASES, header_form

try:  # pragma: no cover - optional dependency guard
    import pdfplumber  # type: ignore
except ImportError:  # pragma: no cover
    pdfplumber = None  # type: ignore[assignment]


LOGGER = logging.getLogger(__name__)

PdfPlumberOpen = Callable[[Path], Any]

_ROLL_HEADER_FORMS = {header_form(alias) for alias in FIELD_ALIASES["roll_number"]}


@dataclass(slots=True)
class RosterTable:
    """A table whose header carries a roll number column."""

    columns: List[str]
    rows: List[Dict[str, Any]]
    page_numbers: List[int] = field(default_factory=list)


def extract_table_rows(
    path: Path,
    *,
    pages: Optional[Sequence[int]] = None,
    open_pdf: Optional[PdfPlumberOpen] = None,
) -> List[RosterTable]:
    """Find roster tables in a PDF and map each body row to ``header -> cell``.

    Tables that continue across pages without repeating their header are
    appended to the previous roster when the column count matches.
    """

    pdf_opener = open_pdf or (pdfplumber.open if pdfplumber is not None else None)
    if pdf_opener is None:  # pragma: no cover - dependency missing in runtime env
        raise RuntimeError("pdfplumber is required for table extraction.")

    rosters: List[RosterTable] = []
    with pdf_opener(path) as pdf:
        total_pages = len(pdf.pages)
        page_candidates = list(pages) if pages is not None else list(range(1, total_pages + 1))

        for page_number in page_candidates:
            if page_number < 1 or page_number > total_pages:
                continue
            page = pdf.pages[page_number - 1]
            for raw_table in page.extract_tables() or []:
                cells = _clean_rows(raw_table)
                if not cells:
                    continue
                header_index = _find_header_row(cells)
                if header_index is None:
                    previous = rosters[-1] if rosters else None
                    if previous is not None and len(cells[0]) == len(previous.columns):
                        previous.rows.extend(_to_mappings(previous.columns, cells))
                        if page_number not in previous.page_numbers:
                            previous.page_numbers.append(page_number)
                    continue
                columns = _unique_headers(cells[header_index])
                rosters.append(
                    RosterTable(
                        columns=columns,
                        rows=_to_mappings(columns, cells[header_index + 1 :]),
                        page_numbers=[page_number],
                    )
                )

    LOGGER.debug("Found %d roster tables in %s", len(rosters), path)
    return rosters


def _clean_rows(table: Sequence[Sequence[Any]]) -> List[List[str]]:
    """Collapse whitespace inside cells and drop rows that are entirely blank."""

    cleaned: List[List[str]] = []
    for row in table:
        values = [" ".join(str(cell).split()) if cell is not None else "" for cell in row]
        if any(values):
            cleaned.append(values)
    return cleaned


def _find_header_row(rows: List[List[str]]) -> Optional[int]:
    for index, row in enumerate(rows):
        if any(header_form(cell) in _ROLL_HEADER_FORMS for cell in row if cell):
            return index
    return None


def _unique_headers(headers: List[str]) -> List[str]:
    """Fill blank headers and suffix repeats so every column keeps its value."""

    result: List[str] = []
    seen: Dict[str, int] = {}
    for index, header in enumerate(headers):
        name = header or f"Column {index + 1}"
        base_name = name
        counter = 1
        while name in seen:
            counter += 1
            name = f"{base_name}_{counter}"
        seen[name] = index
        result.append(name)
    return result


def _to_mappings(columns: List[str], rows: List[List[str]]) -> List[Dict[str, Any]]:
    mapped: List[Dict[str, Any]] = []
    for row in rows:
        values: List[Optional[str]] = [cell or None for cell in row]
        values.extend([None] * (len(columns) - len(values)))
        mapped.append(dict(zip(columns, values)))
    return mapped


__all__ = ["RosterTable", "extract_table_rows"]
