"""Read the first sheet of a spreadsheet upload into row mappings."""
from __future__ import annotations

import logging
from pathlib import Path
from typing import Any, Dict, List
import zipfile

import pandas as pd

LOGGER = logging.getLogger(__name__)


class EmptySourceError(ValueError):
    """Raised when an upload contains nothing that could hold student records."""


# Cells are read as text so roll numbers keep leading zeros and never gain a ".0".
_READ_OPTIONS: Dict[str, Any] = {"dtype": str, "keep_default_na": False, "na_values": [""]}


def _to_scalar(value: Any) -> Any:
    if value is None:
        return None
    if isinstance(value, str):
        return value if value.strip() else None
    if pd.isna(value):
        return None
    if hasattr(value, "item"):
        # numpy scalar -> builtin
        return value.item()
    return value


def read_frame(path: Path) -> pd.DataFrame:
    suffix = path.suffix.lower()
    if suffix == ".csv":
        return pd.read_csv(path, **_READ_OPTIONS)
    if suffix == ".tsv":
        return pd.read_csv(path, sep="\t", **_READ_OPTIONS)
    # sheet_name=0 mirrors the upload form: only the first sheet is read.
    return pd.read_excel(path, sheet_name=0, **_READ_OPTIONS)


def read_rows(path: Path) -> List[Dict[str, Any]]:
    """Return one ``header -> value`` mapping per data row, blanks as ``None``."""

    try:
        frame = read_frame(path)
    except (ValueError, zipfile.BadZipFile) as exc:
        # pandas' EmptyDataError and ParserError are ValueErrors.
        raise EmptySourceError(f"The spreadsheet {path.name} could not be read: {exc}") from exc

    rows: List[Dict[str, Any]] = []
    for record in frame.to_dict(orient="records"):
        row = {str(key): _to_scalar(value) for key, value in record.items()}
        if any(value is not None for value in row.values()):
            rows.append(row)

    if not rows:
        raise EmptySourceError(f"The spreadsheet {path.name} appears to be empty")

    LOGGER.info("Read %d rows from %s", len(rows), path.name)
    return rows


__all__ = ["EmptySourceError", "read_frame", "read_rows"]
