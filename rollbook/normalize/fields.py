"""Map loosely-labelled spreadsheet rows onto the canonical student schema."""
from __future__ import annotations

from dataclasses import dataclass, field
import logging
import math
import re
from typing import Any, Dict, Iterable, List, Mapping, Optional, Tuple

from rollbook.normalize.schema import StudentRecord

LOGGER = logging.getLogger(__name__)

CANONICAL_FIELDS: Tuple[str, ...] = ("roll_number", "name", "course", "department", "year")

FIELD_ALIASES: Dict[str, Tuple[str, ...]] = {
    "roll_number": (
        "Roll Number",
        "RollNumber",
        "roll_number",
        "Roll_Number",
        "ROLL_NUMBER",
        "Roll No",
        "RollNo",
        "roll_no",
    ),
    "name": ("Name", "Student Name", "StudentName", "student_name"),
    "course": ("Course", "Program"),
    "department": ("Department", "Dept"),
    "year": ("Year", "Admission Year", "AdmissionYear", "admission_year"),
}

_WHITESPACE_RE = re.compile(r"\s+")


@dataclass(slots=True)
class NormalizationResult:
    """Valid records produced from a set of rows, plus what was discarded."""

    records: List[StudentRecord] = field(default_factory=list)
    dropped: int = 0
    duplicates: int = 0


def header_form(header: Any) -> str:
    """Whitespace-free, lower-cased form used to compare headers."""

    return _WHITESPACE_RE.sub("", str(header)).lower()


def _ordered_forms(aliases: Iterable[str]) -> List[str]:
    forms: List[str] = []
    for alias in aliases:
        form = header_form(alias)
        if form not in forms:
            forms.append(form)
    return forms


_ALIAS_FORMS: Dict[str, List[str]] = {
    name: _ordered_forms(aliases) for name, aliases in FIELD_ALIASES.items()
}


def known_header_forms() -> frozenset[str]:
    """Every normalized alias; matching keys never land in ``additional_info``."""

    return frozenset(form for forms in _ALIAS_FORMS.values() for form in forms)


def is_empty(value: Any) -> bool:
    if value is None:
        return True
    if isinstance(value, float) and math.isnan(value):
        return True
    if isinstance(value, str) and not value.strip():
        return True
    return False


def _probe(row: Mapping[str, Any], keys_by_form: Mapping[str, List[str]], field_name: str) -> Any:
    for form in _ALIAS_FORMS[field_name]:
        for key in keys_by_form.get(form, []):
            value = row[key]
            if not is_empty(value):
                return value
    return None


def _as_text(value: Any) -> Optional[str]:
    if is_empty(value):
        return None
    return str(value).strip()


def normalize_row(row: Mapping[str, Any], source_file: Optional[str] = None) -> StudentRecord:
    """Convert one header -> value row into a :class:`StudentRecord`.

    The returned record is invalid (``is_valid()`` is False) when no roll
    number alias carries a value; callers filter those out.
    """

    keys_by_form: Dict[str, List[str]] = {}
    for key in row:
        keys_by_form.setdefault(header_form(key), []).append(key)

    known = known_header_forms()
    additional_info = {key: value for key, value in row.items() if header_form(key) not in known}

    return StudentRecord(
        roll_number=_as_text(_probe(row, keys_by_form, "roll_number")),
        name=_as_text(_probe(row, keys_by_form, "name")),
        course=_as_text(_probe(row, keys_by_form, "course")),
        department=_as_text(_probe(row, keys_by_form, "department")),
        year=_probe(row, keys_by_form, "year"),
        source_file=source_file,
        additional_info=additional_info,
    )


def normalize_rows(rows: Iterable[Mapping[str, Any]], source_file: Optional[str] = None) -> NormalizationResult:
    """Normalize many rows, dropping invalid ones.

    Rows sharing a roll number collapse onto one record and the later row
    replaces the earlier one, matching the store's upsert semantics.
    """

    result = NormalizationResult()
    by_roll: Dict[str, StudentRecord] = {}
    for row in rows:
        record = normalize_row(row, source_file=source_file)
        if not record.is_valid():
            result.dropped += 1
            continue
        if record.roll_number in by_roll:
            result.duplicates += 1
        by_roll[record.roll_number] = record

    result.records = list(by_roll.values())
    if result.dropped:
        LOGGER.info("Dropped %d rows without a roll number", result.dropped)
    if result.duplicates:
        LOGGER.debug("Collapsed %d duplicate roll numbers (last row wins)", result.duplicates)
    return result


__all__ = [
    "CANONICAL_FIELDS",
    "FIELD_ALIASES",
    "NormalizationResult",
    "header_form",
    "is_empty",
    "known_header_forms",
    "normalize_row",
    "normalize_rows",
]
