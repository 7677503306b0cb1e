"""Pull student records out of free-form document text.

Roll numbers are located line by line with an ordered set of patterns. Each
hit then looks at a small window of neighbouring lines for labelled name,
department and course values, so loosely formatted lists such as::

    Roll No: 22CSE1015
    Name: Asha Rao
    Department: Computer Science

still produce complete records. The admission year is never searched for; it
is derived from the first two digits of the roll number.
"""

from __future__ import annotations

from dataclasses import dataclass, field
import logging
import re
from typing import Dict, List, Optional, Sequence

from rollbook.normalize.schema import StudentRecord

LOGGER = logging.getLogger(__name__)

WINDOW = 2
"""Lines searched above and below a roll number for related fields."""

_ROLL_PATTERNS: Sequence[re.Pattern[str]] = (
    re.compile(r"\b\d{2}[A-Z]{3}\d{4}\b"),
    re.compile(r"\b\d{2,4}[A-Z]{2,4}\d{3,4}\b"),
    re.compile(r"\bRoll\s*No\.?\s*:?\s*(\d{2}[A-Z]{3}\d{4})\b", re.IGNORECASE),
    re.compile(r"\bRoll\s*Number\s*:?\s*(\d{2}[A-Z]{3}\d{4})\b", re.IGNORECASE),
)

_NAME_PATTERNS: Sequence[re.Pattern[str]] = (
    re.compile(r"\bName\b\s*:?\s*([A-Za-z][A-Za-z .']*)", re.IGNORECASE),
    re.compile(r"\bStudent\s*Name\b\s*:?\s*([A-Za-z][A-Za-z .']*)", re.IGNORECASE),
)

_DEPARTMENT_PATTERNS: Sequence[re.Pattern[str]] = (
    re.compile(r"\bDepartment\b\s*:?\s*([A-Za-z][A-Za-z &]*)", re.IGNORECASE),
    re.compile(r"\bDept\b\.?\s*:?\s*([A-Za-z][A-Za-z &]*)", re.IGNORECASE),
    re.compile(r"\b(Computer Science|Mechanical|Civil)\b", re.IGNORECASE),
    # Acronyms stay case-sensitive so ordinary words like "it" do not match.
    re.compile(r"\b(CSE|ECE|EEE|IT)\b"),
)

_COURSE_PATTERNS: Sequence[re.Pattern[str]] = (
    re.compile(r"\bCourse\b\s*:?\s*([A-Za-z][A-Za-z .]*)", re.IGNORECASE),
    re.compile(r"\b(B\.Tech|B\.E|M\.Tech|MBA|MCA)\b", re.IGNORECASE),
)

_YEAR_PREFIX_RE = re.compile(r"^(\d{2})")

NO_MATCH_MESSAGE = (
    "No student data found in the document. Please ensure the document contains "
    "roll numbers in the format like 22CSE1015."
)


@dataclass(slots=True)
class ExtractionResult:
    """Records found in one document, in scan order."""

    records: List[StudentRecord] = field(default_factory=list)
    matches: int = 0
    message: str = ""

    @property
    def is_empty(self) -> bool:
        return not self.records


def _content_lines(text: str) -> List[str]:
    return [line for line in text.splitlines() if line.strip()]


def find_roll_numbers(line: str) -> List[str]:
    """Return every roll number on ``line`` in pattern order, uppercased."""

    found: List[str] = []
    for pattern in _ROLL_PATTERNS:
        for match in pattern.finditer(line):
            value = match.group(1) if pattern.groups else match.group(0)
            found.append(value.strip().upper())
    return found


def derive_year(roll_number: str) -> Optional[str]:
    """``22CSE1015`` -> ``"2022"``."""

    match = _YEAR_PREFIX_RE.match(roll_number)
    if match is None:
        return None
    return f"20{match.group(1)}"


def _search_window(
    lines: Sequence[str],
    index: int,
    patterns: Sequence[re.Pattern[str]],
) -> Optional[str]:
    start = max(0, index - WINDOW)
    stop = min(len(lines) - 1, index + WINDOW)
    for line_index in range(start, stop + 1):
        for pattern in patterns:
            match = pattern.search(lines[line_index])
            if match:
                value = match.group(1).strip()
                if value:
                    return value
    return None


def extract_records(text: str, source_file: Optional[str] = None) -> ExtractionResult:
    """Scan ``text`` for roll numbers and assemble partial student records.

    The first occurrence of a roll number wins; later mentions in the same
    document are ignored even when their neighbourhood carries more detail.
    """

    lines = _content_lines(text)
    result = ExtractionResult()
    seen: Dict[str, StudentRecord] = {}

    for index, line in enumerate(lines):
        for roll_number in find_roll_numbers(line):
            result.matches += 1
            if roll_number in seen:
                continue
            seen[roll_number] = StudentRecord(
                roll_number=roll_number,
                name=_search_window(lines, index, _NAME_PATTERNS),
                department=_search_window(lines, index, _DEPARTMENT_PATTERNS),
                course=_search_window(lines, index, _COURSE_PATTERNS),
                year=derive_year(roll_number),
                source_file=source_file,
            )

    result.records = list(seen.values())
    if result.is_empty:
        result.message = NO_MATCH_MESSAGE
        LOGGER.info("No roll numbers found in %s", source_file or "document")
    else:
        LOGGER.debug(
            "Extracted %d records from %d roll number matches in %s",
            len(result.records),
            result.matches,
            source_file or "document",
        )
    return result


__all__ = [
    "ExtractionResult",
    "NO_MATCH_MESSAGE",
    "WINDOW",
    "derive_year",
    "extract_records",
    "find_roll_numbers",
]
