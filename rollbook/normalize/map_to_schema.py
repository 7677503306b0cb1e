"""Record stage that maps loaded rows or text onto ``StudentRecord`` objects."""
from __future__ import annotations

from dataclasses import dataclass
import logging

from rollbook.extract.records import NO_MATCH_MESSAGE, extract_records
from rollbook.normalize.fields import normalize_rows
from rollbook.normalize.schema import SourceDocument

LOGGER = logging.getLogger(__name__)

NO_VALID_ROWS_MESSAGE = "No valid student records found with roll numbers"


@dataclass
class RecordConfig:
    """Configuration for the record stage."""

    fall_back_to_text: bool = True
    """Scan the text of a document whose rows yielded nothing."""


class RecordStage:
    """Normalize tabular rows and extract records from free text."""

    def __init__(self, config: RecordConfig | None = None) -> None:
        self._config = config or RecordConfig()

    def run(self, batch: list[SourceDocument]) -> list[SourceDocument]:
        """Populate ``records`` on every document in the batch."""

        for document in batch:
            if document.rows:
                normalized = normalize_rows(document.rows, source_file=document.source_file)
                document.records = normalized.records
                document.metadata["dropped_rows"] = normalized.dropped
                document.metadata["duplicate_rows"] = normalized.duplicates
                if not document.records:
                    document.metadata["message"] = NO_VALID_ROWS_MESSAGE

            if not document.records and document.text and (not document.rows or self._config.fall_back_to_text):
                extraction = extract_records(document.text, source_file=document.source_file)
                document.records = extraction.records
                document.metadata["roll_number_matches"] = extraction.matches
                if extraction.is_empty:
                    document.metadata["message"] = NO_MATCH_MESSAGE
                else:
                    document.metadata.pop("message", None)

            LOGGER.info("%s yielded %d student records", document.source_file, len(document.records))
        return batch
