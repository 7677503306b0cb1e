"""Sequential, fixed-size batch submission of records to the store."""
from __future__ import annotations

from dataclasses import dataclass
import logging
from typing import Callable, Iterator, List, Optional, Sequence

from rollbook.normalize.schema import StudentRecord, UploadReport
from rollbook.store.repository import RecordStore

LOGGER = logging.getLogger(__name__)

DEFAULT_BATCH_SIZE = 50


@dataclass
class BatcherConfig:
    """Configuration for batch submission."""

    batch_size: int = DEFAULT_BATCH_SIZE


@dataclass(frozen=True, slots=True)
class BatchProgress:
    """Snapshot emitted after each committed batch."""

    batch_index: int
    batch_count: int
    batch_size: int
    submitted: int
    total: int

    @property
    def percent(self) -> float:
        if self.total <= 0:
            return 100.0
        return round(self.submitted / self.total * 100, 2)


ProgressCallback = Callable[[BatchProgress], Optional[bool]]
"""Receives progress after each batch; returning ``False`` stops before the next one."""


class BatchSubmissionError(RuntimeError):
    """Raised when a batch is rejected; earlier batches stay committed."""

    def __init__(self, batch_index: int, committed: int, cause: BaseException) -> None:
        super().__init__(
            f"Batch {batch_index + 1} failed after {committed} records were committed: {cause}"
        )
        self.batch_index = batch_index
        self.committed = committed
        self.cause = cause


def partition(records: Sequence[StudentRecord], size: int) -> Iterator[List[StudentRecord]]:
    """Yield consecutive slices of at most ``size`` records."""

    if size < 1:
        raise ValueError("Batch size must be at least 1.")
    for start in range(0, len(records), size):
        yield list(records[start : start + size])


class UpsertBatcher:
    """Submit records to a :class:`RecordStore` one batch at a time.

    Batches are never sent concurrently: each upsert completes before the
    next begins, so progress is monotonic and a failure leaves a known number
    of committed records behind.
    """

    def __init__(self, store: RecordStore, config: BatcherConfig | None = None) -> None:
        self._store = store
        self._config = config or BatcherConfig()
        if self._config.batch_size < 1:
            raise ValueError("Batch size must be at least 1.")

    @property
    def config(self) -> BatcherConfig:
        return self._config

    def submit(
        self,
        records: Sequence[StudentRecord],
        source_file: str,
        progress: ProgressCallback | None = None,
    ) -> UploadReport:
        """Stamp ``records`` with ``source_file`` and upsert them batch by batch."""

        valid = [
            record.model_copy(update={"source_file": source_file})
            for record in records
            if record.is_valid()
        ]
        total = len(valid)
        report = UploadReport(source_file=source_file, total=total)
        if not valid:
            report.message = "No valid student records found with roll numbers"
            return report

        batches = list(partition(valid, self._config.batch_size))
        LOGGER.info(
            "Submitting %d records from %s in %d batches of up to %d",
            total,
            source_file,
            len(batches),
            self._config.batch_size,
        )

        submitted = 0
        for index, batch in enumerate(batches):
            try:
                self._store.upsert(batch)
            except Exception as exc:
                LOGGER.error("Batch %d/%d from %s failed: %s", index + 1, len(batches), source_file, exc)
                raise BatchSubmissionError(index, submitted, exc) from exc

            submitted += len(batch)
            report.processed = submitted
            report.batches = index + 1
            snapshot = BatchProgress(
                batch_index=index,
                batch_count=len(batches),
                batch_size=len(batch),
                submitted=submitted,
                total=total,
            )
            LOGGER.debug("Committed batch %d/%d (%.2f%%)", index + 1, len(batches), snapshot.percent)
            if progress is not None and progress(snapshot) is False and index + 1 < len(batches):
                report.cancelled = True
                break

        report.success = not report.cancelled
        if report.cancelled:
            report.message = f"Upload stopped after {submitted} of {total} student records"
        else:
            report.message = f"Successfully uploaded {submitted} student records"
        return report


__all__ = [
    "BatchProgress",
    "BatchSubmissionError",
    "BatcherConfig",
    "DEFAULT_BATCH_SIZE",
    "ProgressCallback",
    "UpsertBatcher",
    "partition",
]
