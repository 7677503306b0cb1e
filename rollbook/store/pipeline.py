"""Persist stage pushing extracted records through the upsert batcher."""
from __future__ import annotations

import logging

from rollbook.normalize.schema import SourceDocument, UploadReport
from rollbook.store.batcher import ProgressCallback, UpsertBatcher

LOGGER = logging.getLogger(__name__)


class PersistStage:
    """Upsert each document's records; documents without records never reach the store."""

    def __init__(self, batcher: UpsertBatcher, progress: ProgressCallback | None = None) -> None:
        self._batcher = batcher
        self._progress = progress

    def run(self, batch: list[SourceDocument]) -> list[SourceDocument]:
        """Attach an :class:`UploadReport` to every document."""

        for document in batch:
            if not document.records:
                message = document.metadata.get("message") or "No student records found"
                LOGGER.warning("Skipping %s: %s", document.source_file, message)
                document.report = UploadReport(source_file=document.source_file, message=message)
                continue
            document.report = self._batcher.submit(
                document.records,
                document.source_file,
                progress=self._progress,
            )
        return batch
