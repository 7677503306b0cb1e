"""Run the load → records → persist pipeline for a single upload."""
from __future__ import annotations

from dataclasses import dataclass, field
from pathlib import Path
from typing import List, Optional

from rollbook.ingest.pipeline import LoadConfig, LoadStage
from rollbook.normalize.map_to_schema import RecordStage
from rollbook.normalize.schema import SourceDocument, StudentRecord, UploadReport
from rollbook.orchestrator.orchestrator import PipelineOrchestrator
from rollbook.store.batcher import BatcherConfig, ProgressCallback, UpsertBatcher
from rollbook.store.pipeline import PersistStage
from rollbook.store.repository import RecordStore


@dataclass
class ExtractedBatch:
    """The most recent set of records pulled from an upload, owned by the caller."""

    source_file: Optional[str] = None
    records: List[StudentRecord] = field(default_factory=list)

    def replace(self, document: SourceDocument) -> None:
        self.source_file = document.source_file
        self.records = list(document.records)


def run_upload_pipeline(
    input_path: Path,
    store: RecordStore,
    *,
    source_name: Optional[str] = None,
    batch_size: int = 50,
    progress: ProgressCallback | None = None,
    last_batch: Optional[ExtractedBatch] = None,
) -> UploadReport:
    """Load ``input_path``, build records and upsert them into ``store``.

    Validation problems (empty or unreadable files) raise before any store
    call. A file without roll numbers returns a report with ``processed=0``
    and an explanatory message instead of raising.
    """

    if input_path.is_dir():
        raise ValueError("Input path must reference a single file, not a directory.")

    stages = [
        LoadStage(LoadConfig(input_paths=[input_path], source_names=[source_name or input_path.name])),
        RecordStage(),
        PersistStage(UpsertBatcher(store, BatcherConfig(batch_size=batch_size)), progress=progress),
    ]
    orchestrator = PipelineOrchestrator(stages=stages)
    documents: List[SourceDocument] = orchestrator.run([])
    if not documents:
        raise RuntimeError("Load stage did not return any documents.")

    document = documents[0]
    if last_batch is not None:
        last_batch.replace(document)
    if document.report is None:
        raise RuntimeError("Persist stage did not report on the upload.")
    return document.report
