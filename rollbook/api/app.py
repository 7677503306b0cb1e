"""FastAPI backend for student record uploads and roll number lookup.

Start with:
    uvicorn --factory rollbook.api.app:create_app --port 8000
"""

from __future__ import annotations

import logging
from pathlib import Path
import shutil
import tempfile
from typing import Optional

from fastapi import FastAPI, File, Request, UploadFile
from fastapi.responses import JSONResponse

from pipelines.upload import run_upload_pipeline
from rollbook.config import Settings, configure_logging, load_settings
from rollbook.ingest.documents import UnsupportedDocumentError
from rollbook.ingest.spreadsheets import EmptySourceError
from rollbook.lookup.service import LookupService
from rollbook.normalize.fields import normalize_rows
from rollbook.normalize.map_to_schema import NO_VALID_ROWS_MESSAGE
from rollbook.normalize.schema import (
    ErrorPayload,
    LookupResult,
    UploadReport,
    UploadRequest,
    UploadResponse,
)
from rollbook.store.batcher import BatchSubmissionError
from rollbook.store.repository import RecordStore, SqlStudentStore, StoreError

logger = logging.getLogger(__name__)


def _error(status_code: int, error: str, details: Optional[str] = None) -> JSONResponse:
    payload = ErrorPayload(error=error, details=details)
    return JSONResponse(status_code=status_code, content=payload.model_dump(exclude_none=True))


def create_app(store: Optional[RecordStore] = None, settings: Optional[Settings] = None) -> FastAPI:
    """Build the API around ``store`` (defaults to the configured SQL database)."""

    settings = settings or load_settings()
    configure_logging(settings.log_level)
    store = store or SqlStudentStore.from_url(settings.database_url)
    lookup = LookupService(store, photo_url_template=settings.photo_url_template)

    app = FastAPI(
        title="Rollbook API",
        version="0.1.0",
        description="Upload student rosters and look students up by roll number.",
    )
    app.state.store = store
    app.state.settings = settings

    @app.exception_handler(Exception)
    async def _unhandled(_: Request, exc: Exception) -> JSONResponse:
        logger.exception("Error processing request")
        return _error(500, "Internal server error", str(exc))

    @app.get("/health")
    def health() -> dict:
        return {"status": "ok"}

    @app.post(
        "/upload-student-data",
        response_model=UploadResponse,
        responses={400: {"model": ErrorPayload}, 500: {"model": ErrorPayload}},
    )
    def upload_student_data(body: UploadRequest):
        logger.info("Processing %d student records from %s", len(body.students), body.source_file_name)

        normalized = normalize_rows(body.students, source_file=body.source_file_name or None)
        if not normalized.records:
            return _error(400, NO_VALID_ROWS_MESSAGE)

        try:
            processed = store.upsert(normalized.records)
        except StoreError as exc:
            logger.error("Database error: %s", exc)
            return _error(500, "Failed to insert student data", str(exc))

        logger.info("Successfully processed %d student records", processed)
        return UploadResponse(
            success=True,
            processed=processed,
            message=f"Successfully uploaded {processed} student records",
        )

    @app.post(
        "/uploads",
        response_model=UploadReport,
        responses={400: {"model": ErrorPayload}, 500: {"model": ErrorPayload}},
    )
    def upload_file(file: UploadFile = File(...)):
        source_name = Path(file.filename or "upload").name
        with tempfile.TemporaryDirectory(prefix="rollbook-") as workdir:
            target = Path(workdir) / source_name
            with target.open("wb") as handle:
                shutil.copyfileobj(file.file, handle)
            try:
                report = run_upload_pipeline(
                    target,
                    store,
                    source_name=source_name,
                    batch_size=settings.batch_size,
                )
            except (EmptySourceError, UnsupportedDocumentError) as exc:
                return _error(400, str(exc))
            except BatchSubmissionError as exc:
                return _error(
                    500,
                    "Failed to insert student data",
                    f"{exc.committed} records were committed before batch {exc.batch_index + 1} failed: {exc.cause}",
                )

        if not report.success and report.processed == 0:
            return _error(400, report.message)
        return report

    @app.get("/students/{roll_number}", response_model=LookupResult)
    def get_student(roll_number: str):
        try:
            return lookup.find(roll_number)
        except ValueError as exc:
            return _error(400, str(exc))

    return app
