"""Persistence and lookup collaborators backed by SQLAlchemy."""
from __future__ import annotations

import logging
from typing import Any, Dict, List, Optional, Protocol, Sequence

from sqlalchemy import Engine, create_engine, func, select
from sqlalchemy.dialects import postgresql, sqlite
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session, sessionmaker
from sqlalchemy.pool import StaticPool

from rollbook.normalize.schema import StudentRecord
from rollbook.store.models import UPSERT_COLUMNS, Base, StudentRow

LOGGER = logging.getLogger(__name__)


class StoreError(RuntimeError):
    """Raised when the backing database rejects a read or write."""


class RecordStore(Protocol):
    """Key-value style store of student records keyed by roll number."""

    def upsert(self, records: Sequence[StudentRecord]) -> int:
        """Insert or replace ``records`` atomically and return how many were written."""

    def lookup(self, roll_number: str, *, case_insensitive: bool = True) -> Optional[StudentRecord]:
        """Return the record stored under ``roll_number`` or ``None``."""


def create_store_engine(database_url: str, *, echo: bool = False) -> Engine:
    """Create an engine; in-memory SQLite shares one connection across threads."""

    if database_url.startswith("sqlite") and ":memory:" in database_url:
        return create_engine(
            database_url,
            connect_args={"check_same_thread": False},
            poolclass=StaticPool,
            echo=echo,
        )
    if database_url.startswith("sqlite"):
        return create_engine(database_url, connect_args={"check_same_thread": False}, echo=echo)
    return create_engine(database_url, pool_pre_ping=True, echo=echo)


def _row_to_record(row: StudentRow) -> StudentRecord:
    return StudentRecord(
        roll_number=row.roll_number,
        name=row.name,
        course=row.course,
        department=row.department,
        year=row.year,
        source_file=row.source_file_name,
        additional_info=row.additional_info or {},
    )


class SqlStudentStore:
    """``student_data`` table accessed through upsert-by-roll-number."""

    def __init__(self, engine: Engine, *, create_tables: bool = True) -> None:
        self._engine = engine
        self._sessions = sessionmaker(bind=engine, class_=Session, expire_on_commit=False)
        if create_tables:
            Base.metadata.create_all(engine)

    @classmethod
    def from_url(cls, database_url: str, **kwargs: Any) -> "SqlStudentStore":
        return cls(create_store_engine(database_url), **kwargs)

    @property
    def engine(self) -> Engine:
        return self._engine

    def _insert(self):
        dialect = self._engine.dialect.name
        if dialect == "postgresql":
            return postgresql.insert(StudentRow.__table__)
        if dialect == "sqlite":
            return sqlite.insert(StudentRow.__table__)
        raise StoreError(f"Upsert is not supported for the {dialect!r} dialect.")

    def upsert(self, records: Sequence[StudentRecord]) -> int:
        """Write ``records`` in one transaction; existing roll numbers are overwritten."""

        payload: List[Dict[str, Any]] = [record.to_row() for record in records if record.is_valid()]
        if not payload:
            return 0

        statement = self._insert()
        statement = statement.on_conflict_do_update(
            index_elements=["roll_number"],
            set_={
                **{column: statement.excluded[column] for column in UPSERT_COLUMNS},
                "updated_at": func.now(),
            },
        )
        try:
            with self._engine.begin() as connection:
                connection.execute(statement, payload)
        except SQLAlchemyError as exc:
            LOGGER.error("Upsert of %d records failed: %s", len(payload), exc)
            raise StoreError(str(exc)) from exc

        LOGGER.debug("Upserted %d records", len(payload))
        return len(payload)

    def lookup(self, roll_number: str, *, case_insensitive: bool = True) -> Optional[StudentRecord]:
        key = roll_number.strip()
        if not key:
            return None
        if case_insensitive:
            condition = StudentRow.roll_number.ilike(_escape_like(key), escape="\\")
        else:
            condition = StudentRow.roll_number == key
        try:
            with self._sessions() as session:
                row = session.scalars(select(StudentRow).where(condition).limit(1)).first()
        except SQLAlchemyError as exc:
            raise StoreError(str(exc)) from exc
        return _row_to_record(row) if row is not None else None

    def count(self) -> int:
        with self._sessions() as session:
            return int(session.scalar(select(func.count()).select_from(StudentRow)) or 0)

    def all_records(self) -> List[StudentRecord]:
        with self._sessions() as session:
            rows = session.scalars(select(StudentRow).order_by(StudentRow.roll_number)).all()
        return [_row_to_record(row) for row in rows]


def _escape_like(value: str) -> str:
    return value.replace("\\", "\\\\").replace("%", "\\%").replace("_", "\\_")


__all__ = [
    "RecordStore",
    "SqlStudentStore",
    "StoreError",
    "create_store_engine",
]
