"""SQLAlchemy table definitions for the records store."""
from __future__ import annotations

from datetime import datetime
from typing import Any, Dict, Optional

from sqlalchemy import JSON, DateTime, String, func
from sqlalchemy.orm import DeclarativeBase, Mapped, mapped_column


class Base(DeclarativeBase):
    pass


class StudentRow(Base):
    __tablename__ = "student_data"

    roll_number: Mapped[str] = mapped_column(String(32), primary_key=True)
    name: Mapped[Optional[str]] = mapped_column(String(255))
    course: Mapped[Optional[str]] = mapped_column(String(255))
    department: Mapped[Optional[str]] = mapped_column(String(255))
    year: Mapped[Optional[str]] = mapped_column(String(16))
    source_file_name: Mapped[Optional[str]] = mapped_column(String(512))
    additional_info: Mapped[Optional[Dict[str, Any]]] = mapped_column(JSON)
    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), server_default=func.now())
    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), server_default=func.now(), onupdate=func.now()
    )


UPSERT_COLUMNS = (
    "name",
    "course",
    "department",
    "year",
    "source_file_name",
    "additional_info",
)
"""Columns replaced when an incoming record hits an existing roll number."""
