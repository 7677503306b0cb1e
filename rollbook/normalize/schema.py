"""Pydantic schemas shared across the ingestion pipeline."""
from __future__ import annotations

from typing import Any, Dict, List, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator


class StudentRecord(BaseModel):
    """Canonical student record keyed by roll number."""

    roll_number: str = Field(default="", description="Unique identifier, stored uppercased.")
    name: Optional[str] = Field(default=None)
    department: Optional[str] = Field(default=None)
    course: Optional[str] = Field(default=None)
    year: Optional[str] = Field(default=None, description="Admission year, always a string.")
    source_file: Optional[str] = Field(default=None, description="File the record was read from.")
    additional_info: Dict[str, Any] = Field(
        default_factory=dict,
        description="Input fields without a canonical column, original key casing kept.",
    )

    @field_validator("roll_number", mode="before")
    @classmethod
    def _canonical_roll_number(cls, value: Any) -> str:
        if value is None:
            return ""
        return str(value).strip().upper()

    @field_validator("year", mode="before")
    @classmethod
    def _year_as_string(cls, value: Any) -> Optional[str]:
        if value is None:
            return None
        if isinstance(value, float) and value.is_integer():
            value = int(value)
        text = str(value).strip()
        return text or None

    def is_valid(self) -> bool:
        """A record can only be persisted once it has a roll number."""

        return bool(self.roll_number)

    def to_row(self) -> Dict[str, Any]:
        """Column mapping used by the ``student_data`` table."""

        return {
            "roll_number": self.roll_number,
            "name": self.name,
            "course": self.course,
            "department": self.department,
            "year": self.year,
            "source_file_name": self.source_file,
            "additional_info": dict(self.additional_info) or None,
        }


class SourceDocument(BaseModel):
    """One uploaded file as it moves through the pipeline stages."""

    source_file: str
    kind: str = "unknown"
    rows: List[Dict[str, Any]] = Field(default_factory=list, description="Tabular rows, header -> value.")
    text: str = Field(default="", description="Plain text for free-form documents.")
    records: List[StudentRecord] = Field(default_factory=list)
    metadata: Dict[str, Any] = Field(default_factory=dict)
    report: Optional["UploadReport"] = None


class UploadReport(BaseModel):
    """Outcome of pushing one source's records into the store."""

    source_file: Optional[str] = None
    success: bool = False
    processed: int = Field(default=0, ge=0, description="Records committed to the store.")
    total: int = Field(default=0, ge=0)
    batches: int = Field(default=0, ge=0)
    cancelled: bool = False
    message: str = ""


class UploadRequest(BaseModel):
    """Body accepted by the row-upload endpoint."""

    model_config = ConfigDict(populate_by_name=True)

    students: List[Dict[str, Any]] = Field(default_factory=list)
    source_file_name: str = Field(default="", alias="sourceFileName")


class UploadResponse(BaseModel):
    success: bool
    processed: int
    message: str = ""


class ErrorPayload(BaseModel):
    error: str
    details: Optional[str] = None


class LookupResult(BaseModel):
    """Result of searching a single roll number."""

    roll_number: str
    found: bool
    student: Optional[StudentRecord] = None
    photo_url: Optional[str] = None


SourceDocument.model_rebuild()
