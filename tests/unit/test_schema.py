"""Unit tests for Pydantic schemas used across the pipeline."""
from __future__ import annotations

from rollbook.normalize.schema import SourceDocument, StudentRecord, UploadReport, UploadRequest


def test_student_record_defaults() -> None:
    record = StudentRecord()
    assert record.roll_number == ""
    assert record.additional_info == {}
    assert record.is_valid() is False


def test_roll_number_is_canonicalized() -> None:
    record = StudentRecord(roll_number="  22cse1015 ")
    assert record.roll_number == "22CSE1015"
    assert record.is_valid() is True


def test_year_is_always_a_string() -> None:
    assert StudentRecord(roll_number="A1", year=2022).year == "2022"
    assert StudentRecord(roll_number="A1", year=2022.0).year == "2022"
    assert StudentRecord(roll_number="A1", year="  ").year is None


def test_to_row_maps_persistence_columns() -> None:
    record = StudentRecord(roll_number="22CSE1015", name="Asha Rao", source_file="batch.xlsx")
    row = record.to_row()
    assert row["roll_number"] == "22CSE1015"
    assert row["source_file_name"] == "batch.xlsx"
    assert row["additional_info"] is None

    with_extra = StudentRecord(roll_number="22CSE1015", additional_info={"Phone": "123"})
    assert with_extra.to_row()["additional_info"] == {"Phone": "123"}


def test_upload_request_accepts_wire_names() -> None:
    request = UploadRequest.model_validate(
        {"students": [{"Roll Number": "22CSE1015"}], "sourceFileName": "students.xlsx"}
    )
    assert request.source_file_name == "students.xlsx"
    assert request.students[0]["Roll Number"] == "22CSE1015"


def test_source_document_carries_report() -> None:
    document = SourceDocument(source_file="roster.csv")
    assert document.records == []
    document.report = UploadReport(source_file="roster.csv", processed=3, total=3, success=True)
    payload = document.model_dump()
    assert payload["report"]["processed"] == 3
