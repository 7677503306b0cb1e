from __future__ import annotations

from pathlib import Path
from typing import List

import pytest

from pipelines.upload import ExtractedBatch, run_upload_pipeline
from rollbook.extract.records import NO_MATCH_MESSAGE
from rollbook.ingest import EmptySourceError
from rollbook.normalize.map_to_schema import NO_VALID_ROWS_MESSAGE
from rollbook.store.batcher import BatchProgress
from rollbook.store.repository import SqlStudentStore


@pytest.fixture
def store() -> SqlStudentStore:
    return SqlStudentStore.from_url("sqlite:///:memory:")


def test_spreadsheet_upload_lands_in_the_store(tmp_path: Path, store: SqlStudentStore) -> None:
    path = tmp_path / "tmp123.csv"
    lines = ["RollNo,Student Name,Dept,Phone"]
    lines += [f"22cse{index:04d},Student {index},CSE,98{index:04d}" for index in range(7)]
    lines.append("22CSE0001,Renamed,CSE,")
    path.write_text("\n".join(lines) + "\n")
    seen: List[BatchProgress] = []
    last = ExtractedBatch()

    report = run_upload_pipeline(
        path,
        store,
        source_name="roster.csv",
        batch_size=3,
        progress=seen.append,
        last_batch=last,
    )

    assert report.success is True
    assert report.processed == 7
    assert report.batches == 3
    assert [snapshot.submitted for snapshot in seen] == [3, 6, 7]
    assert last.source_file == "roster.csv"
    assert len(last.records) == 7

    stored = store.lookup("22CSE0001")
    assert stored is not None
    assert stored.name == "Renamed"
    assert stored.department == "CSE"
    assert stored.source_file == "roster.csv"
    assert store.lookup("22CSE0002").additional_info == {"Phone": "980002"}


def test_digit_only_roll_numbers_are_found_after_upload(tmp_path: Path, store: SqlStudentStore) -> None:
    path = tmp_path / "numeric.csv"
    path.write_text("Roll Number,Name\n1001,Asha\n,Nobody\n0101,Ravi\n")

    report = run_upload_pipeline(path, store)

    assert report.processed == 2
    assert store.lookup("1001") is not None
    assert store.lookup("0101") is not None
    assert store.lookup("101") is None


def test_text_without_roll_numbers_reports_instead_of_raising(tmp_path: Path, store: SqlStudentStore) -> None:
    path = tmp_path / "minutes.txt"
    path.write_text("Minutes of the department meeting\nNothing to see.\n")
    last = ExtractedBatch()

    report = run_upload_pipeline(path, store, last_batch=last)

    assert report.success is False
    assert report.processed == 0
    assert report.message == NO_MATCH_MESSAGE
    assert last.records == []
    assert store.count() == 0


def test_text_upload_extracts_records(tmp_path: Path, store: SqlStudentStore) -> None:
    path = tmp_path / "list.txt"
    path.write_text("Roll No: 22CSE1015\nName: Asha Rao\nDepartment: Computer Science\n")

    report = run_upload_pipeline(path, store)

    assert report.processed == 1
    stored = store.lookup("22CSE1015")
    assert stored is not None
    assert stored.name == "Asha Rao"
    assert stored.department == "Computer Science"
    assert stored.year == "2022"


def test_rows_without_roll_numbers_are_reported(tmp_path: Path, store: SqlStudentStore) -> None:
    path = tmp_path / "names.csv"
    path.write_text("Name,Dept\nAsha,CSE\n")

    report = run_upload_pipeline(path, store)

    assert report.processed == 0
    assert report.message == NO_VALID_ROWS_MESSAGE


def test_validation_errors_raise_before_the_store(tmp_path: Path, store: SqlStudentStore) -> None:
    empty = tmp_path / "empty.txt"
    empty.write_text("")

    with pytest.raises(EmptySourceError):
        run_upload_pipeline(empty, store)
    with pytest.raises(ValueError):
        run_upload_pipeline(tmp_path, store)
    assert store.count() == 0
