from __future__ import annotations

from pathlib import Path

import docx
import pandas as pd
import pytest

from rollbook.ingest import EmptySourceError, LoadConfig, LoadStage, UnsupportedDocumentError
from rollbook.ingest.documents import read_docx_text
from rollbook.ingest.spreadsheets import read_rows
from rollbook.normalize.fields import normalize_rows


def test_csv_rows_keep_headers_and_blank_cells(tmp_path: Path) -> None:
    path = tmp_path / "roster.csv"
    path.write_text("Roll Number,Name,Year\n22CSE1015,Asha Rao,2022\n22CSE1016,,\n,,\n")

    rows = read_rows(path)

    assert rows == [
        {"Roll Number": "22CSE1015", "Name": "Asha Rao", "Year": "2022"},
        {"Roll Number": "22CSE1016", "Name": None, "Year": None},
    ]


def test_only_the_first_sheet_is_read(tmp_path: Path) -> None:
    path = tmp_path / "roster.xlsx"
    with pd.ExcelWriter(path) as writer:
        pd.DataFrame({"Roll No": ["22ECE3001"], "Dept": ["ECE"]}).to_excel(writer, sheet_name="First", index=False)
        pd.DataFrame({"Roll No": ["99XXX9999"]}).to_excel(writer, sheet_name="Second", index=False)

    rows = read_rows(path)

    assert rows == [{"Roll No": "22ECE3001", "Dept": "ECE"}]


def test_numeric_roll_numbers_keep_their_exact_text(tmp_path: Path) -> None:
    path = tmp_path / "numeric.csv"
    path.write_text("Roll Number,Name,Phone\n1001,Asha,9845000001\n,Nobody,\n0101,Ravi,\n")

    rows = read_rows(path)
    records = normalize_rows(rows, source_file="numeric.csv").records

    assert [row["Roll Number"] for row in rows] == ["1001", None, "0101"]
    assert [record.roll_number for record in records] == ["1001", "0101"]
    assert records[0].additional_info == {"Phone": "9845000001"}


def test_numeric_roll_numbers_in_excel_stay_integral(tmp_path: Path) -> None:
    path = tmp_path / "numeric.xlsx"
    frame = pd.DataFrame(
        {"Roll No": pd.array([1001, None, 1002], dtype="Int64"), "Name": ["Asha", "Nobody", "Ravi"]}
    )
    frame.to_excel(path, index=False)

    rolls = [row["Roll No"] for row in read_rows(path)]

    assert rolls == ["1001", None, "1002"]


@pytest.mark.parametrize(
    ("name", "content"),
    [("blank.csv", b"\n\n"), ("broken.xlsx", b"not a workbook"), ("ragged.csv", b'a,b\n"unterminated,1\n')],
)
def test_unreadable_spreadsheets_are_empty_sources(tmp_path: Path, name: str, content: bytes) -> None:
    path = tmp_path / name
    path.write_bytes(content)
    with pytest.raises(EmptySourceError):
        read_rows(path)


def test_header_only_spreadsheet_is_empty(tmp_path: Path) -> None:
    path = tmp_path / "blank.csv"
    path.write_text("Roll Number,Name\n")
    with pytest.raises(EmptySourceError):
        read_rows(path)


def test_docx_paragraphs_and_tables_become_lines(tmp_path: Path) -> None:
    path = tmp_path / "list.docx"
    document = docx.Document()
    document.add_paragraph("Roll No: 22CSE1015")
    document.add_paragraph("")
    document.add_paragraph("Name: Asha Rao")
    table = document.add_table(rows=1, cols=2)
    table.rows[0].cells[0].text = "22ECE3001"
    table.rows[0].cells[1].text = "Kiran"
    document.save(str(path))

    assert read_docx_text(path).splitlines() == ["Roll No: 22CSE1015", "Name: Asha Rao", "22ECE3001 Kiran"]


def test_legacy_doc_is_rejected(tmp_path: Path) -> None:
    path = tmp_path / "old.doc"
    path.write_bytes(b"\xd0\xcf\x11\xe0legacy")
    with pytest.raises(UnsupportedDocumentError):
        read_docx_text(path)


def test_load_stage_routes_by_kind(tmp_path: Path) -> None:
    csv_path = tmp_path / "roster.csv"
    csv_path.write_text("Roll Number\n22CSE1015\n")
    txt_path = tmp_path / "notes.txt"
    txt_path.write_text("Roll No: 22CSE1016\n")

    stage = LoadStage(LoadConfig(input_paths=[csv_path, txt_path], source_names=["upload.csv", "notes.txt"]))
    documents = stage.run([])

    assert [document.kind for document in documents] == ["spreadsheet", "text"]
    assert documents[0].source_file == "upload.csv"
    assert documents[0].rows == [{"Roll Number": "22CSE1015"}]
    assert "22CSE1016" in documents[1].text


def test_load_stage_rejects_empty_and_unknown_files(tmp_path: Path) -> None:
    empty = tmp_path / "empty.csv"
    empty.write_text("")
    unknown = tmp_path / "archive.bin"
    unknown.write_bytes(b"\x00\x01")

    stage = LoadStage(LoadConfig(input_paths=[]))
    with pytest.raises(EmptySourceError):
        stage.load(empty, "empty.csv")
    with pytest.raises(UnsupportedDocumentError):
        stage.load(unknown, "archive.bin")
    with pytest.raises(FileNotFoundError):
        stage.load(tmp_path / "missing.csv", "missing.csv")


def test_pdf_roster_tables_take_priority_over_text(tmp_path: Path) -> None:
    path = tmp_path / "roster.pdf"
    path.write_bytes(b"%PDF-1.4\n")

    class _Roster:
        rows = [{"Roll No": "22CSE1015", "Name": "Asha Rao"}]

    stage = LoadStage(LoadConfig(input_paths=[path]), table_reader=lambda _: [_Roster()])
    document = stage.load(path, "roster.pdf")

    assert document.kind == "pdf"
    assert document.rows == _Roster.rows
    assert document.metadata["pdf_tables"] == 1
