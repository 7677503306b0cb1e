from __future__ import annotations

import math

import pytest

from rollbook.normalize.fields import (
    FIELD_ALIASES,
    header_form,
    known_header_forms,
    normalize_row,
    normalize_rows,
)


@pytest.mark.parametrize("alias", FIELD_ALIASES["roll_number"])
def test_every_roll_number_alias_is_recognized(alias: str) -> None:
    record = normalize_row({alias: "22cse1015"})
    assert record.roll_number == "22CSE1015"


@pytest.mark.parametrize("header", ["roll number", "ROLL NO", " Roll  Number ", "rollno"])
def test_header_matching_ignores_case_and_whitespace(header: str) -> None:
    record = normalize_row({header: "21ECE2001"})
    assert record.roll_number == "21ECE2001"
    assert record.additional_info == {}


def test_canonical_fields_and_additional_info() -> None:
    row = {
        "Roll No": "22CSE1015",
        "Student Name": "Asha Rao",
        "Program": "B.Tech",
        "Dept": "CSE",
        "Admission Year": 2022,
        "Phone": "98450 00000",
        "Blood Group": "O+",
    }
    record = normalize_row(row, source_file="roster.xlsx")

    assert record.roll_number == "22CSE1015"
    assert record.name == "Asha Rao"
    assert record.course == "B.Tech"
    assert record.department == "CSE"
    assert record.year == "2022"
    assert record.source_file == "roster.xlsx"
    assert record.additional_info == {"Phone": "98450 00000", "Blood Group": "O+"}


def test_first_alias_with_a_value_wins() -> None:
    row = {"Roll Number": "", "RollNo": "22MEC0007", "roll_no": "22MEC0099"}
    assert normalize_row(row).roll_number == "22MEC0007"

    named = normalize_row({"Roll No": "X1", "student_name": "Later", "Name": "First"})
    assert named.name == "First"


def test_blank_values_count_as_missing() -> None:
    record = normalize_row({"Roll Number": "22CSE1015", "Name": "   ", "Course": math.nan, "Year": None})
    assert record.name is None
    assert record.course is None
    assert record.year is None


def test_integral_float_year_is_rendered_without_fraction() -> None:
    assert normalize_row({"Roll Number": "A1", "Year": 2021.0}).year == "2021"


def test_row_without_roll_number_is_invalid_not_an_error() -> None:
    record = normalize_row({"Name": "Nobody", "Notes": "missing id"})
    assert record.is_valid() is False
    assert record.additional_info == {"Notes": "missing id"}


def test_normalize_rows_drops_invalid_and_keeps_last_duplicate() -> None:
    rows = [
        {"Roll Number": "22cse1015", "Name": "Old Name"},
        {"Name": "No Roll"},
        {"Roll Number": "22CSE1016", "Name": "Other"},
        {"ROLL_NUMBER": "22CSE1015", "Name": "New Name"},
    ]
    result = normalize_rows(rows, source_file="roster.csv")

    assert result.dropped == 1
    assert result.duplicates == 1
    assert [record.roll_number for record in result.records] == ["22CSE1015", "22CSE1016"]
    assert result.records[0].name == "New Name"


def test_known_header_forms_are_whitespace_free_and_lowercase() -> None:
    forms = known_header_forms()
    assert "rollnumber" in forms
    assert "admissionyear" in forms
    assert header_form("Roll Number") == "rollnumber"
    assert all(form == form.lower() and " " not in form for form in forms)
