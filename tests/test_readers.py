from __future__ import annotations

import io

import pandas as pd
import pytest

from src.shiftdesk.shiftdesk.core.exceptions import ImportFileError
from src.shiftdesk.shiftdesk.imports.readers import list_sheets, read_export

CSV = b"Date,Users,Start\n02/18/2026,Ana Lopez,08:00am\n02/18/2026,,\n"


def test_csv_cells_come_back_as_strings():
    rows = read_export(CSV, filename="schedule.csv")

    assert rows == [
        {"Date": "02/18/2026", "Users": "Ana Lopez", "Start": "08:00am"},
        {"Date": "02/18/2026", "Users": "", "Start": ""},
    ]


def test_duplicate_headers_are_kept_apart():
    data = b"First name,Start Date,Start Date\nAna,03/01/2024,02/18/2026 Wed\n"

    (row,) = read_export(io.BytesIO(data), filename="clock.csv")

    assert row["Start Date"] == "03/01/2024"
    assert row["Start Date.1"] == "02/18/2026 Wed"


def test_header_names_are_stripped():
    (row,) = read_export(b" Date , Users \n02/18/2026,Ana\n", filename="schedule.csv")
    assert set(row) == {"Date", "Users"}


def test_unsupported_extension():
    with pytest.raises(ImportFileError):
        read_export(CSV, filename="schedule.txt")


def test_empty_upload():
    with pytest.raises(ImportFileError):
        read_export(b"", filename="schedule.csv")


def test_header_only_file_has_no_rows():
    with pytest.raises(ImportFileError):
        read_export(b"Date,Users\n", filename="schedule.csv")


def test_row_and_size_limits():
    with pytest.raises(ImportFileError):
        read_export(CSV, filename="schedule.csv", max_rows=1)
    with pytest.raises(ImportFileError):
        read_export(CSV, filename="schedule.csv", max_bytes=10)


def test_workbook_sheets_and_selected_sheet():
    buffer = io.BytesIO()
    with pd.ExcelWriter(buffer, engine="openpyxl") as writer:
        pd.DataFrame({"Date": ["02/18/2026"], "Users": ["Ana Lopez"]}).to_excel(writer, sheet_name="Week 1", index=False)
        pd.DataFrame({"Date": ["02/25/2026"], "Users": ["Bob Stone"]}).to_excel(writer, sheet_name="Week 2", index=False)
    data = buffer.getvalue()

    assert list_sheets(data, filename="schedule.xlsx") == ["Week 1", "Week 2"]
    assert read_export(data, filename="schedule.xlsx") == [{"Date": "02/18/2026", "Users": "Ana Lopez"}]
    assert read_export(data, filename="schedule.xlsx", sheet_name="Week 2") == [
        {"Date": "02/25/2026", "Users": "Bob Stone"}
    ]
    assert list_sheets(CSV, filename="schedule.csv") == []


def test_corrupt_workbook():
    with pytest.raises(ImportFileError):
        read_export(b"not a zip file", filename="schedule.xlsx")
