"""Report renderers - the same ReportTable as CSV, Excel and PDF bytes.

Invariants:
    - CSV: header row first, no title lines
    - Excel: title, subtitle, blank, headers, rows, then summary lines
    - Renderer failures surface as ReportGenerationError
"""

import io
from datetime import date

import pytest
from openpyxl import load_workbook

from sis.core.domain_types import ReportFormat
from sis.core.errors import ReportGenerationError
from sis.reports import render as render_module
from sis.reports.render import render
from sis.reports.table import chronic_table, daily_table

TOTALS = {
    "recorded": 2, "present": 1, "tardy": 0,
    "excused_absences": 0, "unexcused_absences": 1, "attendance_rate": 50.0,
}
RECORDS = [
    {"student_number": "S002", "student_name": "Turing, Alan", "grade_level": "9th Grade",
     "status": "ABSENT_UNEXCUSED", "notes": None},
    {"student_number": "S001", "student_name": "Lovelace, Ada", "grade_level": "9th Grade",
     "status": "PRESENT", "notes": "On time"},
]


@pytest.fixture
def table():
    return daily_table("Heronix High School", date(2026, 10, 16), RECORDS, TOTALS)


def test_daily_table_sorts_by_name(table):
    assert [r[0] for r in table.rows] == ["S001", "S002"]
    assert table.subtitle == "Friday, October 16, 2026"
    assert ("Attendance Rate", "50.00%") in table.summary_lines


def test_chronic_table_subtitle_shows_threshold():
    t = chronic_table("X", date(2026, 9, 1), date(2026, 9, 30), 10, [])
    assert t.subtitle.endswith("(threshold 10.0% absences)")
    assert t.summary_lines == [("Chronically Absent Students", "0")]


def test_csv(table):
    lines = render(table, ReportFormat.CSV).decode("utf-8").splitlines()
    assert lines[0] == "Student #,Student Name,Grade,Status,Notes"
    assert lines[1] == 'S001,"Lovelace, Ada",9th Grade,PRESENT,On time'
    assert len(lines) == 3


def test_excel_layout(table):
    wb = load_workbook(io.BytesIO(render(table, ReportFormat.EXCEL)))
    ws = wb["Daily Attendance"]
    assert ws["A1"].value == "Heronix High School - Daily Attendance"
    assert ws["A4"].value == "Student #"
    assert ws["A5"].value == "S001"
    assert ws["A8"].value == "Students Recorded"


def test_pdf_magic_bytes(table):
    assert render(table, ReportFormat.PDF).startswith(b"%PDF")


def test_renderer_failure_is_report_generation_error(table, monkeypatch):
    def broken(_table):
        raise ValueError("bad cell")

    monkeypatch.setitem(render_module._RENDERERS, ReportFormat.CSV, broken)
    with pytest.raises(ReportGenerationError) as exc:
        render(table, ReportFormat.CSV)
    assert exc.value.http_status == 500
