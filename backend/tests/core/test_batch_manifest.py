"""Batch Manifest tests - MANIFEST/SUMMARY/ERRORS text and archive file naming."""

from datetime import date, datetime

from sis.core.batch_manifest import (
    RULE, BatchOutcome, build_errors, build_manifest, build_summary,
    daily_batch_filename, default_custom_filename,
)
from sis.core.domain_types import ReportFormat, ReportType


def test_manifest_lists_files_under_title():
    outcome = BatchOutcome(files=["a.xlsx", "b.xlsx"])
    text = build_manifest(outcome, datetime(2026, 10, 1, 8, 30, 0), "registrar", "excel")
    lines = text.splitlines()

    assert lines[0] == "Batch Export Manifest"
    assert lines[1] == RULE and len(RULE) == 50
    assert "Generated: 2026-10-01 08:30:00" in lines
    assert "Generated By: registrar" in lines
    assert "Report Count: 2" in lines
    assert lines[-2:] == ["  - a.xlsx", "  - b.xlsx"]


def test_summary_success_rate_one_decimal():
    outcome = BatchOutcome(files=["a", "b"], errors=["c failed"])
    text = build_summary(outcome)
    assert text.splitlines()[:3] == ["Export Summary", RULE, ""]
    assert "Total Reports: 3" in text
    assert "Successful: 2" in text
    assert "Failed: 1" in text
    assert "Success Rate: 66.7%" in text


def test_summary_of_empty_batch():
    assert "Success Rate: 0.0%" in build_summary(BatchOutcome())


def test_errors_only_when_failures():
    assert build_errors(BatchOutcome(files=["a"])) is None
    text = build_errors(BatchOutcome(errors=["2026-10-02: boom"]))
    assert text.splitlines() == ["Error Log", RULE, "", "2026-10-02: boom"]


# --- File names ---------------------------------------------------------------

def test_daily_batch_filename_uses_compact_date():
    assert daily_batch_filename(date(2026, 10, 5), ReportFormat.PDF) == "daily-attendance-20261005.pdf"


def test_custom_filename_daily():
    name = default_custom_filename(ReportType.DAILY, ReportFormat.EXCEL, day=date(2026, 10, 5))
    assert name == "daily-2026-10-05.xlsx"


def test_custom_filename_range_dashes_type():
    name = default_custom_filename(
        ReportType.CHRONIC_ABSENTEEISM, ReportFormat.CSV,
        start=date(2026, 9, 1), end=date(2026, 9, 30),
    )
    assert name == "chronic-absenteeism-2026-09-01-to-2026-09-30.csv"
