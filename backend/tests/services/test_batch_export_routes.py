"""Batch export routes - ZIP archives with manifest, summary and per-report errors."""

import io
import zipfile

import pytest

from sis.config import get_settings


def _archive(res) -> zipfile.ZipFile:
    assert res.status_code == 200
    assert res.headers["content-type"] == "application/zip"
    return zipfile.ZipFile(io.BytesIO(res.content))


async def test_info_reports_limits(client):
    body = (await client.get("/api/v1/reports/batch/info")).json()
    assert body == {
        "enabled": True, "max_batch_size": 50, "supported_formats": ["excel", "pdf", "csv"],
    }


async def test_daily_range_one_file_per_day(client, seed_students):
    res = await client.get("/api/v1/reports/batch/daily", params={
        "start_date": "2026-10-01", "end_date": "2026-10-03", "format": "csv",
    })
    archive = _archive(res)
    names = set(archive.namelist())
    assert {
        "daily-attendance-20261001.csv", "daily-attendance-20261002.csv",
        "daily-attendance-20261003.csv", "MANIFEST.txt", "SUMMARY.txt",
    } == names
    assert "Success Rate: 100.0%" in archive.read("SUMMARY.txt").decode()


async def test_daily_range_over_limit_is_400(client, monkeypatch):
    monkeypatch.setenv("BATCH_EXPORT_MAX_SIZE", "2")
    get_settings.cache_clear()
    res = await client.get("/api/v1/reports/batch/daily", params={
        "start_date": "2026-10-01", "end_date": "2026-10-03",
    })
    assert res.status_code == 400
    assert res.json()["error"]["message"] == "Batch size (3) exceeds maximum allowed (2)"


async def test_disabled_batch_export_is_409(client, monkeypatch):
    monkeypatch.setenv("BATCH_EXPORT_ENABLED", "false")
    get_settings.cache_clear()
    res = await client.get("/api/v1/reports/batch/daily")
    assert res.status_code == 409
    assert res.json()["error"]["code"] == "FEATURE_DISABLED"


async def test_summary_with_chronic_holds_two_reports(client):
    res = await client.get("/api/v1/reports/batch/summary-with-chronic", params={
        "start_date": "2026-10-01", "end_date": "2026-10-31", "format": "pdf",
    })
    names = _archive(res).namelist()
    assert "attendance-summary-2026-10-01-to-2026-10-31.pdf" in names
    assert "chronic-absenteeism-2026-10-01-to-2026-10-31.pdf" in names


async def test_custom_batch_reports_failures_in_errors_file(client):
    res = await client.post("/api/v1/reports/batch/custom", json={"reports": [
        {"type": "DAILY", "date": "2026-10-05", "format": "csv"},
        {"type": "SUMMARY", "start_date": "2026-10-09", "end_date": "2026-10-01"},
        {"type": "DAILY", "date": "2026-10-06", "format": "csv", "filename": "monday.csv"},
    ]})
    archive = _archive(res)
    names = archive.namelist()
    assert "daily-2026-10-05.csv" in names
    assert "monday.csv" in names
    assert "ERRORS.txt" in names
    assert archive.read("ERRORS.txt").decode().startswith("Error Log\n" + "=" * 50)
    assert "summary-2026-10-09-to-2026-10-01.xlsx" in archive.read("ERRORS.txt").decode()
    assert "Failed: 1" in archive.read("SUMMARY.txt").decode()


async def test_custom_batch_requires_dates(client):
    res = await client.post("/api/v1/reports/batch/custom", json={"reports": [{"type": "DAILY"}]})
    assert res.status_code == 400


@pytest.mark.parametrize("payload", [{"reports": []}, {}])
async def test_custom_batch_needs_at_least_one_report(client, payload):
    res = await client.post("/api/v1/reports/batch/custom", json=payload)
    assert res.status_code == 400


async def test_batch_recorded_in_history(client):
    await client.get("/api/v1/reports/batch/daily", params={
        "start_date": "2026-10-01", "end_date": "2026-10-01",
    })
    history = (await client.get("/api/v1/reports/history", params={"report_type": "BATCH"})).json()
    assert len(history) == 1
    assert history[0]["parameters"]["successful"] == 1
