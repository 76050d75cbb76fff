"""Report Schemas - custom batch export items and history responses.

Invariants:
    - DAILY items need date; SUMMARY / CHRONIC_ABSENTEEISM items need start_date and end_date
    - filename, when given, is a bare name (no path separators)
"""

import datetime as dt

from pydantic import BaseModel, ConfigDict, Field, model_validator

from sis.core.domain_types import ReportFormat, ReportType


class BatchReportItem(BaseModel):
    type: ReportType
    date: dt.date | None = None
    start_date: dt.date | None = None
    end_date: dt.date | None = None
    format: ReportFormat = ReportFormat.EXCEL
    filename: str | None = Field(None, max_length=200, pattern=r"^[^/\\]+$")
    threshold: float | None = Field(None, ge=0, le=100)

    @model_validator(mode="after")
    def validate_dates(self):
        if self.type == ReportType.BATCH:
            raise ValueError("BATCH cannot be nested inside a custom batch")
        if self.type == ReportType.DAILY and self.date is None:
            raise ValueError("DAILY report requires date")
        if self.type != ReportType.DAILY and (self.start_date is None or self.end_date is None):
            raise ValueError(f"{self.type.value} report requires start_date and end_date")
        return self


class CustomBatchRequest(BaseModel):
    reports: list[BatchReportItem] = Field(min_length=1)


class ReportHistoryResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    report_type: str
    report_format: str
    parameters: dict | None
    filename: str | None
    size_bytes: int
    generated_by: str
    status: str
    error_message: str | None
    created_at: dt.datetime
