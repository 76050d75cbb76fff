"""Batch Manifest - text files bundled into every batch export archive. Pure, no IO.

Invariants:
    - Every file opens with its title and a 50 "=" rule
    - MANIFEST.txt: generation metadata, one line per file
    - SUMMARY.txt: total, successful, failed, success rate with one decimal
    - ERRORS.txt: one line per failure, only produced when at least one report failed
"""

from dataclasses import dataclass, field
from datetime import date, datetime

from sis.core.domain_types import ReportFormat, ReportType

MANIFEST_TITLE = "Batch Export Manifest"
SUMMARY_TITLE = "Export Summary"
ERRORS_TITLE = "Error Log"
RULE = "=" * 50


@dataclass
class BatchOutcome:
    """Accumulates per-file results while an archive is being built."""
    files: list[str] = field(default_factory=list)
    errors: list[str] = field(default_factory=list)

    @property
    def total(self) -> int:
        return len(self.files) + len(self.errors)

    @property
    def success_rate(self) -> float:
        if self.total == 0:
            return 0.0
        return len(self.files) / self.total * 100


def build_manifest(
    outcome: BatchOutcome, generated_at: datetime, generated_by: str, fmt: str,
) -> str:
    lines = [
        MANIFEST_TITLE,
        RULE,
        f"Generated: {generated_at.strftime('%Y-%m-%d %H:%M:%S')}",
        f"Generated By: {generated_by}",
        f"Format: {fmt}",
        f"Report Count: {len(outcome.files)}",
        "",
        "Files:",
    ]
    lines.extend(f"  - {name}" for name in outcome.files)
    return "\n".join(lines) + "\n"


def build_summary(outcome: BatchOutcome) -> str:
    return (
        f"{SUMMARY_TITLE}\n{RULE}\n\n"
        f"Total Reports: {outcome.total}\n"
        f"Successful: {len(outcome.files)}\n"
        f"Failed: {len(outcome.errors)}\n"
        f"Success Rate: {outcome.success_rate:.1f}%\n"
    )


def build_errors(outcome: BatchOutcome) -> str | None:
    if not outcome.errors:
        return None
    return f"{ERRORS_TITLE}\n{RULE}\n\n" + "\n".join(outcome.errors) + "\n"


def daily_batch_filename(day: date, fmt: ReportFormat) -> str:
    return f"daily-attendance-{day.strftime('%Y%m%d')}.{fmt.extension}"


def default_custom_filename(
    report_type: ReportType,
    fmt: ReportFormat,
    day: date | None = None,
    start: date | None = None,
    end: date | None = None,
) -> str:
    """`type-datepart.ext` with the type lower-cased and dashed."""
    type_part = report_type.value.lower().replace("_", "-")
    if day is not None:
        date_part = day.isoformat()
    elif start is not None and end is not None:
        date_part = f"{start.isoformat()}-to-{end.isoformat()}"
    else:
        date_part = "undated"
    return f"{type_part}-{date_part}.{fmt.extension}"
