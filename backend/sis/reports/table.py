"""Report Tables - format-neutral report structure built from attendance math output.

Invariants:
    - headers and every row have the same length
    - summary_lines are (label, value) pairs rendered under the table
"""

from dataclasses import dataclass, field
from datetime import date


@dataclass
class ReportTable:
    title: str
    subtitle: str
    headers: list[str]
    rows: list[list] = field(default_factory=list)
    summary_lines: list[tuple[str, str]] = field(default_factory=list)
    sheet_name: str = "Report"


def daily_table(school: str, day: date, records: list[dict], totals: dict) -> ReportTable:
    return ReportTable(
        title=f"{school} - Daily Attendance",
        subtitle=day.strftime("%A, %B %d, %Y"),
        headers=["Student #", "Student Name", "Grade", "Status", "Notes"],
        rows=[
            [
                r["student_number"], r["student_name"], r["grade_level"],
                r["status"], r.get("notes") or "",
            ]
            for r in sorted(records, key=lambda r: r["student_name"])
        ],
        summary_lines=[
            ("Students Recorded", str(totals["recorded"])),
            ("Present", str(totals["present"])),
            ("Tardy", str(totals["tardy"])),
            ("Excused Absences", str(totals["excused_absences"])),
            ("Unexcused Absences", str(totals["unexcused_absences"])),
            ("Attendance Rate", f"{totals['attendance_rate']:.2f}%"),
        ],
        sheet_name="Daily Attendance",
    )


def summary_table(
    school: str, start: date, end: date, rows: list[dict], totals: dict,
) -> ReportTable:
    return ReportTable(
        title=f"{school} - Attendance Summary",
        subtitle=f"{start.isoformat()} to {end.isoformat()}",
        headers=[
            "Student #", "Student Name", "Grade", "Days Recorded", "Present",
            "Tardy", "Excused", "Unexcused", "Attendance Rate %",
        ],
        rows=[
            [
                r["student_number"], r["student_name"], r["grade_level"], r["recorded"],
                r["present"], r["tardy"], r["excused_absences"],
                r["unexcused_absences"], r["attendance_rate"],
            ]
            for r in rows
        ],
        summary_lines=[
            ("Students", str(len(rows))),
            ("Records", str(totals["recorded"])),
            ("Overall Attendance Rate", f"{totals['attendance_rate']:.2f}%"),
        ],
        sheet_name="Attendance Summary",
    )


def chronic_table(
    school: str, start: date, end: date, threshold: float, rows: list[dict],
) -> ReportTable:
    return ReportTable(
        title=f"{school} - Chronic Absenteeism",
        subtitle=(
            f"{start.isoformat()} to {end.isoformat()} "
            f"(threshold {threshold:.1f}% absences)"
        ),
        headers=[
            "Student #", "Student Name", "Grade", "Days Recorded",
            "Excused", "Unexcused", "Absence Rate %",
        ],
        rows=[
            [
                r["student_number"], r["student_name"], r["grade_level"], r["recorded"],
                r["excused_absences"], r["unexcused_absences"], r["absence_rate"],
            ]
            for r in rows
        ],
        summary_lines=[("Chronically Absent Students", str(len(rows)))],
        sheet_name="Chronic Absenteeism",
    )
