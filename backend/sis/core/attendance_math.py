"""Attendance Math - daily tallies, per-student summaries and chronic absenteeism. Pure, no IO.

Invariants:
    - Attendance rate = (present + tardy) / recorded × 100, UNMARKED excluded from recorded
    - Absence rate = (excused + unexcused absences) / recorded × 100
    - ABSENT without qualifier counts as unexcused
    - Rates rounded to 2 decimals; 0.0 when nothing recorded
    - Chronic list sorted by absence rate descending, then student name

Design Decisions:
    - Inputs are plain dicts (one per attendance record) so reports and tests share one shape:
      {"student_id", "student_number", "student_name", "grade_level", "status", "notes"}
"""

from sis.core.domain_types import AttendanceStatus

_PRESENT = {AttendanceStatus.PRESENT.value}
_TARDY = {AttendanceStatus.TARDY.value}
_EXCUSED = {AttendanceStatus.EXCUSED_ABSENT.value}
_UNEXCUSED = {AttendanceStatus.ABSENT.value, AttendanceStatus.UNEXCUSED_ABSENT.value}
_UNMARKED = {AttendanceStatus.UNMARKED.value}


def _rate(numerator: int, denominator: int) -> float:
    if denominator == 0:
        return 0.0
    return round(numerator / denominator * 100, 2)


def tally(records: list[dict]) -> dict:
    """Count statuses across records and derive rates."""
    present = sum(1 for r in records if r["status"] in _PRESENT)
    tardy = sum(1 for r in records if r["status"] in _TARDY)
    excused = sum(1 for r in records if r["status"] in _EXCUSED)
    unexcused = sum(1 for r in records if r["status"] in _UNEXCUSED)
    unmarked = sum(1 for r in records if r["status"] in _UNMARKED)
    recorded = len(records) - unmarked
    return {
        "recorded": recorded,
        "present": present,
        "tardy": tardy,
        "excused_absences": excused,
        "unexcused_absences": unexcused,
        "unmarked": unmarked,
        "attendance_rate": _rate(present + tardy, recorded),
        "absence_rate": _rate(excused + unexcused, recorded),
    }


def summarize_by_student(records: list[dict]) -> list[dict]:
    """One summary row per student, ordered by last-name-first display name."""
    by_student: dict[int, list[dict]] = {}
    for r in records:
        by_student.setdefault(r["student_id"], []).append(r)

    rows = []
    for student_records in by_student.values():
        first = student_records[0]
        rows.append({
            "student_id": first["student_id"],
            "student_number": first["student_number"],
            "student_name": first["student_name"],
            "grade_level": first["grade_level"],
            **tally(student_records),
        })
    rows.sort(key=lambda row: (row["student_name"], row["student_id"]))
    return rows


def find_chronic_absentees(records: list[dict], threshold: float) -> list[dict]:
    """Students whose absence rate is at or above threshold percent."""
    chronic = [
        row for row in summarize_by_student(records)
        if row["recorded"] > 0 and row["absence_rate"] >= threshold
    ]
    chronic.sort(key=lambda row: (-row["absence_rate"], row["student_name"]))
    return chronic
