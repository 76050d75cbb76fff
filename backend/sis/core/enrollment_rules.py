"""Enrollment Rules - grade progression, pre-registration fees, numbering, time away.

Invariants:
    - next_grade("Kindergarten") == "1st Grade"; "11th Grade" → "12th Grade"
    - Unknown or terminal grade levels are returned unchanged
    - Fees: technology 50.00 + activity 75.00, each waived independently
    - Document numbers: PREFIX-YYYY-NNNNNN, sequence is 1-based per prefix and year
    - The next sequence follows the highest number issued, so deleted drafts never free a number

Design Decisions:
    - Decimal for money: fee totals are shown to parents and must not drift
    - months_between counts whole calendar months (day-of-month aware)
"""

from datetime import date
from decimal import Decimal

TECHNOLOGY_FEE = Decimal("50.00")
ACTIVITY_FEE = Decimal("75.00")

PRE_REGISTRATION_PREFIX = "PRE"
RE_ENROLLMENT_PREFIX = "RNE"

GRADE_SEQUENCE = (
    "Kindergarten", "1st Grade", "2nd Grade", "3rd Grade", "4th Grade",
    "5th Grade", "6th Grade", "7th Grade", "8th Grade", "9th Grade",
    "10th Grade", "11th Grade", "12th Grade",
)

_ALIASES = {"K": "Kindergarten", "KG": "Kindergarten", "0": "Kindergarten"}


def normalize_grade(grade_level: str) -> str:
    """Map short forms ("K", "3", "10") to the display name used by GRADE_SEQUENCE."""
    value = grade_level.strip()
    if value.upper() in _ALIASES:
        return _ALIASES[value.upper()]
    if value.isdigit() and 1 <= int(value) <= 12:
        return GRADE_SEQUENCE[int(value)]
    for name in GRADE_SEQUENCE:
        if name.lower() == value.lower():
            return name
    return value


def next_grade(grade_level: str | None) -> str | None:
    if grade_level is None:
        return None
    normalized = normalize_grade(grade_level)
    if normalized in GRADE_SEQUENCE[:-1]:
        return GRADE_SEQUENCE[GRADE_SEQUENCE.index(normalized) + 1]
    return grade_level


def estimate_fees(
    technology_waiver: bool = False, activity_waiver: bool = False,
) -> Decimal:
    total = Decimal("0.00")
    if not technology_waiver:
        total += TECHNOLOGY_FEE
    if not activity_waiver:
        total += ACTIVITY_FEE
    return total


def format_number(prefix: str, year: int, sequence: int) -> str:
    return f"{prefix}-{year}-{sequence:06d}"


def next_sequence(last_number: str | None) -> int:
    """Sequence after last_number (the highest issued for the prefix and year); 1 when none."""
    if not last_number:
        return 1
    return int(last_number.rsplit("-", 1)[1]) + 1


def months_between(start: date | None, end: date | None) -> int | None:
    """Whole months from start to end; None when either side is unknown or end precedes start."""
    if start is None or end is None or end < start:
        return None
    months = (end.year - start.year) * 12 + (end.month - start.month)
    if end.day < start.day:
        months -= 1
    return max(months, 0)


def missing_submission_items(
    acknowledged_accuracy: bool, parent_signature: str | None,
) -> list[str]:
    """Items still required before a pre-registration can be submitted."""
    missing = []
    if not acknowledged_accuracy:
        missing.append("accuracy acknowledgment")
    if not (parent_signature and parent_signature.strip()):
        missing.append("parent signature")
    return missing
