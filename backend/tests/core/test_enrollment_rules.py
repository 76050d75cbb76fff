"""Enrollment Rules tests - grade progression, fees, numbering and months away."""

from datetime import date
from decimal import Decimal

import pytest

from sis.core.enrollment_rules import (
    estimate_fees, format_number, missing_submission_items, months_between, next_grade,
    next_sequence,
)


@pytest.mark.parametrize("current, expected", [
    ("Kindergarten", "1st Grade"),
    ("K", "1st Grade"),
    ("5th Grade", "6th Grade"),
    ("11th Grade", "12th Grade"),
    ("12th Grade", "12th Grade"),
    ("Post-Secondary", "Post-Secondary"),
    ("9", "10th Grade"),
])
def test_next_grade(current, expected):
    assert next_grade(current) == expected


def test_next_grade_none():
    assert next_grade(None) is None


def test_fees_without_waivers():
    assert estimate_fees() == Decimal("125.00")


def test_fees_waived_independently():
    assert estimate_fees(technology_waiver=True) == Decimal("75.00")
    assert estimate_fees(activity_waiver=True) == Decimal("50.00")
    assert estimate_fees(True, True) == Decimal("0.00")


def test_format_number_zero_pads_sequence():
    assert format_number("PRE", 2026, 7) == "PRE-2026-000007"
    assert format_number("RNE", 2026, 123456) == "RNE-2026-123456"


def test_next_sequence_follows_highest_issued():
    assert next_sequence(None) == 1
    assert next_sequence("PRE-2026-000002") == 3
    assert next_sequence("RNE-2026-000041") == 42


# --- Months between -------------------------------------------------------------

def test_months_between_whole_months():
    assert months_between(date(2025, 1, 15), date(2025, 7, 15)) == 6


def test_months_between_day_of_month_aware():
    assert months_between(date(2025, 1, 31), date(2025, 3, 1)) == 1


def test_months_between_unknown_or_reversed():
    assert months_between(None, date(2025, 1, 1)) is None
    assert months_between(date(2025, 2, 1), date(2025, 1, 1)) is None


# --- Submission -----------------------------------------------------------------

def test_missing_items_lists_both():
    assert missing_submission_items(False, None) == ["accuracy acknowledgment", "parent signature"]


def test_blank_signature_is_missing():
    assert missing_submission_items(True, "   ") == ["parent signature"]


def test_complete_submission_has_nothing_missing():
    assert missing_submission_items(True, "Pat Parent") == []
