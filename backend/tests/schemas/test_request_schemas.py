"""Request schemas - field validators that run before any service call.

Invariants:
    - Assignment titles are stripped and cannot be blank; due dates normalised to UTC
    - target_school_year must span consecutive years
    - Conditional approval with probation needs probation_days
"""

from datetime import datetime, timedelta, timezone

import pytest
from pydantic import ValidationError

from sis.schemas.assignment import AssignmentCreate, AssignmentUpdate
from sis.schemas.pre_registration import PreRegistrationCreate
from sis.schemas.re_enrollment import ConditionalApprovalRequest, FeeAssessment


# --- AssignmentCreate ---------------------------------------------------------

def test_assignment_title_is_stripped():
    body = AssignmentCreate(course_id=1, title="  Quiz 1  ")
    assert body.title == "Quiz 1"


def test_assignment_blank_title_rejected():
    with pytest.raises(ValidationError):
        AssignmentCreate(course_id=1, title="   ")


def test_update_title_is_stripped_and_cannot_be_blank():
    assert AssignmentUpdate(title=" Quiz 2 ").title == "Quiz 2"
    assert AssignmentUpdate().title is None
    with pytest.raises(ValidationError):
        AssignmentUpdate(title="   ")


def test_naive_due_date_becomes_utc():
    body = AssignmentCreate(course_id=1, title="Essay", due_date=datetime(2026, 10, 1, 8, 0))
    assert body.due_date.tzinfo == timezone.utc
    assert body.due_date.hour == 8


def test_offset_due_date_converted_to_utc():
    offset = timezone(timedelta(hours=-5))
    body = AssignmentCreate(course_id=1, title="Essay", due_date=datetime(2026, 10, 1, 8, 0, tzinfo=offset))
    assert body.due_date.hour == 13


# --- PreRegistrationCreate ----------------------------------------------------

def test_school_year_accepts_consecutive_years():
    body = PreRegistrationCreate(student_id=1, target_school_year="2026-2027")
    assert body.target_school_year == "2026-2027"


@pytest.mark.parametrize("year", ["2026-2028", "2026/2027", "26-27"])
def test_school_year_rejects_other_shapes(year):
    with pytest.raises(ValidationError):
        PreRegistrationCreate(student_id=1, target_school_year=year)


# --- Re-enrollment requests ---------------------------------------------------

def test_probation_requires_days():
    with pytest.raises(ValidationError):
        ConditionalApprovalRequest(conditions="Weekly check-in", probation=True)
    body = ConditionalApprovalRequest(conditions="Weekly check-in", probation=True, probation_days=30)
    assert body.probation_days == 30


def test_fee_amount_cannot_be_negative():
    with pytest.raises(ValidationError):
        FeeAssessment(amount="-1.00")
