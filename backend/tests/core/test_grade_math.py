"""Grade Math tests - percentage, letter scale and assignment statistics.

Tests cover:
    - Letter boundaries (90/80/70/60)
    - Statistics ignore non-GRADED rows but count them by status
    - Empty and ungraded inputs return zeroed results
"""

import pytest

from sis.core.grade_math import (
    class_average, compute_assignment_statistics, letter_grade, percentage, score_in_range,
)


# --- Percentage & letters ------------------------------------------------------

def test_percentage_rounds_to_two_decimals():
    assert percentage(17, 30) == 56.67


def test_percentage_with_zero_max_points_is_zero():
    assert percentage(10, 0) == 0.0


@pytest.mark.parametrize("pct, letter", [
    (100, "A"), (90, "A"), (89.99, "B"), (80, "B"), (70, "C"), (60, "D"), (59.9, "F"), (0, "F"),
])
def test_letter_grade_boundaries(pct, letter):
    assert letter_grade(pct) == letter


def test_score_in_range_rejects_negative_and_over_max():
    assert score_in_range(0, 50)
    assert score_in_range(50, 50)
    assert not score_in_range(-1, 50)
    assert not score_in_range(50.5, 50)
    assert not score_in_range(float("nan"), 50)


# --- Statistics ----------------------------------------------------------------

def test_statistics_over_graded_scores():
    grades = [
        {"status": "GRADED", "score": 95},
        {"status": "GRADED", "score": 85},
        {"status": "GRADED", "score": 75},
        {"status": "MISSING", "score": None},
        {"status": "EXCUSED", "score": None},
    ]
    stats = compute_assignment_statistics(grades, 100)

    assert stats["count"] == 5
    assert stats["graded_count"] == 3
    assert stats["missing_count"] == 1
    assert stats["excused_count"] == 1
    assert stats["average"] == 85.0
    assert stats["median"] == 85.0
    assert stats["highest"] == 95
    assert stats["lowest"] == 75
    assert stats["std_dev"] == 8.16
    assert stats["average_percentage"] == 85.0
    assert stats["grade_distribution"] == {"A": 1, "B": 1, "C": 1, "D": 0, "F": 0}


def test_statistics_without_graded_scores_are_zero():
    stats = compute_assignment_statistics([{"status": "PENDING", "score": None}], 100)
    assert stats["graded_count"] == 0
    assert stats["average"] == 0.0
    assert stats["std_dev"] == 0.0
    assert sum(stats["grade_distribution"].values()) == 0


def test_statistics_on_empty_list():
    stats = compute_assignment_statistics([], 100)
    assert stats["count"] == 0
    assert stats["average_percentage"] == 0.0


def test_class_average_none_when_nothing_graded():
    assert class_average([{"status": "MISSING", "score": None}]) is None


def test_class_average_ignores_ungraded_scores():
    grades = [
        {"status": "GRADED", "score": 80},
        {"status": "GRADED", "score": 90},
        {"status": "PENDING", "score": 10},
    ]
    assert class_average(grades) == 85.0
