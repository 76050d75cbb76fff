"""Grade Math - percentage, letter grades and assignment statistics. Pure, no IO.

Invariants:
    - Letter scale: A ≥ 90, B ≥ 80, C ≥ 70, D ≥ 60, otherwise F
    - Statistics consider only GRADED results with a score
    - Empty inputs return zeroed statistics (never raise)

Design Decisions:
    - Population standard deviation: a class is the whole population, not a sample
"""

import math
import statistics

from sis.core.domain_types import GradeStatus

LETTER_SCALE = (("A", 90.0), ("B", 80.0), ("C", 70.0), ("D", 60.0))


def percentage(score: float, max_points: float) -> float:
    if max_points <= 0:
        return 0.0
    return round(score / max_points * 100, 2)


def letter_grade(pct: float) -> str:
    for letter, floor in LETTER_SCALE:
        if pct >= floor:
            return letter
    return "F"


def score_in_range(score: float, max_points: float) -> bool:
    return 0 <= score <= max_points and math.isfinite(score)


def compute_assignment_statistics(
    grades: list[dict], max_points: float,
) -> dict:
    """Summarise grades given as dicts with "status" and "score" keys."""
    scores = [
        g["score"] for g in grades
        if g.get("status") == GradeStatus.GRADED.value and g.get("score") is not None
    ]
    distribution = {letter: 0 for letter, _ in LETTER_SCALE}
    distribution["F"] = 0
    for s in scores:
        distribution[letter_grade(percentage(s, max_points))] += 1

    base = {
        "count": len(grades),
        "graded_count": len(scores),
        "missing_count": sum(
            1 for g in grades if g.get("status") == GradeStatus.MISSING.value
        ),
        "excused_count": sum(
            1 for g in grades if g.get("status") == GradeStatus.EXCUSED.value
        ),
        "grade_distribution": distribution,
    }
    if not scores:
        return {
            **base,
            "average": 0.0, "median": 0.0, "highest": 0.0, "lowest": 0.0,
            "std_dev": 0.0, "average_percentage": 0.0,
        }

    mean = statistics.fmean(scores)
    return {
        **base,
        "average": round(mean, 2),
        "median": round(statistics.median(scores), 2),
        "highest": max(scores),
        "lowest": min(scores),
        "std_dev": round(statistics.pstdev(scores), 2),
        "average_percentage": percentage(mean, max_points),
    }


def class_average(grades: list[dict]) -> float | None:
    """Mean of GRADED scores, or None when nothing has been graded."""
    scores = [
        g["score"] for g in grades
        if g.get("status") == GradeStatus.GRADED.value and g.get("score") is not None
    ]
    if not scores:
        return None
    return round(statistics.fmean(scores), 2)
