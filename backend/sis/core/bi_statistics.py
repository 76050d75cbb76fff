"""BI Statistics - aggregation, descriptive statistics, outliers, trend and forecast. Pure, no IO.

Invariants:
    - Every function accepts plain float lists and never mutates them
    - Empty inputs yield empty/zero results; callers decide whether that is an error
    - Trend is STABLE when |slope| < 0.5 (units per step)
    - KPI achievement = current / target × 100: ≥ 100 ON_TARGET, ≥ 80 AT_RISK, else OFF_TARGET
    - EQ/NEQ threshold comparisons use a 0.001 tolerance

Design Decisions:
    - stdlib statistics module over numpy: inputs are request-sized lists, not arrays
    - Outliers by |z| > 3, falling back to 1.5 × IQR when n < 10 (z is meaningless on tiny samples)
    - Forecast band uses the residual standard deviation scaled by the normal quantile
      of the configured confidence level
"""

import math
import statistics
from collections import Counter
from enum import Enum

STABLE_SLOPE = 0.5
EQUALITY_TOLERANCE = 0.001
Z_OUTLIER = 3.0
SMALL_SAMPLE = 10


class AggregationFunction(str, Enum):
    SUM = "SUM"
    AVG = "AVG"
    MIN = "MIN"
    MAX = "MAX"
    COUNT = "COUNT"
    COUNT_DISTINCT = "COUNT_DISTINCT"
    MEDIAN = "MEDIAN"
    MODE = "MODE"
    STDDEV = "STDDEV"
    VARIANCE = "VARIANCE"
    PERCENTILE = "PERCENTILE"
    FIRST = "FIRST"
    LAST = "LAST"


class TrendDirection(str, Enum):
    INCREASING = "INCREASING"
    DECREASING = "DECREASING"
    STABLE = "STABLE"


class KpiStatus(str, Enum):
    ON_TARGET = "ON_TARGET"
    AT_RISK = "AT_RISK"
    OFF_TARGET = "OFF_TARGET"


class ThresholdOperator(str, Enum):
    GT = "GT"
    LT = "LT"
    GTE = "GTE"
    LTE = "LTE"
    EQ = "EQ"
    NEQ = "NEQ"
    BETWEEN = "BETWEEN"


# ─── Aggregation ─────────────────────────────────────────────────

def percentile(values: list[float], pct: float) -> float:
    """Linear-interpolated percentile (pct in 0..100)."""
    if not values:
        return 0.0
    ordered = sorted(values)
    if len(ordered) == 1:
        return ordered[0]
    rank = (len(ordered) - 1) * pct / 100
    low = math.floor(rank)
    high = math.ceil(rank)
    if low == high:
        return ordered[low]
    return ordered[low] + (ordered[high] - ordered[low]) * (rank - low)


def aggregate(
    values: list[float], func: AggregationFunction, pct: float = 90.0,
) -> float:
    if not values:
        return 0.0
    if func == AggregationFunction.SUM:
        return math.fsum(values)
    if func == AggregationFunction.AVG:
        return statistics.fmean(values)
    if func == AggregationFunction.MIN:
        return min(values)
    if func == AggregationFunction.MAX:
        return max(values)
    if func == AggregationFunction.COUNT:
        return float(len(values))
    if func == AggregationFunction.COUNT_DISTINCT:
        return float(len(set(values)))
    if func == AggregationFunction.MEDIAN:
        return statistics.median(values)
    if func == AggregationFunction.MODE:
        # Smallest of the most common values, so ties resolve deterministically
        counts = Counter(values)
        top = max(counts.values())
        return min(v for v, c in counts.items() if c == top)
    if func == AggregationFunction.STDDEV:
        return statistics.pstdev(values)
    if func == AggregationFunction.VARIANCE:
        return statistics.pvariance(values)
    if func == AggregationFunction.PERCENTILE:
        return percentile(values, pct)
    if func == AggregationFunction.FIRST:
        return values[0]
    return values[-1]


def compute_aggregations(values: list[float]) -> dict[str, float]:
    return {
        f.value: round(aggregate(values, f), 4) for f in AggregationFunction
    }


def describe(values: list[float]) -> dict[str, float]:
    if not values:
        return {}
    return {
        "count": len(values),
        "mean": round(statistics.fmean(values), 4),
        "median": round(statistics.median(values), 4),
        "stddev": round(statistics.pstdev(values), 4),
        "variance": round(statistics.pvariance(values), 4),
        "min": min(values),
        "max": max(values),
        "range": max(values) - min(values),
        "q1": round(percentile(values, 25), 4),
        "q3": round(percentile(values, 75), 4),
    }


def data_quality_score(raw: list[float | None]) -> float:
    """Percentage of entries that are present and finite."""
    if not raw:
        return 0.0
    valid = sum(1 for v in raw if v is not None and math.isfinite(v))
    return round(valid / len(raw) * 100, 2)


# ─── Diagnostics ─────────────────────────────────────────────────

def detect_outliers(values: list[float]) -> list[dict]:
    if len(values) < 3:
        return []
    if len(values) < SMALL_SAMPLE:
        q1, q3 = percentile(values, 25), percentile(values, 75)
        fence = 1.5 * (q3 - q1)
        return [
            {"index": i, "value": v, "method": "IQR"}
            for i, v in enumerate(values)
            if v < q1 - fence or v > q3 + fence
        ]
    mean = statistics.fmean(values)
    sd = statistics.pstdev(values)
    if sd == 0:
        return []
    outliers = []
    for i, v in enumerate(values):
        z = (v - mean) / sd
        if abs(z) > Z_OUTLIER:
            outliers.append({"index": i, "value": v, "method": "Z_SCORE", "z_score": round(z, 3)})
    return outliers


def correlation(xs: list[float], ys: list[float]) -> float | None:
    """Pearson coefficient over the common prefix; None when undefined."""
    n = min(len(xs), len(ys))
    if n < 2:
        return None
    try:
        return round(statistics.correlation(xs[:n], ys[:n]), 4)
    except statistics.StatisticsError:
        return None


def histogram(values: list[float], buckets: int = 10) -> list[dict]:
    if not values:
        return []
    low, high = min(values), max(values)
    if low == high:
        return [{"lower": low, "upper": high, "count": len(values)}]
    width = (high - low) / buckets
    counts = [0] * buckets
    for v in values:
        idx = min(int((v - low) / width), buckets - 1)
        counts[idx] += 1
    return [
        {
            "lower": round(low + i * width, 4),
            "upper": round(low + (i + 1) * width, 4),
            "count": counts[i],
        }
        for i in range(buckets)
    ]


# ─── Prediction ──────────────────────────────────────────────────

def linear_trend(values: list[float]) -> dict:
    """Least-squares fit of value against step index."""
    n = len(values)
    if n < 2:
        return {
            "slope": 0.0, "intercept": values[0] if values else 0.0,
            "r_squared": 0.0, "direction": TrendDirection.STABLE.value,
        }
    xs = list(range(n))
    fit = statistics.linear_regression(xs, values)
    slope, intercept = fit.slope, fit.intercept
    mean_y = statistics.fmean(values)
    ss_tot = math.fsum((y - mean_y) ** 2 for y in values)
    ss_res = math.fsum((y - (slope * x + intercept)) ** 2 for x, y in zip(xs, values))
    r_squared = 1 - ss_res / ss_tot if ss_tot else 0.0

    if abs(slope) < STABLE_SLOPE:
        direction = TrendDirection.STABLE
    elif slope > 0:
        direction = TrendDirection.INCREASING
    else:
        direction = TrendDirection.DECREASING
    return {
        "slope": round(slope, 4),
        "intercept": round(intercept, 4),
        "r_squared": round(r_squared, 4),
        "direction": direction.value,
    }


def forecast(
    values: list[float], horizon: int, confidence: float = 0.95,
) -> list[dict]:
    if len(values) < 2 or horizon <= 0:
        return []
    n = len(values)
    xs = list(range(n))
    fit = statistics.linear_regression(xs, values)
    residuals = [y - (fit.slope * x + fit.intercept) for x, y in zip(xs, values)]
    spread = statistics.pstdev(residuals)
    z = statistics.NormalDist().inv_cdf((1 + confidence) / 2)
    predictions = []
    for step in range(1, horizon + 1):
        x = n - 1 + step
        predicted = fit.slope * x + fit.intercept
        predictions.append({
            "step": step,
            "value": round(predicted, 4),
            "lower": round(predicted - z * spread, 4),
            "upper": round(predicted + z * spread, 4),
        })
    return predictions


# ─── Prescription ────────────────────────────────────────────────

def kpi_achievement(current: float, target: float) -> float:
    if target == 0:
        return 100.0 if current >= 0 else 0.0
    return round(current / target * 100, 2)


def kpi_status(achievement: float) -> KpiStatus:
    if achievement >= 100:
        return KpiStatus.ON_TARGET
    if achievement >= 80:
        return KpiStatus.AT_RISK
    return KpiStatus.OFF_TARGET


def threshold_violated(
    observed: float,
    operator: ThresholdOperator,
    value: float,
    upper_value: float | None = None,
) -> bool:
    """True when the observed statistic satisfies the rule's alert condition."""
    if operator == ThresholdOperator.GT:
        return observed > value
    if operator == ThresholdOperator.LT:
        return observed < value
    if operator == ThresholdOperator.GTE:
        return observed >= value
    if operator == ThresholdOperator.LTE:
        return observed <= value
    if operator == ThresholdOperator.EQ:
        return abs(observed - value) < EQUALITY_TOLERANCE
    if operator == ThresholdOperator.NEQ:
        return abs(observed - value) >= EQUALITY_TOLERANCE
    upper = value if upper_value is None else upper_value
    return value <= observed <= upper
