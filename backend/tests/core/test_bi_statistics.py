"""BI Statistics tests - aggregation, outliers, trend, forecast, KPI and thresholds."""

import pytest

from sis.core.bi_statistics import (
    AggregationFunction, KpiStatus, ThresholdOperator, TrendDirection,
    aggregate, compute_aggregations, correlation, data_quality_score, describe,
    detect_outliers, forecast, histogram, kpi_achievement, kpi_status,
    linear_trend, percentile, threshold_violated,
)


# --- Aggregation ----------------------------------------------------------------

def test_percentile_interpolates():
    assert percentile([1, 2, 3, 4], 50) == 2.5
    assert percentile([10], 99) == 10
    assert percentile([], 50) == 0.0


@pytest.mark.parametrize("func, expected", [
    (AggregationFunction.SUM, 12),
    (AggregationFunction.AVG, 3),
    (AggregationFunction.MIN, 1),
    (AggregationFunction.MAX, 6),
    (AggregationFunction.COUNT, 4),
    (AggregationFunction.COUNT_DISTINCT, 3),
    (AggregationFunction.MEDIAN, 2.5),
    (AggregationFunction.MODE, 1),
    (AggregationFunction.FIRST, 1),
    (AggregationFunction.LAST, 6),
])
def test_aggregate(func, expected):
    assert aggregate([1, 1, 4, 6], func) == expected


def test_aggregate_empty_is_zero():
    assert aggregate([], AggregationFunction.AVG) == 0.0


def test_compute_aggregations_covers_every_function():
    result = compute_aggregations([2.0, 4.0])
    assert set(result) == {f.value for f in AggregationFunction}


def test_describe_empty_and_basic():
    assert describe([]) == {}
    stats = describe([1, 2, 3, 4, 5])
    assert stats["mean"] == 3
    assert stats["range"] == 4
    assert stats["q1"] == 2
    assert stats["q3"] == 4


def test_data_quality_counts_missing_and_non_finite():
    assert data_quality_score([1.0, None, float("inf"), 4.0]) == 50.0
    assert data_quality_score([]) == 0.0


# --- Diagnostics ----------------------------------------------------------------

def test_outliers_iqr_on_small_samples():
    outliers = detect_outliers([10, 11, 12, 11, 10, 95])
    assert [o["value"] for o in outliers] == [95]
    assert outliers[0]["method"] == "IQR"


def test_outliers_z_score_on_large_samples():
    values = [10.0] * 30 + [200.0]
    outliers = detect_outliers(values)
    assert [o["index"] for o in outliers] == [30]
    assert outliers[0]["method"] == "Z_SCORE"


def test_outliers_need_three_values():
    assert detect_outliers([1, 100]) == []


def test_correlation_perfect_and_undefined():
    assert correlation([1, 2, 3], [2, 4, 6]) == 1.0
    assert correlation([1], [1]) is None
    assert correlation([1, 1, 1], [1, 2, 3]) is None


def test_histogram_buckets_cover_all_values():
    buckets = histogram([0, 1, 2, 3, 4, 5, 6, 7, 8, 9, 10], buckets=5)
    assert len(buckets) == 5
    assert sum(b["count"] for b in buckets) == 11


def test_histogram_constant_values_single_bucket():
    assert histogram([3, 3, 3]) == [{"lower": 3, "upper": 3, "count": 3}]


# --- Prediction -----------------------------------------------------------------

def test_linear_trend_increasing():
    trend = linear_trend([1, 3, 5, 7])
    assert trend["slope"] == 2.0
    assert trend["r_squared"] == 1.0
    assert trend["direction"] == TrendDirection.INCREASING.value


def test_linear_trend_stable_below_half_unit_slope():
    assert linear_trend([5, 5.1, 5.2, 5.3])["direction"] == TrendDirection.STABLE.value


def test_linear_trend_single_value():
    assert linear_trend([4])["intercept"] == 4


def test_forecast_extends_line_with_band():
    predictions = forecast([1, 2, 3, 4], horizon=2)
    assert [p["value"] for p in predictions] == [5.0, 6.0]
    assert all(p["lower"] <= p["value"] <= p["upper"] for p in predictions)


def test_forecast_needs_two_points():
    assert forecast([1], horizon=3) == []


# --- Prescription ---------------------------------------------------------------

def test_kpi_bands():
    assert kpi_status(kpi_achievement(95, 95)) == KpiStatus.ON_TARGET
    assert kpi_status(kpi_achievement(80, 100)) == KpiStatus.AT_RISK
    assert kpi_status(kpi_achievement(50, 100)) == KpiStatus.OFF_TARGET


@pytest.mark.parametrize("observed, op, value, upper, expected", [
    (5, ThresholdOperator.GT, 4, None, True),
    (4, ThresholdOperator.GT, 4, None, False),
    (4, ThresholdOperator.GTE, 4, None, True),
    (3, ThresholdOperator.LT, 4, None, True),
    (4, ThresholdOperator.LTE, 4, None, True),
    (4.0005, ThresholdOperator.EQ, 4, None, True),
    (4.01, ThresholdOperator.NEQ, 4, None, True),
    (5, ThresholdOperator.BETWEEN, 4, 6, True),
    (7, ThresholdOperator.BETWEEN, 4, 6, False),
])
def test_threshold_violated(observed, op, value, upper, expected):
    assert threshold_violated(observed, op, value, upper) is expected
