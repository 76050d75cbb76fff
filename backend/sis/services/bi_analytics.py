"""BI Analytics Service - in-memory business-intelligence analyses over report metrics.

Invariants:
    - Analysis ids are sequential per process, starting at 1
    - Execution depth grows with the analysis type:
      DESCRIPTIVE ⊂ DIAGNOSTIC ⊂ PREDICTIVE ⊂ PRESCRIPTIVE; REAL_TIME stops at statistics
    - Executing an analysis without usable data, or with values whose statistics
      leave the float range, marks it FAILED and raises InvalidStateError
    - Threshold rules run only after a successful execution with alerts enabled

Design Decisions:
    - In-memory not DB (ADR: analyses are recomputed from submitted data, loss on restart acceptable)
    - Dataclasses not ORM (ADR: returned as-is and serialized by FastAPI)
    - All math delegated to core/bi_statistics
"""

import logging
import math
import time
import uuid
from dataclasses import dataclass, field
from datetime import datetime
from functools import lru_cache
from itertools import combinations
from statistics import StatisticsError

from sis.core import bi_statistics as stats
from sis.core.analytics_types import (
    AlertSeverity, AnalysisStatus, AnalysisType, RuleStatistic, TimeGranularity,
)
from sis.core.bi_statistics import ThresholdOperator
from sis.core.dates import utcnow
from sis.core.errors import InvalidStateError, ResourceNotFoundError
from sis.schemas.analytics import AnalysisCreate, KpiCreate, ThresholdRuleCreate

logger = logging.getLogger(__name__)

_DIAGNOSTIC_UP = {AnalysisType.DIAGNOSTIC, AnalysisType.PREDICTIVE, AnalysisType.PRESCRIPTIVE}
_PREDICTIVE_UP = {AnalysisType.PREDICTIVE, AnalysisType.PRESCRIPTIVE}


@dataclass
class DataPoint:
    timestamp: datetime | None
    value: float | None
    dimension: str | None = None


@dataclass
class Kpi:
    kpi_id: str
    name: str
    current_value: float
    target_value: float
    unit: str | None = None
    achievement: float | None = None
    status: str | None = None
    measured_at: datetime | None = None


@dataclass
class ThresholdRule:
    rule_id: str
    name: str
    statistic: RuleStatistic
    operator: ThresholdOperator
    value: float
    upper_value: float | None
    severity: AlertSeverity


@dataclass
class BIAlert:
    alert_id: str
    rule_id: str
    rule_name: str
    statistic: str
    observed: float
    threshold: float
    severity: AlertSeverity
    triggered_at: datetime
    acknowledged: bool = False
    acknowledged_by: str | None = None
    acknowledged_at: datetime | None = None


@dataclass
class BIAnalysis:
    """One analysis: inputs, configuration and the results of its last execution."""

    analysis_id: int
    name: str
    metric: str
    analysis_type: AnalysisType
    report_id: int | None = None
    confidence_level: float = 0.95
    granularity: TimeGranularity = TimeGranularity.DAY
    forecast_horizon: int = 30
    alerts_enabled: bool = False
    data_points: list[DataPoint] = field(default_factory=list)
    status: AnalysisStatus = AnalysisStatus.CREATED
    created_by: str | None = None
    created_at: datetime = field(default_factory=utcnow)

    # === Results (replaced on each execution) ===
    aggregations: dict[str, float] = field(default_factory=dict)
    statistics: dict[str, float] = field(default_factory=dict)
    data_quality_score: float | None = None
    outliers: list[dict] = field(default_factory=list)
    correlations: dict[str, float | None] = field(default_factory=dict)
    histogram: list[dict] = field(default_factory=list)
    trend: dict | None = None
    forecast: list[dict] = field(default_factory=list)
    kpi_achievement_rate: float | None = None
    last_run_at: datetime | None = None
    execution_time_ms: float | None = None
    error_message: str | None = None

    # === Prescriptive inputs and alerting ===
    kpis: list[Kpi] = field(default_factory=list)
    threshold_rules: list[ThresholdRule] = field(default_factory=list)
    alerts: list[BIAlert] = field(default_factory=list)

    @property
    def active_alerts(self) -> int:
        return sum(1 for a in self.alerts if not a.acknowledged)

    def values(self) -> list[float]:
        return [
            p.value for p in self.data_points
            if p.value is not None and math.isfinite(p.value)
        ]


def _finite(result) -> bool:
    if isinstance(result, float):
        return math.isfinite(result)
    if isinstance(result, dict):
        return all(_finite(v) for v in result.values())
    if isinstance(result, (list, tuple)):
        return all(_finite(v) for v in result)
    return True


def _series_by_dimension(points: list[DataPoint]) -> dict[str, list[float]]:
    series: dict[str, list[float]] = {}
    for p in points:
        if p.dimension and p.value is not None and math.isfinite(p.value):
            series.setdefault(p.dimension, []).append(p.value)
    return series


class BIAnalyticsService:

    def __init__(self):
        self._analyses: dict[int, BIAnalysis] = {}
        self._next_id = 1

    def create(self, body: AnalysisCreate, actor: str) -> BIAnalysis:
        analysis = BIAnalysis(
            analysis_id=self._next_id,
            name=body.name,
            metric=body.metric,
            analysis_type=body.analysis_type,
            report_id=body.report_id,
            confidence_level=body.confidence_level,
            granularity=body.granularity,
            forecast_horizon=body.forecast_horizon,
            alerts_enabled=body.alerts_enabled,
            data_points=[
                DataPoint(p.timestamp, p.value, p.dimension) for p in body.data_points
            ],
            created_by=actor,
        )
        self._analyses[analysis.analysis_id] = analysis
        self._next_id += 1
        logger.info(
            f"BI analysis {analysis.analysis_id} created ({analysis.analysis_type.value})",
            extra={"entity_type": "BIAnalysis", "entity_id": analysis.analysis_id, "actor": actor},
        )
        return analysis

    def get(self, analysis_id: int) -> BIAnalysis:
        analysis = self._analyses.get(analysis_id)
        if analysis is None:
            raise ResourceNotFoundError("BIAnalysis", analysis_id)
        return analysis

    def list_analyses(self, analysis_type: AnalysisType | None = None) -> list[BIAnalysis]:
        return [
            a for a in self._analyses.values()
            if analysis_type is None or a.analysis_type == analysis_type
        ]

    def delete(self, analysis_id: int) -> None:
        self.get(analysis_id)
        del self._analyses[analysis_id]
        logger.info(f"BI analysis {analysis_id} deleted")

    # ─── Execution ──────────────────────────────────────────────

    @staticmethod
    def _fail(analysis: BIAnalysis, reason: str) -> InvalidStateError:
        analysis.status = AnalysisStatus.FAILED
        analysis.error_message = reason
        logger.warning(f"BI analysis {analysis.analysis_id} failed: {reason}")
        return InvalidStateError(f"BI analysis {analysis.analysis_id}: {reason}")

    def execute(self, analysis_id: int) -> BIAnalysis:
        analysis = self.get(analysis_id)
        values = analysis.values()
        if not values:
            raise self._fail(analysis, "No usable data points")

        started = time.perf_counter()
        analysis.status = AnalysisStatus.RUNNING
        try:
            self._compute(analysis, values)
        except (OverflowError, ValueError, StatisticsError) as e:
            raise self._fail(analysis, f"Values out of numeric range: {e}") from e
        if not _finite((
            analysis.aggregations, analysis.statistics, analysis.outliers,
            analysis.correlations, analysis.histogram, analysis.trend, analysis.forecast,
        )):
            raise self._fail(analysis, "Values out of numeric range")

        analysis.status = AnalysisStatus.COMPLETED
        analysis.error_message = None
        analysis.last_run_at = utcnow()
        analysis.execution_time_ms = round((time.perf_counter() - started) * 1000, 3)
        if analysis.alerts_enabled:
            self._check_thresholds(analysis)

        logger.info(
            f"BI analysis {analysis_id} completed in {analysis.execution_time_ms} ms",
            extra={"entity_type": "BIAnalysis", "entity_id": analysis_id,
                   "duration_ms": analysis.execution_time_ms},
        )
        return analysis

    def _compute(self, analysis: BIAnalysis, values: list[float]) -> None:
        kind = analysis.analysis_type
        analysis.aggregations = stats.compute_aggregations(values)
        analysis.statistics = stats.describe(values)
        analysis.data_quality_score = stats.data_quality_score(
            [p.value for p in analysis.data_points],
        )

        if kind != AnalysisType.REAL_TIME:
            analysis.outliers = stats.detect_outliers(values)
        if kind in _DIAGNOSTIC_UP:
            series = _series_by_dimension(analysis.data_points)
            analysis.correlations = {
                f"{a}~{b}": stats.correlation(series[a], series[b])
                for a, b in combinations(sorted(series), 2)
            }
            analysis.histogram = stats.histogram(values)
        if kind in _PREDICTIVE_UP:
            analysis.trend = stats.linear_trend(values)
            analysis.forecast = stats.forecast(
                values, analysis.forecast_horizon, analysis.confidence_level,
            )
        if kind == AnalysisType.PRESCRIPTIVE:
            self._evaluate_kpis(analysis)

    @staticmethod
    def _evaluate_kpis(analysis: BIAnalysis) -> None:
        if not analysis.kpis:
            analysis.kpi_achievement_rate = None
            return
        on_target = 0
        for kpi in analysis.kpis:
            kpi.achievement = stats.kpi_achievement(kpi.current_value, kpi.target_value)
            status = stats.kpi_status(kpi.achievement)
            kpi.status = status.value
            kpi.measured_at = utcnow()
            if status == stats.KpiStatus.ON_TARGET:
                on_target += 1
        analysis.kpi_achievement_rate = round(on_target / len(analysis.kpis) * 100, 2)

    @staticmethod
    def _check_thresholds(analysis: BIAnalysis) -> None:
        for rule in analysis.threshold_rules:
            observed = analysis.statistics.get(rule.statistic.value)
            if observed is None:
                continue
            if stats.threshold_violated(observed, rule.operator, rule.value, rule.upper_value):
                analysis.alerts.append(BIAlert(
                    alert_id=str(uuid.uuid4()),
                    rule_id=rule.rule_id,
                    rule_name=rule.name,
                    statistic=rule.statistic.value,
                    observed=observed,
                    threshold=rule.value,
                    severity=rule.severity,
                    triggered_at=utcnow(),
                ))
                logger.warning(
                    f"BI alert {rule.name}: {rule.statistic.value}={observed} "
                    f"{rule.operator.value} {rule.value}",
                    extra={"entity_type": "BIAnalysis", "entity_id": analysis.analysis_id},
                )

    # ─── KPIs, rules, alerts ────────────────────────────────────

    def add_kpi(self, analysis_id: int, body: KpiCreate) -> Kpi:
        analysis = self.get(analysis_id)
        kpi = Kpi(
            kpi_id=str(uuid.uuid4()),
            name=body.name,
            current_value=body.current_value,
            target_value=body.target_value,
            unit=body.unit,
        )
        analysis.kpis.append(kpi)
        return kpi

    def add_threshold_rule(self, analysis_id: int, body: ThresholdRuleCreate) -> ThresholdRule:
        analysis = self.get(analysis_id)
        rule = ThresholdRule(
            rule_id=str(uuid.uuid4()),
            name=body.name,
            statistic=body.statistic,
            operator=body.operator,
            value=body.value,
            upper_value=body.upper_value,
            severity=body.severity,
        )
        analysis.threshold_rules.append(rule)
        return rule

    def alerts(self, analysis_id: int) -> list[BIAlert]:
        return list(self.get(analysis_id).alerts)

    def acknowledge_alert(self, analysis_id: int, alert_id: str, actor: str) -> BIAlert:
        analysis = self.get(analysis_id)
        for alert in analysis.alerts:
            if alert.alert_id == alert_id:
                alert.acknowledged = True
                alert.acknowledged_by = actor
                alert.acknowledged_at = utcnow()
                return alert
        raise ResourceNotFoundError("BIAlert", alert_id)

    def statistics(self) -> dict:
        analyses = list(self._analyses.values())
        by_type = {t.value: 0 for t in AnalysisType}
        for a in analyses:
            by_type[a.analysis_type.value] += 1
        quality = [a.data_quality_score for a in analyses if a.data_quality_score is not None]
        return {
            "total_analyses": len(analyses),
            "by_type": by_type,
            "completed": sum(1 for a in analyses if a.status == AnalysisStatus.COMPLETED),
            "with_forecasts": sum(1 for a in analyses if a.forecast),
            "with_outliers": sum(1 for a in analyses if a.outliers),
            "active_alerts": sum(a.active_alerts for a in analyses),
            "average_data_quality": round(sum(quality) / len(quality), 2) if quality else 0.0,
        }


@lru_cache
def get_bi_service() -> BIAnalyticsService:
    return BIAnalyticsService()
