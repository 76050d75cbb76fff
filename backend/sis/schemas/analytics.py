"""Analytics Schemas - request payloads for the in-memory analytics stores.

Invariants:
    - Responses are the stores' dataclasses, serialized by FastAPI directly
    - Ranges enforced here: rates 0..1, confidence 0.5..0.999, usage 0..100
"""

from datetime import date, datetime

from pydantic import BaseModel, Field, model_validator

from sis.core.analytics_types import (
    AlertSeverity, AnalysisType, CollaborationType, CommentType, MetricType,
    Permission, RuleStatistic, ShareType, SpanKind, SpanStatus, TaskPriority,
    TimeGranularity,
)
from sis.core.bi_statistics import ThresholdOperator
from sis.core.monitor_health import HealthCheckType


# ─── Business intelligence ───────────────────────────────────────

class DataPointIn(BaseModel):
    timestamp: datetime | None = None
    value: float | None = None
    dimension: str | None = Field(None, max_length=100)


class AnalysisCreate(BaseModel):
    name: str = Field(min_length=1, max_length=200)
    report_id: int | None = None
    analysis_type: AnalysisType = AnalysisType.DESCRIPTIVE
    metric: str = Field(min_length=1, max_length=100)
    data_points: list[DataPointIn] = Field(default_factory=list)
    confidence_level: float = Field(0.95, ge=0.5, le=0.999)
    granularity: TimeGranularity = TimeGranularity.DAY
    forecast_horizon: int = Field(30, ge=1, le=365)
    alerts_enabled: bool = False


class KpiCreate(BaseModel):
    name: str = Field(min_length=1, max_length=200)
    current_value: float
    target_value: float
    unit: str | None = Field(None, max_length=30)


class ThresholdRuleCreate(BaseModel):
    name: str = Field(min_length=1, max_length=200)
    statistic: RuleStatistic
    operator: ThresholdOperator
    value: float
    upper_value: float | None = None
    severity: AlertSeverity = AlertSeverity.WARNING

    @model_validator(mode="after")
    def between_needs_upper(self):
        if self.operator == ThresholdOperator.BETWEEN and self.upper_value is None:
            raise ValueError("BETWEEN requires upper_value")
        return self


# ─── Tracing ─────────────────────────────────────────────────────

class TracingSystemCreate(BaseModel):
    system_name: str = Field(min_length=1, max_length=200)
    sampling_rate: float = Field(1.0, ge=0.0, le=1.0)


class TraceStart(BaseModel):
    trace_name: str = Field(min_length=1, max_length=200)
    root_service: str = Field(min_length=1, max_length=100)


class SpanStart(BaseModel):
    trace_id: str
    parent_span_id: str | None = None
    operation_name: str = Field(min_length=1, max_length=200)
    service_name: str = Field(min_length=1, max_length=100)
    kind: SpanKind = SpanKind.INTERNAL
    tags: dict[str, str] = Field(default_factory=dict)


class SpanComplete(BaseModel):
    status: SpanStatus = SpanStatus.OK
    error_message: str | None = Field(None, max_length=2000)


class ServiceRegister(BaseModel):
    service_name: str = Field(min_length=1, max_length=100)
    version: str | None = Field(None, max_length=30)
    environment: str | None = Field(None, max_length=30)


class OperationRegister(BaseModel):
    service_name: str = Field(min_length=1, max_length=100)
    operation_name: str = Field(min_length=1, max_length=200)


class DependencyRegister(BaseModel):
    source_service: str = Field(min_length=1, max_length=100)
    target_service: str = Field(min_length=1, max_length=100)
    dependency_type: str = Field("HTTP", max_length=30)


class SpanLogCreate(BaseModel):
    level: str = Field("INFO", max_length=10)
    message: str = Field(min_length=1, max_length=2000)
    fields: dict[str, str] = Field(default_factory=dict)


class TraceErrorCreate(BaseModel):
    trace_id: str | None = None
    span_id: str | None = None
    service_name: str = Field(min_length=1, max_length=100)
    error_type: str = Field(min_length=1, max_length=100)
    message: str = Field(min_length=1, max_length=2000)


class LatencyProfileCreate(BaseModel):
    profile_name: str = Field(min_length=1, max_length=200)
    service_name: str = Field(min_length=1, max_length=100)
    operation_name: str | None = Field(None, max_length=200)


class TraceMetricCreate(BaseModel):
    metric_name: str = Field(min_length=1, max_length=200)
    service_name: str = Field(min_length=1, max_length=100)
    metric_type: MetricType = MetricType.GAUGE
    value: float
    unit: str | None = Field(None, max_length=30)
    labels: dict[str, str] = Field(default_factory=dict)


# ─── Collaboration ───────────────────────────────────────────────

class CollaborationCreate(BaseModel):
    report_id: int
    report_name: str = Field(min_length=1, max_length=200)
    owner: str = Field(min_length=1, max_length=64)
    collaboration_type: CollaborationType = CollaborationType.ASYNCHRONOUS
    comments_enabled: bool = True
    threads_enabled: bool = True
    mentions_enabled: bool = True
    notifications_enabled: bool = True
    version_control_enabled: bool = True
    tasks_enabled: bool = True
    allow_link_sharing: bool = True


class CollaboratorAdd(BaseModel):
    user: str = Field(min_length=1, max_length=64)
    permission: Permission = Permission.VIEWER


class CommentCreate(BaseModel):
    author: str = Field(min_length=1, max_length=64)
    text: str = Field(min_length=1, max_length=5000)
    comment_type: CommentType = CommentType.GENERAL
    parent_comment_id: str | None = None


class SharedLinkCreate(BaseModel):
    created_by: str = Field(min_length=1, max_length=64)
    share_type: ShareType = ShareType.VIEW
    expires_in_days: int | None = Field(None, ge=1, le=365)


class ViewRecord(BaseModel):
    user: str = Field(min_length=1, max_length=64)


class EditRecord(BaseModel):
    user: str = Field(min_length=1, max_length=64)
    description: str | None = Field(None, max_length=2000)


class TaskCreate(BaseModel):
    title: str = Field(min_length=1, max_length=200)
    assignee: str = Field(min_length=1, max_length=64)
    priority: TaskPriority = TaskPriority.MEDIUM
    due_date: date | None = None


# ─── Monitoring ──────────────────────────────────────────────────

class MonitorCreate(BaseModel):
    monitor_name: str = Field(min_length=1, max_length=200)
    target_service: str = Field(min_length=1, max_length=100)
    check_interval_seconds: int = Field(60, ge=1, le=86400)
    timeout_seconds: int = Field(30, ge=1, le=3600)


class HealthCheckRequest(BaseModel):
    check_type: HealthCheckType


class RequestMetric(BaseModel):
    response_time_ms: float = Field(ge=0)
    success: bool = True


class ResourceReadings(BaseModel):
    cpu: float | None = Field(None, ge=0, le=100)
    memory: float | None = Field(None, ge=0, le=100)
    disk: float | None = Field(None, ge=0, le=100)
    database_status: str | None = Field(None, max_length=30)
    cache_status: str | None = Field(None, max_length=30)
    external_services: dict[str, str] | None = None


class UptimeUpdate(BaseModel):
    uptime_seconds: int = Field(ge=0)
    downtime_seconds: int = Field(0, ge=0)


class ErrorReport(BaseModel):
    message: str = Field(min_length=1, max_length=2000)
    critical: bool = False


class AlertCreate(BaseModel):
    name: str = Field(min_length=1, max_length=200)
    severity: AlertSeverity = AlertSeverity.WARNING
    message: str = Field(min_length=1, max_length=2000)
