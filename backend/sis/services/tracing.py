"""Tracing Service - in-memory distributed tracing for report generation pipelines.

Invariants:
    - A span belongs to exactly one known trace (unknown trace → 404)
    - Completing a span fixes its duration and updates trace and system counters once
    - Latency profiles come from completed spans only; none matching → InvalidStateError
    - Trace ids and span ids are uuid4 strings; system ids are sequential

Design Decisions:
    - In-memory not DB (ADR: trace data is diagnostic and short-lived)
    - Percentiles share core/bi_statistics.percentile with the BI analyses
"""

import logging
import statistics
import uuid
from dataclasses import dataclass, field
from datetime import datetime
from functools import lru_cache

from sis.core.analytics_types import MetricType, SpanKind, SpanStatus, TraceStatus, TracingStatus
from sis.core.bi_statistics import percentile
from sis.core.dates import utcnow
from sis.core.errors import InvalidStateError, ResourceNotFoundError
from sis.schemas.analytics import (
    DependencyRegister, LatencyProfileCreate, OperationRegister, ServiceRegister,
    SpanComplete, SpanLogCreate, SpanStart, TraceErrorCreate, TraceMetricCreate,
    TraceStart, TracingSystemCreate,
)

logger = logging.getLogger(__name__)


@dataclass
class Span:
    span_id: str
    trace_id: str
    parent_span_id: str | None
    operation_name: str
    service_name: str
    kind: SpanKind
    start_time: datetime
    tags: dict[str, str] = field(default_factory=dict)
    status: SpanStatus = SpanStatus.UNSET
    error_message: str | None = None
    end_time: datetime | None = None
    duration_ms: float | None = None
    logs: list[dict] = field(default_factory=list)


@dataclass
class Trace:
    trace_id: str
    trace_name: str
    root_service: str
    start_time: datetime
    status: TraceStatus = TraceStatus.IN_PROGRESS
    end_time: datetime | None = None
    duration_ms: float | None = None
    span_ids: list[str] = field(default_factory=list)
    span_count: int = 0
    error_count: int = 0
    services: list[str] = field(default_factory=list)


@dataclass
class LatencyProfile:
    profile_id: str
    profile_name: str
    service_name: str
    operation_name: str | None
    sample_count: int
    min_ms: float
    max_ms: float
    avg_ms: float
    p50_ms: float
    p75_ms: float
    p90_ms: float
    p95_ms: float
    p99_ms: float
    created_at: datetime


@dataclass
class TracingSystem:
    """A tracing deployment with its traces, spans and derived statistics."""

    system_id: int
    system_name: str
    sampling_rate: float
    status: TracingStatus = TracingStatus.INITIALIZING
    created_at: datetime = field(default_factory=utcnow)
    deployed_at: datetime | None = None

    # === Trace data ===
    traces: dict[str, Trace] = field(default_factory=dict)
    spans: dict[str, Span] = field(default_factory=dict)

    # === Topology ===
    services: dict[str, dict] = field(default_factory=dict)
    operations: list[dict] = field(default_factory=list)
    dependencies: list[dict] = field(default_factory=list)

    # === Diagnostics ===
    errors: list[dict] = field(default_factory=list)
    latency_profiles: list[LatencyProfile] = field(default_factory=list)
    metrics: list[dict] = field(default_factory=list)

    # === Counters (updated on span completion) ===
    total_traces: int = 0
    total_spans: int = 0
    completed_spans: int = 0
    error_spans: int = 0
    avg_latency_ms: float = 0.0
    max_latency_ms: float = 0.0

    @property
    def error_rate(self) -> float:
        if not self.completed_spans:
            return 0.0
        return round(self.error_spans / self.completed_spans * 100, 2)


class TracingService:

    def __init__(self):
        self._systems: dict[int, TracingSystem] = {}
        self._next_id = 1

    def create(self, body: TracingSystemCreate) -> TracingSystem:
        system = TracingSystem(
            system_id=self._next_id,
            system_name=body.system_name,
            sampling_rate=body.sampling_rate,
        )
        self._systems[system.system_id] = system
        self._next_id += 1
        logger.info(f"Tracing system {system.system_id} ({system.system_name}) created")
        return system

    def get(self, system_id: int) -> TracingSystem:
        system = self._systems.get(system_id)
        if system is None:
            raise ResourceNotFoundError("TracingSystem", system_id)
        return system

    def delete(self, system_id: int) -> None:
        self.get(system_id)
        del self._systems[system_id]

    def deploy(self, system_id: int) -> TracingSystem:
        system = self.get(system_id)
        system.status = TracingStatus.ACTIVE
        system.deployed_at = utcnow()
        logger.info(f"Tracing system {system_id} deployed")
        return system

    # ─── Traces & spans ─────────────────────────────────────────

    def _trace(self, system: TracingSystem, trace_id: str) -> Trace:
        trace = system.traces.get(trace_id)
        if trace is None:
            raise ResourceNotFoundError("Trace", trace_id)
        return trace

    def _span(self, system: TracingSystem, span_id: str) -> Span:
        span = system.spans.get(span_id)
        if span is None:
            raise ResourceNotFoundError("Span", span_id)
        return span

    def start_trace(self, system_id: int, body: TraceStart) -> Trace:
        system = self.get(system_id)
        trace = Trace(
            trace_id=str(uuid.uuid4()),
            trace_name=body.trace_name,
            root_service=body.root_service,
            start_time=utcnow(),
            services=[body.root_service],
        )
        system.traces[trace.trace_id] = trace
        system.total_traces += 1
        logger.debug(f"Trace {trace.trace_id} started in system {system_id}")
        return trace

    def get_trace(self, system_id: int, trace_id: str) -> dict:
        system = self.get(system_id)
        trace = self._trace(system, trace_id)
        return {"trace": trace, "spans": [system.spans[s] for s in trace.span_ids]}

    def complete_trace(self, system_id: int, trace_id: str) -> Trace:
        system = self.get(system_id)
        trace = self._trace(system, trace_id)
        if trace.status != TraceStatus.IN_PROGRESS:
            raise InvalidStateError(f"Trace {trace_id} is already {trace.status.value}")
        trace.end_time = utcnow()
        trace.duration_ms = round((trace.end_time - trace.start_time).total_seconds() * 1000, 3)
        trace.status = TraceStatus.ERROR if trace.error_count else TraceStatus.COMPLETED
        return trace

    def start_span(self, system_id: int, body: SpanStart) -> Span:
        system = self.get(system_id)
        trace = self._trace(system, body.trace_id)
        if body.parent_span_id is not None:
            self._span(system, body.parent_span_id)
        span = Span(
            span_id=str(uuid.uuid4()),
            trace_id=trace.trace_id,
            parent_span_id=body.parent_span_id,
            operation_name=body.operation_name,
            service_name=body.service_name,
            kind=body.kind,
            start_time=utcnow(),
            tags=dict(body.tags),
        )
        system.spans[span.span_id] = span
        system.total_spans += 1
        trace.span_ids.append(span.span_id)
        trace.span_count += 1
        if body.service_name not in trace.services:
            trace.services.append(body.service_name)
        return span

    def complete_span(self, system_id: int, span_id: str, body: SpanComplete) -> Span:
        system = self.get(system_id)
        span = self._span(system, span_id)
        if span.end_time is not None:
            raise InvalidStateError(f"Span {span_id} is already complete")
        span.end_time = utcnow()
        span.duration_ms = round((span.end_time - span.start_time).total_seconds() * 1000, 3)
        span.status = body.status
        span.error_message = body.error_message

        system.completed_spans += 1
        system.avg_latency_ms = round(
            system.avg_latency_ms
            + (span.duration_ms - system.avg_latency_ms) / system.completed_spans,
            3,
        )
        system.max_latency_ms = max(system.max_latency_ms, span.duration_ms)
        if body.status == SpanStatus.ERROR:
            system.error_spans += 1
            system.traces[span.trace_id].error_count += 1
            logger.warning(
                f"Span {span.operation_name}@{span.service_name} failed: {body.error_message}",
            )
        return span

    def add_span_log(self, system_id: int, span_id: str, body: SpanLogCreate) -> dict:
        span = self._span(self.get(system_id), span_id)
        entry = {"timestamp": utcnow(), **body.model_dump()}
        span.logs.append(entry)
        return entry

    # ─── Topology ───────────────────────────────────────────────

    def register_service(self, system_id: int, body: ServiceRegister) -> dict:
        system = self.get(system_id)
        entry = {**body.model_dump(), "registered_at": utcnow()}
        system.services[body.service_name] = entry
        return entry

    def register_operation(self, system_id: int, body: OperationRegister) -> dict:
        system = self.get(system_id)
        entry = {"operation_id": str(uuid.uuid4()), **body.model_dump()}
        system.operations.append(entry)
        return entry

    def add_dependency(self, system_id: int, body: DependencyRegister) -> dict:
        system = self.get(system_id)
        entry = {"dependency_id": str(uuid.uuid4()), **body.model_dump()}
        system.dependencies.append(entry)
        return entry

    # ─── Diagnostics ────────────────────────────────────────────

    def record_error(self, system_id: int, body: TraceErrorCreate) -> dict:
        system = self.get(system_id)
        if body.trace_id is not None:
            self._trace(system, body.trace_id)
        entry = {"error_id": str(uuid.uuid4()), "recorded_at": utcnow(), **body.model_dump()}
        system.errors.append(entry)
        return entry

    def create_latency_profile(self, system_id: int, body: LatencyProfileCreate) -> LatencyProfile:
        system = self.get(system_id)
        durations = [
            s.duration_ms for s in system.spans.values()
            if s.duration_ms is not None
            and s.service_name == body.service_name
            and (body.operation_name is None or s.operation_name == body.operation_name)
        ]
        if not durations:
            raise InvalidStateError(
                f"No completed spans for {body.service_name}"
                + (f"/{body.operation_name}" if body.operation_name else ""),
            )
        profile = LatencyProfile(
            profile_id=str(uuid.uuid4()),
            profile_name=body.profile_name,
            service_name=body.service_name,
            operation_name=body.operation_name,
            sample_count=len(durations),
            min_ms=min(durations),
            max_ms=max(durations),
            avg_ms=round(statistics.fmean(durations), 3),
            p50_ms=round(percentile(durations, 50), 3),
            p75_ms=round(percentile(durations, 75), 3),
            p90_ms=round(percentile(durations, 90), 3),
            p95_ms=round(percentile(durations, 95), 3),
            p99_ms=round(percentile(durations, 99), 3),
            created_at=utcnow(),
        )
        system.latency_profiles.append(profile)
        return profile

    def record_metric(self, system_id: int, body: TraceMetricCreate) -> dict:
        system = self.get(system_id)
        entry = {
            "metric_id": str(uuid.uuid4()),
            "recorded_at": utcnow(),
            **body.model_dump(),
            "metric_type": MetricType(body.metric_type).value,
        }
        system.metrics.append(entry)
        return entry

    def statistics(self) -> dict:
        systems = list(self._systems.values())
        return {
            "total_systems": len(systems),
            "active_systems": sum(1 for s in systems if s.status == TracingStatus.ACTIVE),
            "total_traces": sum(s.total_traces for s in systems),
            "total_spans": sum(s.total_spans for s in systems),
            "total_services": sum(len(s.services) for s in systems),
            "total_errors": sum(len(s.errors) + s.error_spans for s in systems),
            "timestamp": utcnow(),
        }


@lru_cache
def get_tracing_service() -> TracingService:
    return TracingService()
