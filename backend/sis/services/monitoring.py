"""Monitoring Service - in-memory health monitors for report-producing services.

Invariants:
    - A new monitor is UNKNOWN until its first reading, check or metric
    - Every reading recomputes health_score and status via core/monitor_health
    - error_rate == 100 - success_rate once any request has been recorded
    - History keeps the newest MAX_HISTORY_POINTS samples
    - Critical errors raise a CRITICAL alert; alerts are acknowledged then resolved

Design Decisions:
    - In-memory not DB (ADR: monitors describe live process state, not records)
    - Readings are pushed by callers; nothing here polls
"""

import logging
import uuid
from collections import deque
from dataclasses import dataclass, field
from datetime import datetime
from functools import lru_cache

from sis.core.analytics_types import AlertSeverity
from sis.core.dates import utcnow
from sis.core.domain_types import MAX_HISTORY_POINTS
from sis.core.errors import ResourceNotFoundError
from sis.core.monitor_health import (
    HealthCheckType, HealthStatus, evaluate_check, health_score, status_for_score,
)
from sis.schemas.analytics import (
    AlertCreate, ErrorReport, MonitorCreate, RequestMetric, ResourceReadings, UptimeUpdate,
)

logger = logging.getLogger(__name__)

ATTENTION_ERROR_RATE = 5.0
ATTENTION_USAGE = 90.0


@dataclass
class HealthCheckResult:
    check_id: str
    check_type: HealthCheckType
    passed: bool
    checked_at: datetime
    message: str


@dataclass
class MonitorAlert:
    alert_id: str
    name: str
    severity: AlertSeverity
    message: str
    created_at: datetime
    acknowledged: bool = False
    acknowledged_by: str | None = None
    acknowledged_at: datetime | None = None
    resolved: bool = False
    resolved_at: datetime | None = None


@dataclass
class Monitor:
    monitor_id: int
    monitor_name: str
    target_service: str
    check_interval_seconds: int = 60
    timeout_seconds: int = 30
    health_checks_enabled: bool = True
    status: HealthStatus = HealthStatus.UNKNOWN
    health_score: int | None = None
    started_at: datetime = field(default_factory=utcnow)

    # === Resources ===
    cpu_usage: float | None = None
    memory_usage: float | None = None
    disk_usage: float | None = None
    database_status: str | None = None
    cache_status: str | None = None
    external_services: dict[str, str] = field(default_factory=dict)

    # === Requests ===
    total_requests: int = 0
    successful_requests: int = 0
    avg_response_time_ms: float | None = None
    min_response_time_ms: float | None = None
    max_response_time_ms: float | None = None
    success_rate: float | None = None
    error_rate: float | None = None

    # === Checks ===
    total_checks: int = 0
    passed_checks: int = 0
    check_success_rate: float | None = None
    last_checks: list[HealthCheckResult] = field(default_factory=list)

    # === Availability ===
    uptime_seconds: int = 0
    downtime_seconds: int = 0
    availability_percent: float | None = None

    # === Errors & alerts ===
    error_count: int = 0
    critical_errors: int = 0
    last_error: str | None = None
    last_error_at: datetime | None = None
    alerts: list[MonitorAlert] = field(default_factory=list)
    history: deque = field(default_factory=lambda: deque(maxlen=MAX_HISTORY_POINTS))

    def readings(self) -> dict:
        return {
            "started_at": self.started_at,
            "status": self.status.value,
            "external_services": self.external_services,
            "database_status": self.database_status,
            "cache_status": self.cache_status,
            "disk_usage": self.disk_usage,
            "memory_usage": self.memory_usage,
            "cpu_usage": self.cpu_usage,
        }

    def recalculate(self) -> None:
        self.health_score = health_score(
            cpu_usage=self.cpu_usage,
            memory_usage=self.memory_usage,
            error_rate=self.error_rate,
            avg_response_time_ms=self.avg_response_time_ms,
            check_success_rate=self.check_success_rate,
        )
        self.status = status_for_score(self.health_score)
        self.history.append({
            "timestamp": utcnow(),
            "health_score": self.health_score,
            "status": self.status.value,
            "cpu_usage": self.cpu_usage,
            "memory_usage": self.memory_usage,
            "error_rate": self.error_rate,
            "avg_response_time_ms": self.avg_response_time_ms,
        })

    def needs_attention(self) -> bool:
        return (
            self.status == HealthStatus.UNHEALTHY
            or (self.error_rate or 0) > ATTENTION_ERROR_RATE
            or (self.cpu_usage or 0) > ATTENTION_USAGE
            or (self.memory_usage or 0) > ATTENTION_USAGE
            or any(
                a.severity == AlertSeverity.CRITICAL and not a.resolved for a in self.alerts
            )
        )


class MonitoringService:

    def __init__(self):
        self._monitors: dict[int, Monitor] = {}
        self._next_id = 1

    def create(self, body: MonitorCreate) -> Monitor:
        monitor = Monitor(
            monitor_id=self._next_id,
            monitor_name=body.monitor_name,
            target_service=body.target_service,
            check_interval_seconds=body.check_interval_seconds,
            timeout_seconds=body.timeout_seconds,
        )
        self._monitors[monitor.monitor_id] = monitor
        self._next_id += 1
        logger.info(f"Monitor {monitor.monitor_id} created for {body.target_service}")
        return monitor

    def get(self, monitor_id: int) -> Monitor:
        monitor = self._monitors.get(monitor_id)
        if monitor is None:
            raise ResourceNotFoundError("Monitor", monitor_id)
        return monitor

    def delete(self, monitor_id: int) -> None:
        self.get(monitor_id)
        del self._monitors[monitor_id]

    # ─── Readings ───────────────────────────────────────────────

    def run_health_check(self, monitor_id: int, check_type: HealthCheckType) -> HealthCheckResult:
        monitor = self.get(monitor_id)
        passed = evaluate_check(check_type, monitor.readings())
        result = HealthCheckResult(
            check_id=str(uuid.uuid4()),
            check_type=check_type,
            passed=passed,
            checked_at=utcnow(),
            message=f"{check_type.value} check {'passed' if passed else 'failed'}",
        )
        monitor.total_checks += 1
        monitor.passed_checks += int(passed)
        monitor.check_success_rate = round(monitor.passed_checks / monitor.total_checks * 100, 2)
        monitor.last_checks = [c for c in monitor.last_checks if c.check_type != check_type]
        monitor.last_checks.append(result)
        monitor.recalculate()
        if not passed:
            logger.warning(f"Monitor {monitor_id}: {result.message}")
        return result

    def record_request(self, monitor_id: int, body: RequestMetric) -> Monitor:
        monitor = self.get(monitor_id)
        elapsed = body.response_time_ms
        monitor.total_requests += 1
        monitor.successful_requests += int(body.success)
        if monitor.avg_response_time_ms is None:
            monitor.avg_response_time_ms = elapsed
            monitor.min_response_time_ms = elapsed
            monitor.max_response_time_ms = elapsed
        else:
            monitor.avg_response_time_ms = round(
                monitor.avg_response_time_ms
                + (elapsed - monitor.avg_response_time_ms) / monitor.total_requests,
                3,
            )
            monitor.min_response_time_ms = min(monitor.min_response_time_ms, elapsed)
            monitor.max_response_time_ms = max(monitor.max_response_time_ms, elapsed)
        monitor.success_rate = round(monitor.successful_requests / monitor.total_requests * 100, 2)
        monitor.error_rate = round(100 - monitor.success_rate, 2)
        monitor.recalculate()
        return monitor

    def update_resources(self, monitor_id: int, body: ResourceReadings) -> Monitor:
        monitor = self.get(monitor_id)
        if body.cpu is not None:
            monitor.cpu_usage = body.cpu
        if body.memory is not None:
            monitor.memory_usage = body.memory
        if body.disk is not None:
            monitor.disk_usage = body.disk
        if body.database_status is not None:
            monitor.database_status = body.database_status
        if body.cache_status is not None:
            monitor.cache_status = body.cache_status
        if body.external_services is not None:
            monitor.external_services = dict(body.external_services)
        monitor.recalculate()
        return monitor

    def update_uptime(self, monitor_id: int, body: UptimeUpdate) -> Monitor:
        monitor = self.get(monitor_id)
        monitor.uptime_seconds = body.uptime_seconds
        monitor.downtime_seconds = body.downtime_seconds
        total = body.uptime_seconds + body.downtime_seconds
        monitor.availability_percent = (
            round(body.uptime_seconds / total * 100, 3) if total else None
        )
        return monitor

    # ─── Errors & alerts ────────────────────────────────────────

    def record_error(self, monitor_id: int, body: ErrorReport) -> Monitor:
        monitor = self.get(monitor_id)
        monitor.error_count += 1
        monitor.last_error = body.message
        monitor.last_error_at = utcnow()
        logger.warning(f"Monitor {monitor_id} error: {body.message}")
        if body.critical:
            monitor.critical_errors += 1
            self._raise_alert(
                monitor, "Critical error detected", AlertSeverity.CRITICAL, body.message,
            )
        return monitor

    @staticmethod
    def _raise_alert(
        monitor: Monitor, name: str, severity: AlertSeverity, message: str,
    ) -> MonitorAlert:
        alert = MonitorAlert(
            alert_id=str(uuid.uuid4()),
            name=name,
            severity=severity,
            message=message,
            created_at=utcnow(),
        )
        monitor.alerts.append(alert)
        log = logger.error if severity == AlertSeverity.CRITICAL else logger.warning
        log(f"Monitor {monitor.monitor_id} alert [{severity.value}] {name}: {message}")
        return alert

    def create_alert(self, monitor_id: int, body: AlertCreate) -> MonitorAlert:
        return self._raise_alert(self.get(monitor_id), body.name, body.severity, body.message)

    def _alert(self, monitor: Monitor, alert_id: str) -> MonitorAlert:
        for alert in monitor.alerts:
            if alert.alert_id == alert_id:
                return alert
        raise ResourceNotFoundError("MonitorAlert", alert_id)

    def acknowledge_alert(self, monitor_id: int, alert_id: str, actor: str) -> MonitorAlert:
        alert = self._alert(self.get(monitor_id), alert_id)
        alert.acknowledged = True
        alert.acknowledged_by = actor
        alert.acknowledged_at = utcnow()
        return alert

    def resolve_alert(self, monitor_id: int, alert_id: str) -> MonitorAlert:
        alert = self._alert(self.get(monitor_id), alert_id)
        alert.resolved = True
        alert.resolved_at = utcnow()
        return alert

    def alerts(self, monitor_id: int, active_only: bool = False) -> list[MonitorAlert]:
        monitor = self.get(monitor_id)
        return [a for a in monitor.alerts if not (active_only and a.resolved)]

    # ─── Queries ────────────────────────────────────────────────

    def list_monitors(self, status: HealthStatus | None = None) -> list[Monitor]:
        return [m for m in self._monitors.values() if status is None or m.status == status]

    def needing_attention(self) -> list[Monitor]:
        return [m for m in self._monitors.values() if m.needs_attention()]

    def statistics(self) -> dict:
        monitors = list(self._monitors.values())
        availability = [
            m.availability_percent for m in monitors if m.availability_percent is not None
        ]
        return {
            "total_monitors": len(monitors),
            "healthy": sum(1 for m in monitors if m.status == HealthStatus.HEALTHY),
            "degraded": sum(1 for m in monitors if m.status == HealthStatus.DEGRADED),
            "unhealthy": sum(1 for m in monitors if m.status == HealthStatus.UNHEALTHY),
            "needing_attention": sum(1 for m in monitors if m.needs_attention()),
            "total_alerts": sum(len(m.alerts) for m in monitors),
            "critical_alerts": sum(
                1 for m in monitors for a in m.alerts if a.severity == AlertSeverity.CRITICAL
            ),
            "average_availability": (
                round(sum(availability) / len(availability), 3) if availability else 0.0
            ),
        }


@lru_cache
def get_monitoring_service() -> MonitoringService:
    return MonitoringService()
