"""Monitoring Routes - health monitors, readings and alert lifecycle.

Invariants:
    - Collection queries (/statistics, /degraded, /unhealthy, /needs-attention)
      are declared before /{monitor_id}
"""

from fastapi import APIRouter, Depends, Response, status

from sis.api.dependencies import get_actor
from sis.core.monitor_health import HealthStatus
from sis.schemas.analytics import (
    AlertCreate, ErrorReport, HealthCheckRequest, MonitorCreate,
    RequestMetric, ResourceReadings, UptimeUpdate,
)
from sis.services.monitoring import MonitoringService, get_monitoring_service

router = APIRouter(prefix="/api/v1/analytics/monitoring", tags=["analytics-monitoring"])


@router.post("", status_code=status.HTTP_201_CREATED)
async def create_monitor(
    body: MonitorCreate, service: MonitoringService = Depends(get_monitoring_service),
):
    return service.create(body)


@router.get("")
async def list_monitors(
    monitor_status: HealthStatus | None = None,
    service: MonitoringService = Depends(get_monitoring_service),
):
    return service.list_monitors(monitor_status)


@router.get("/statistics")
async def monitoring_statistics(service: MonitoringService = Depends(get_monitoring_service)):
    return service.statistics()


@router.get("/degraded")
async def degraded_monitors(service: MonitoringService = Depends(get_monitoring_service)):
    return service.list_monitors(HealthStatus.DEGRADED)


@router.get("/unhealthy")
async def unhealthy_monitors(service: MonitoringService = Depends(get_monitoring_service)):
    return service.list_monitors(HealthStatus.UNHEALTHY)


@router.get("/needs-attention")
async def monitors_needing_attention(
    service: MonitoringService = Depends(get_monitoring_service),
):
    return service.needing_attention()


@router.get("/{monitor_id}")
async def get_monitor(monitor_id: int, service: MonitoringService = Depends(get_monitoring_service)):
    return service.get(monitor_id)


@router.delete("/{monitor_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_monitor(
    monitor_id: int, service: MonitoringService = Depends(get_monitoring_service),
):
    service.delete(monitor_id)
    return Response(status_code=status.HTTP_204_NO_CONTENT)


# ─── READINGS ───────────────────────────────────────────────────

@router.post("/{monitor_id}/health-checks")
async def run_health_check(
    monitor_id: int,
    body: HealthCheckRequest,
    service: MonitoringService = Depends(get_monitoring_service),
):
    return service.run_health_check(monitor_id, body.check_type)


@router.post("/{monitor_id}/metrics")
async def record_request_metric(
    monitor_id: int,
    body: RequestMetric,
    service: MonitoringService = Depends(get_monitoring_service),
):
    return service.record_request(monitor_id, body)


@router.put("/{monitor_id}/resources")
async def update_resources(
    monitor_id: int,
    body: ResourceReadings,
    service: MonitoringService = Depends(get_monitoring_service),
):
    return service.update_resources(monitor_id, body)


@router.put("/{monitor_id}/uptime")
async def update_uptime(
    monitor_id: int,
    body: UptimeUpdate,
    service: MonitoringService = Depends(get_monitoring_service),
):
    return service.update_uptime(monitor_id, body)


@router.post("/{monitor_id}/errors")
async def record_monitor_error(
    monitor_id: int,
    body: ErrorReport,
    service: MonitoringService = Depends(get_monitoring_service),
):
    return service.record_error(monitor_id, body)


# ─── ALERTS ─────────────────────────────────────────────────────

@router.post("/{monitor_id}/alerts", status_code=status.HTTP_201_CREATED)
async def create_monitor_alert(
    monitor_id: int,
    body: AlertCreate,
    service: MonitoringService = Depends(get_monitoring_service),
):
    return service.create_alert(monitor_id, body)


@router.get("/{monitor_id}/alerts")
async def list_monitor_alerts(
    monitor_id: int,
    active_only: bool = False,
    service: MonitoringService = Depends(get_monitoring_service),
):
    return service.alerts(monitor_id, active_only)


@router.post("/{monitor_id}/alerts/{alert_id}/acknowledge")
async def acknowledge_monitor_alert(
    monitor_id: int,
    alert_id: str,
    service: MonitoringService = Depends(get_monitoring_service),
    actor: str = Depends(get_actor),
):
    return service.acknowledge_alert(monitor_id, alert_id, actor)


@router.post("/{monitor_id}/alerts/{alert_id}/resolve")
async def resolve_monitor_alert(
    monitor_id: int,
    alert_id: str,
    service: MonitoringService = Depends(get_monitoring_service),
):
    return service.resolve_alert(monitor_id, alert_id)
