"""BI Analytics Routes - create, execute and alert on in-memory analyses.

Invariants:
    - Responses are the service dataclasses (serialized by FastAPI)
    - /statistics declared before /{analysis_id}
"""

from fastapi import APIRouter, Depends, Response, status

from sis.api.dependencies import get_actor
from sis.core.analytics_types import AnalysisType
from sis.schemas.analytics import AnalysisCreate, KpiCreate, ThresholdRuleCreate
from sis.services.bi_analytics import BIAnalyticsService, get_bi_service

router = APIRouter(prefix="/api/v1/analytics/bi", tags=["analytics-bi"])


@router.post("", status_code=status.HTTP_201_CREATED)
async def create_analysis(
    body: AnalysisCreate,
    service: BIAnalyticsService = Depends(get_bi_service),
    actor: str = Depends(get_actor),
):
    return service.create(body, actor)


@router.get("")
async def list_analyses(
    analysis_type: AnalysisType | None = None,
    service: BIAnalyticsService = Depends(get_bi_service),
):
    return service.list_analyses(analysis_type)


@router.get("/statistics")
async def bi_statistics(service: BIAnalyticsService = Depends(get_bi_service)):
    return service.statistics()


@router.get("/{analysis_id}")
async def get_analysis(analysis_id: int, service: BIAnalyticsService = Depends(get_bi_service)):
    return service.get(analysis_id)


@router.delete("/{analysis_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_analysis(
    analysis_id: int, service: BIAnalyticsService = Depends(get_bi_service),
):
    service.delete(analysis_id)
    return Response(status_code=status.HTTP_204_NO_CONTENT)


@router.post("/{analysis_id}/execute")
async def execute_analysis(
    analysis_id: int, service: BIAnalyticsService = Depends(get_bi_service),
):
    return service.execute(analysis_id)


@router.post("/{analysis_id}/kpis", status_code=status.HTTP_201_CREATED)
async def add_kpi(
    analysis_id: int,
    body: KpiCreate,
    service: BIAnalyticsService = Depends(get_bi_service),
):
    return service.add_kpi(analysis_id, body)


@router.post("/{analysis_id}/threshold-rules", status_code=status.HTTP_201_CREATED)
async def add_threshold_rule(
    analysis_id: int,
    body: ThresholdRuleCreate,
    service: BIAnalyticsService = Depends(get_bi_service),
):
    return service.add_threshold_rule(analysis_id, body)


@router.get("/{analysis_id}/alerts")
async def list_alerts(analysis_id: int, service: BIAnalyticsService = Depends(get_bi_service)):
    return service.alerts(analysis_id)


@router.post("/{analysis_id}/alerts/{alert_id}/acknowledge")
async def acknowledge_alert(
    analysis_id: int,
    alert_id: str,
    service: BIAnalyticsService = Depends(get_bi_service),
    actor: str = Depends(get_actor),
):
    return service.acknowledge_alert(analysis_id, alert_id, actor)
