"""Tracing Routes - tracing systems, traces, spans and latency profiles."""

from fastapi import APIRouter, Depends, Response, status

from sis.schemas.analytics import (
    DependencyRegister, LatencyProfileCreate, OperationRegister, ServiceRegister,
    SpanComplete, SpanLogCreate, SpanStart, TraceErrorCreate, TraceMetricCreate,
    TraceStart, TracingSystemCreate,
)
from sis.services.tracing import TracingService, get_tracing_service

router = APIRouter(prefix="/api/v1/analytics/tracing", tags=["analytics-tracing"])


@router.post("", status_code=status.HTTP_201_CREATED)
async def create_tracing_system(
    body: TracingSystemCreate, service: TracingService = Depends(get_tracing_service),
):
    return service.create(body)


@router.get("/statistics")
async def tracing_statistics(service: TracingService = Depends(get_tracing_service)):
    return service.statistics()


@router.get("/{system_id}")
async def get_tracing_system(
    system_id: int, service: TracingService = Depends(get_tracing_service),
):
    return service.get(system_id)


@router.delete("/{system_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_tracing_system(
    system_id: int, service: TracingService = Depends(get_tracing_service),
):
    service.delete(system_id)
    return Response(status_code=status.HTTP_204_NO_CONTENT)


@router.post("/{system_id}/deploy")
async def deploy_tracing_system(
    system_id: int, service: TracingService = Depends(get_tracing_service),
):
    return service.deploy(system_id)


# ─── TRACES & SPANS ─────────────────────────────────────────────

@router.post("/{system_id}/traces", status_code=status.HTTP_201_CREATED)
async def start_trace(
    system_id: int,
    body: TraceStart,
    service: TracingService = Depends(get_tracing_service),
):
    return service.start_trace(system_id, body)


@router.get("/{system_id}/traces/{trace_id}")
async def get_trace(
    system_id: int, trace_id: str, service: TracingService = Depends(get_tracing_service),
):
    return service.get_trace(system_id, trace_id)


@router.post("/{system_id}/traces/{trace_id}/complete")
async def complete_trace(
    system_id: int, trace_id: str, service: TracingService = Depends(get_tracing_service),
):
    return service.complete_trace(system_id, trace_id)


@router.post("/{system_id}/spans", status_code=status.HTTP_201_CREATED)
async def start_span(
    system_id: int,
    body: SpanStart,
    service: TracingService = Depends(get_tracing_service),
):
    return service.start_span(system_id, body)


@router.post("/{system_id}/spans/{span_id}/complete")
async def complete_span(
    system_id: int,
    span_id: str,
    body: SpanComplete,
    service: TracingService = Depends(get_tracing_service),
):
    return service.complete_span(system_id, span_id, body)


@router.post("/{system_id}/spans/{span_id}/logs", status_code=status.HTTP_201_CREATED)
async def add_span_log(
    system_id: int,
    span_id: str,
    body: SpanLogCreate,
    service: TracingService = Depends(get_tracing_service),
):
    return service.add_span_log(system_id, span_id, body)


# ─── TOPOLOGY & DIAGNOSTICS ─────────────────────────────────────

@router.post("/{system_id}/services", status_code=status.HTTP_201_CREATED)
async def register_service(
    system_id: int,
    body: ServiceRegister,
    service: TracingService = Depends(get_tracing_service),
):
    return service.register_service(system_id, body)


@router.post("/{system_id}/operations", status_code=status.HTTP_201_CREATED)
async def register_operation(
    system_id: int,
    body: OperationRegister,
    service: TracingService = Depends(get_tracing_service),
):
    return service.register_operation(system_id, body)


@router.post("/{system_id}/dependencies", status_code=status.HTTP_201_CREATED)
async def add_dependency(
    system_id: int,
    body: DependencyRegister,
    service: TracingService = Depends(get_tracing_service),
):
    return service.add_dependency(system_id, body)


@router.post("/{system_id}/errors", status_code=status.HTTP_201_CREATED)
async def record_trace_error(
    system_id: int,
    body: TraceErrorCreate,
    service: TracingService = Depends(get_tracing_service),
):
    return service.record_error(system_id, body)


@router.post("/{system_id}/latency-profiles", status_code=status.HTTP_201_CREATED)
async def create_latency_profile(
    system_id: int,
    body: LatencyProfileCreate,
    service: TracingService = Depends(get_tracing_service),
):
    return service.create_latency_profile(system_id, body)


@router.post("/{system_id}/metrics", status_code=status.HTTP_201_CREATED)
async def record_trace_metric(
    system_id: int,
    body: TraceMetricCreate,
    service: TracingService = Depends(get_tracing_service),
):
    return service.record_metric(system_id, body)
