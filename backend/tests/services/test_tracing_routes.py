"""Tracing routes - traces, spans, latency profiles and system statistics.

Invariants:
    - Completing a span twice → 409
    - A trace with an errored span completes as ERROR
    - Latency profile over no completed spans → 409
"""

import pytest

BASE = "/api/v1/analytics/tracing"


@pytest.fixture
async def system(client):
    res = await client.post(BASE, json={"system_name": "reports", "sampling_rate": 0.5})
    assert res.status_code == 201
    return res.json()


async def _trace(client, system_id):
    res = await client.post(f"{BASE}/{system_id}/traces", json={
        "trace_name": "daily-report", "root_service": "report-api",
    })
    assert res.status_code == 201
    return res.json()


async def _span(client, system_id, trace_id, operation="render", service="report-api", **extra):
    res = await client.post(f"{BASE}/{system_id}/spans", json={
        "trace_id": trace_id, "operation_name": operation, "service_name": service, **extra,
    })
    assert res.status_code == 201
    return res.json()


async def test_deploy_activates(client, system):
    assert system["status"] == "INITIALIZING"
    res = await client.post(f"{BASE}/{system['system_id']}/deploy")
    assert res.json()["status"] == "ACTIVE"
    assert res.json()["deployed_at"] is not None


async def test_span_lifecycle(client, system):
    sid = system["system_id"]
    trace = await _trace(client, sid)
    parent = await _span(client, sid, trace["trace_id"], kind="SERVER")
    child = await _span(
        client, sid, trace["trace_id"], operation="query", service="database",
        parent_span_id=parent["span_id"],
    )

    res = await client.post(f"{BASE}/{sid}/spans/{child['span_id']}/logs", json={"message": "slow"})
    assert res.status_code == 201

    res = await client.post(f"{BASE}/{sid}/spans/{child['span_id']}/complete", json={})
    assert res.json()["status"] == "OK"
    assert res.json()["duration_ms"] >= 0
    res = await client.post(f"{BASE}/{sid}/spans/{child['span_id']}/complete", json={})
    assert res.status_code == 409

    detail = (await client.get(f"{BASE}/{sid}/traces/{trace['trace_id']}")).json()
    assert detail["trace"]["services"] == ["report-api", "database"]
    assert len(detail["spans"]) == 2


async def test_unknown_parent_span_is_404(client, system):
    trace = await _trace(client, system["system_id"])
    res = await client.post(f"{BASE}/{system['system_id']}/spans", json={
        "trace_id": trace["trace_id"], "operation_name": "x", "service_name": "y",
        "parent_span_id": "missing",
    })
    assert res.status_code == 404


async def test_errored_span_marks_trace_error(client, system):
    sid = system["system_id"]
    trace = await _trace(client, sid)
    span = await _span(client, sid, trace["trace_id"])
    await client.post(f"{BASE}/{sid}/spans/{span['span_id']}/complete", json={
        "status": "ERROR", "error_message": "timeout",
    })
    res = await client.post(f"{BASE}/{sid}/traces/{trace['trace_id']}/complete")
    assert res.json()["status"] == "ERROR"
    res = await client.post(f"{BASE}/{sid}/traces/{trace['trace_id']}/complete")
    assert res.status_code == 409

    system_view = (await client.get(f"{BASE}/{sid}")).json()
    assert system_view["error_spans"] == 1
    assert system_view["completed_spans"] == 1


async def test_latency_profile_needs_completed_spans(client, system):
    sid = system["system_id"]
    body = {"profile_name": "render", "service_name": "report-api"}
    res = await client.post(f"{BASE}/{sid}/latency-profiles", json=body)
    assert res.status_code == 409

    trace = await _trace(client, sid)
    for _ in range(3):
        span = await _span(client, sid, trace["trace_id"])
        await client.post(f"{BASE}/{sid}/spans/{span['span_id']}/complete", json={})
    res = await client.post(f"{BASE}/{sid}/latency-profiles", json=body)
    assert res.status_code == 201
    profile = res.json()
    assert profile["sample_count"] == 3
    assert profile["min_ms"] <= profile["p50_ms"] <= profile["p99_ms"] <= profile["max_ms"]


async def test_topology_and_statistics(client, system):
    sid = system["system_id"]
    res = await client.post(f"{BASE}/{sid}/services", json={"service_name": "report-api", "version": "1.0.0"})
    assert res.status_code == 201
    await client.post(f"{BASE}/{sid}/operations", json={"service_name": "report-api", "operation_name": "render"})
    res = await client.post(f"{BASE}/{sid}/dependencies", json={
        "source_service": "report-api", "target_service": "database", "dependency_type": "SQL",
    })
    assert res.json()["dependency_type"] == "SQL"
    res = await client.post(f"{BASE}/{sid}/errors", json={
        "service_name": "report-api", "error_type": "Timeout", "message": "render timed out",
    })
    assert res.status_code == 201
    res = await client.post(f"{BASE}/{sid}/metrics", json={
        "metric_name": "reports_rendered", "service_name": "report-api",
        "metric_type": "COUNTER", "value": 12,
    })
    assert res.json()["metric_type"] == "COUNTER"

    stats = (await client.get(f"{BASE}/statistics")).json()
    assert stats["total_systems"] == 1
    assert stats["total_services"] == 1
    assert stats["total_errors"] == 1


async def test_error_for_unknown_trace_is_404(client, system):
    res = await client.post(f"{BASE}/{system['system_id']}/errors", json={
        "trace_id": "missing", "service_name": "report-api", "error_type": "X", "message": "y",
    })
    assert res.status_code == 404


async def test_unknown_system_is_404(client):
    assert (await client.get(f"{BASE}/42")).status_code == 404
