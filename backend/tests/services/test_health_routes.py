"""Health routes and shared request plumbing - probes, error envelope, acting user.

Invariants:
    - Liveness always 200; readiness 503 without a database
    - Validation failures → 400 VALIDATION_ERROR
    - X-User header falls back to "system" when blank
"""

from sis.api.dependencies import get_actor
from sis.config import APP_VERSION
from sis.infrastructure import database as db_module


# --- Probes ---

async def test_liveness(client):
    res = await client.get("/api/v1/health/")
    assert res.status_code == 200
    assert res.json() == {
        "status": "healthy", "service": "sis-reporting-api", "version": APP_VERSION,
    }


async def test_readiness_with_database(client):
    res = await client.get("/api/v1/health/ready")
    assert res.status_code == 200
    assert res.json()["checks"]["database"] == "healthy"


async def test_readiness_without_database(client, monkeypatch):
    monkeypatch.setattr(db_module, "db_manager", None)
    res = await client.get("/api/v1/health/ready")
    assert res.status_code == 503
    assert res.json()["reason"] == "database_unavailable"


async def test_components(client):
    body = (await client.get("/api/v1/health/components")).json()
    assert body["status"] == "UP"
    assert body["components"]["database"]["status"] == "UP"
    assert body["components"]["mailer"]["status"] == "DISABLED"
    assert body["components"]["batch_export"]["max_batch_size"] == 50


# --- Error envelope ---

async def test_validation_error_envelope(client):
    res = await client.get("/api/v1/students/not-a-number")
    assert res.status_code == 400
    error = res.json()["error"]
    assert error["code"] == "VALIDATION_ERROR"
    assert error["details"][0]["location"] == "path"
    assert error["details"][0]["field"] == "student_id"


async def test_not_found_envelope(client):
    res = await client.get("/api/v1/students/9999")
    assert res.status_code == 404
    error = res.json()["error"]
    assert error["code"] == "RESOURCE_NOT_FOUND"
    assert error["context"]["entity_type"] == "Student"


# --- Acting user ---

def test_actor_header_fallbacks():
    assert get_actor(None) == "system"
    assert get_actor("   ") == "system"
    assert get_actor("x" * 65) == "system"
    assert get_actor(" registrar ") == "registrar"
