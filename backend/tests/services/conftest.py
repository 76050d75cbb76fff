"""Service test fixtures - in-memory database, ASGI client and seeded reference data.

Invariants:
    - Each test gets its own DatabaseSessionManager over a private :memory: database
    - The manager is installed as db_module.db_manager, so get_db and the readiness
      probe go through the same code path as production
    - Process-wide singletons (settings, report cache, analytics stores) reset per test

Design Decisions:
    - aiosqlite keeps a :memory: database on one shared connection, so seed
      sessions and request sessions see the same rows
    - Seed fixtures insert ORM rows directly: tests exercise one route at a time
"""

import pytest
from httpx import ASGITransport, AsyncClient

from sis.config import get_settings
from sis.db.base import Base
from sis.infrastructure.database import DatabaseSessionManager
from sis.infrastructure.report_cache import get_report_cache
from sis.models.course import Course
from sis.models.staff_user import StaffUser
from sis.models.student import Student
from sis.services.bi_analytics import get_bi_service
from sis.services.collaboration import get_collaboration_service
from sis.services.monitoring import get_monitoring_service
from sis.services.tracing import get_tracing_service
import sis.infrastructure.database as db_module
import sis.models  # noqa: F401
from sis.main import app

_SINGLETONS = (
    get_settings, get_report_cache, get_bi_service,
    get_tracing_service, get_collaboration_service, get_monitoring_service,
)


@pytest.fixture(autouse=True)
def reset_singletons():
    for factory in _SINGLETONS:
        factory.cache_clear()
    yield
    for factory in _SINGLETONS:
        factory.cache_clear()


@pytest.fixture
async def manager(monkeypatch):
    """Real session manager over a private in-memory database, installed as the app's db_manager."""
    manager = DatabaseSessionManager("sqlite+aiosqlite:///:memory:")
    async with manager.engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    monkeypatch.setattr(db_module, "db_manager", manager)
    yield manager
    await manager.dispose()


@pytest.fixture
async def test_db(manager):
    async with manager.session() as session:
        yield session


@pytest.fixture
async def client(manager):
    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://sis.test") as c:
        yield c


# ─── Seed data ──────────────────────────────────────────────────

@pytest.fixture
async def seed_students(test_db):
    students = [
        Student(student_number="S001", first_name="Ada", last_name="Lovelace", grade_level="9th Grade"),
        Student(student_number="S002", first_name="Alan", last_name="Turing", grade_level="9th Grade"),
        Student(
            student_number="S003", first_name="Grace", last_name="Hopper",
            grade_level="10th Grade", active=False,
        ),
    ]
    test_db.add_all(students)
    await test_db.commit()
    return students


@pytest.fixture
async def seed_staff(test_db):
    staff = {
        "counselor": StaffUser(username="mcounsel", full_name="Morgan Counsel", role="COUNSELOR"),
        "principal": StaffUser(username="pprincipal", full_name="Pat Principal", role="PRINCIPAL"),
        "registrar": StaffUser(username="rregistrar", full_name="Riley Registrar", role="REGISTRAR"),
    }
    test_db.add_all(staff.values())
    await test_db.commit()
    return staff


@pytest.fixture
async def seed_course(test_db):
    course = Course(code="MATH-101", name="Algebra I", term="Fall")
    test_db.add(course)
    await test_db.commit()
    return course
