"""SIS Reporting API - FastAPI application entry point.

Invariants:
    - Routes registered explicitly (no auto-discovery)
    - Global error handlers map SisError → structured JSON responses
    - CORS origins come from Settings.cors_origins
    - Logging and the database manager are set up in the lifespan; close_db() runs on shutdown

Design Decisions:
    - Lifespan context manager instead of startup/shutdown events
    - Error handlers live in api/error_handlers so tests can mount them on bare apps
"""

import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from sis.api.error_handlers import register_error_handlers
from sis.api.routes import (
    analytics_bi, assignments, attendance, attendance_reports, audit_logs,
    batch_exports, collaboration, courses, health, monitoring, pre_registrations,
    re_enrollments, report_history, staff, students, tracing,
)
from sis.config import APP_VERSION, get_settings
from sis.infrastructure.database import close_db, init_db
from sis.infrastructure.observability import setup_logging

logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Startup/shutdown lifecycle."""
    settings = get_settings()
    setup_logging(settings.log_level, settings.log_format)
    init_db(
        settings.database_url,
        pool_size=settings.database_pool_size,
        max_overflow=settings.database_max_overflow,
    )
    logger.info(f"SIS Reporting API started for {settings.school_name}")
    yield
    await close_db()
    logger.info("SIS Reporting API shut down")


app = FastAPI(
    title="SIS Reporting API", version=APP_VERSION, lifespan=lifespan,
)

settings = get_settings()
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.cors_origins,
    allow_methods=["*"],
    allow_headers=["*"],
)

register_error_handlers(app)

# ─── ROUTES ─────────────────────────────────────────────────────

app.include_router(health.router)

# Reference data
app.include_router(students.router)
app.include_router(staff.router)
app.include_router(courses.router)
app.include_router(attendance.router)

# Gradebook
app.include_router(assignments.router)

# Reporting
app.include_router(attendance_reports.router)
app.include_router(batch_exports.router)
app.include_router(report_history.router)
app.include_router(audit_logs.router)

# Enrollment workflows
app.include_router(pre_registrations.router)
app.include_router(re_enrollments.router)

# Analytics
app.include_router(analytics_bi.router)
app.include_router(tracing.router)
app.include_router(collaboration.router)
app.include_router(monitoring.router)
