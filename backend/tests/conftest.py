"""Root conftest - shared test configuration."""

import os

# Tests never reach a real database server or SMTP relay
os.environ.setdefault(
    "DATABASE_URL",
    "sqlite+aiosqlite:///test.db",
)
os.environ.setdefault("EMAIL_REPORT_NOTIFICATION_ENABLED", "false")
