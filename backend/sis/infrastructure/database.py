"""Database Session Manager - async engine, per-request sessions and readiness probe.

Invariants:
    - A session that raises is rolled back before the error leaves session()
    - SQLAlchemy failures surface as DatabaseError (HTTP 503), most specific type first
    - health_check() never raises; it answers True/False for the readiness probe
    - dispose() releases the pool; the lifespan calls it through close_db()

Design Decisions:
    - Module-level db_manager set by init_db() in the lifespan
      (ADR: importing the package opens no connections)
    - expire_on_commit=False so routes can serialize ORM rows after commit
    - SQLite URLs (tests, local runs) skip pool sizing
"""

import logging
from contextlib import asynccontextmanager
from typing import AsyncGenerator

from sqlalchemy import text
from sqlalchemy.exc import DBAPIError, IntegrityError, OperationalError, SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine

from sis.core.errors import DatabaseError

logger = logging.getLogger(__name__)

# (exception, message, operation); first match wins
_ERROR_MAP = (
    (IntegrityError, "Integrity constraint violated", "commit"),
    (OperationalError, "Connection or operational error", "execute"),
    (DBAPIError, "Database driver error", "query"),
    (SQLAlchemyError, "Database operation failed", "unknown"),
)


def _translate(exc: SQLAlchemyError) -> DatabaseError:
    for exc_type, message, operation in _ERROR_MAP:
        if isinstance(exc, exc_type):
            return DatabaseError(message, operation)
    return DatabaseError(str(exc), "unknown")


class DatabaseSessionManager:

    def __init__(self, database_url: str, pool_size: int = 20, max_overflow: int = 10):
        self.is_sqlite = database_url.startswith("sqlite")
        options: dict = {"pool_pre_ping": True}
        if not self.is_sqlite:
            options.update(pool_size=pool_size, max_overflow=max_overflow, pool_recycle=3600)
        self.engine = create_async_engine(database_url, **options)
        self._session_factory = async_sessionmaker(
            self.engine, class_=AsyncSession, expire_on_commit=False,
        )

    @asynccontextmanager
    async def session(self) -> AsyncGenerator[AsyncSession, None]:
        session = self._session_factory()
        try:
            yield session
        except SQLAlchemyError as e:
            await session.rollback()
            error = _translate(e)
            logger.error(f"{error.message}: {e}", extra={"error_code": error.code})
            raise error from e
        finally:
            await session.close()

    async def health_check(self) -> bool:
        try:
            async with self.session() as db:
                await db.execute(text("SELECT 1"))
        except Exception as e:
            logger.error(f"Database readiness check failed: {e}")
            return False
        return True

    async def dispose(self) -> None:
        await self.engine.dispose()


db_manager: DatabaseSessionManager | None = None


def init_db(database_url: str, **kwargs) -> DatabaseSessionManager:
    global db_manager
    db_manager = DatabaseSessionManager(database_url, **kwargs)
    logger.info(f"Database manager initialised ({'sqlite' if db_manager.is_sqlite else 'pooled'})")
    return db_manager


async def close_db() -> None:
    global db_manager
    if db_manager is not None:
        await db_manager.dispose()
        db_manager = None


def get_db_manager() -> DatabaseSessionManager | None:
    """Current manager, looked up per call so tests can swap it."""
    return db_manager


async def get_db() -> AsyncGenerator[AsyncSession, None]:
    if db_manager is None:
        raise DatabaseError("Database not initialised", "connect")
    async with db_manager.session() as session:
        yield session
