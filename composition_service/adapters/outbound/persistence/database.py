# composition_service/adapters/outbound/persistence/database.py

"""
Async database session management.

A single DatabaseSessionManager is initialised at startup (see main.py) and
hands out one session per request through the `get_db` dependency. Any
exception rolls the session back before it propagates.
"""

import logging
from contextlib import asynccontextmanager
from typing import AsyncGenerator, Optional

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine
from sqlalchemy.pool import StaticPool

from composition_service.adapters.outbound.persistence.models import Base
from composition_service.adapters.outbound.persistence.models.base_model import register_password_protection
from composition_service.domain.exceptions import DatabaseOperationException

logger = logging.getLogger(__name__)


class DatabaseSessionManager:
    """Async engine + session factory with rollback on error."""

    def __init__(self, database_url: str, echo: bool = False, pool_size: int = 10, max_overflow: int = 20):
        if database_url.startswith("sqlite"):
            # SQLite em memória precisa de uma única conexão compartilhada
            self.engine = create_async_engine(
                database_url,
                echo=echo,
                connect_args={"check_same_thread": False},
                poolclass=StaticPool,
            )
        else:
            self.engine = create_async_engine(
                database_url,
                echo=echo,
                pool_size=pool_size,
                max_overflow=max_overflow,
                pool_pre_ping=True,
                pool_recycle=3600,
            )
        self.session_factory = async_sessionmaker(
            self.engine,
            class_=AsyncSession,
            expire_on_commit=False,
            autoflush=False,
        )
        register_password_protection()

    @asynccontextmanager
    async def session(self) -> AsyncGenerator[AsyncSession, None]:
        """Provide a session that is rolled back if the caller raises."""
        session = self.session_factory()
        try:
            yield session
        except SQLAlchemyError as e:
            await session.rollback()
            logger.error(f"Database error, session rolled back: {e}")
            raise DatabaseOperationException(message="Database operation failed.", original_error=e)
        except Exception:
            await session.rollback()
            raise
        finally:
            await session.close()

    async def create_all(self) -> None:
        """Create every table (tests and local development; production uses alembic)."""
        async with self.engine.begin() as conn:
            await conn.run_sync(Base.metadata.create_all)

    async def dispose(self) -> None:
        await self.engine.dispose()


db_manager: Optional[DatabaseSessionManager] = None


def init_db(database_url: str, **kwargs) -> DatabaseSessionManager:
    global db_manager
    db_manager = DatabaseSessionManager(database_url, **kwargs)
    return db_manager


async def get_db() -> AsyncGenerator[AsyncSession, None]:
    """FastAPI dependency for database sessions."""
    if db_manager is None:
        raise RuntimeError("Database not initialized")
    async with db_manager.session() as session:
        yield session
