"""Database connection and session management."""

import logging
from collections.abc import AsyncGenerator
from urllib.parse import parse_qs, urlencode, urlparse, urlunparse

from fastapi import Request
from sqlalchemy.ext.asyncio import AsyncEngine, AsyncSession, async_sessionmaker, create_async_engine
from sqlalchemy.orm import DeclarativeBase

logger = logging.getLogger(__name__)


def get_engine_url_and_connect_args(database_url: str):
    """Move libpq-style sslmode/ssl query params (asyncpg rejects them) into connect_args."""
    parsed = urlparse(database_url)
    query = parse_qs(parsed.query)
    modes = query.pop("sslmode", []) + query.pop("ssl", [])
    if not modes:
        return database_url, {}
    url = urlunparse(parsed._replace(query=urlencode(query, doseq=True)))
    connect_args = {}
    if "+asyncpg" in parsed.scheme:
        # asyncpg takes the libpq mode names directly
        connect_args["ssl"] = modes[0]
    return url, connect_args


class Base(DeclarativeBase):
    """SQLAlchemy declarative base."""

    pass


class Database:
    """Engine and session factory for one application instance."""

    def __init__(self, database_url: str, echo: bool = False):
        url, connect_args = get_engine_url_and_connect_args(database_url)
        self.engine: AsyncEngine = create_async_engine(
            url,
            echo=echo,
            connect_args=connect_args,
        )
        self.session_maker = async_sessionmaker(
            self.engine,
            class_=AsyncSession,
            expire_on_commit=False,
            autocommit=False,
            autoflush=False,
        )

    def session(self) -> AsyncSession:
        return self.session_maker()

    async def create_schema(self) -> list[str]:
        """Create any missing tables. Returns the table names known to the metadata."""
        # Registers every model on Base.metadata
        import fieldsmart.models  # noqa: F401

        async with self.engine.begin() as conn:
            await conn.run_sync(Base.metadata.create_all)
        tables = sorted(Base.metadata.tables)
        logger.info("Schema ensured for %d tables", len(tables))
        return tables

    async def dispose(self) -> None:
        await self.engine.dispose()


async def get_db(request: Request) -> AsyncGenerator[AsyncSession, None]:
    """Dependency for database sessions."""
    database: Database = request.app.state.db
    async with database.session() as session:
        try:
            yield session
        except Exception:
            await session.rollback()
            raise
        finally:
            await session.close()
