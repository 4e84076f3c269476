"""Database models and helpers."""

from __future__ import annotations

from contextlib import asynccontextmanager
from pathlib import Path
from typing import AsyncGenerator, Dict

from sqlalchemy import event
from sqlalchemy.engine import make_url
from sqlalchemy.ext.asyncio import AsyncEngine, AsyncSession, create_async_engine
from sqlalchemy.orm import sessionmaker
from sqlmodel import Field, SQLModel

from roidbot.utils.logging import get_logger

logger = get_logger(__name__)

# On-chain events a channel can subscribe to; each is a column on ChannelEvents.
EVENT_NAMES = ("Transfer", "AsteroidScanned")


class AddressBinding(SQLModel, table=True):
    __tablename__ = "addresses"

    address: str = Field(primary_key=True)
    discord_id: str = Field(index=True, unique=True)


class ChannelEvents(SQLModel, table=True):
    __tablename__ = "channel_events"

    channel: str = Field(primary_key=True)
    Transfer: int = Field(default=0)
    AsteroidScanned: int = Field(default=0)

    @property
    def flags(self) -> Dict[str, bool]:
        return {name: bool(getattr(self, name)) for name in EVENT_NAMES}

    def enabled(self, event_name: str) -> bool:
        return bool(getattr(self, check_event_name(event_name)))


def check_event_name(event_name: str) -> str:
    """Return ``event_name`` if it is a known event column, else raise."""
    if event_name not in EVENT_NAMES:
        raise ValueError(f"Unknown event {event_name!r}")
    return event_name


def _set_sqlite_pragmas(dbapi_connection, connection_record) -> None:
    cursor = dbapi_connection.cursor()
    cursor.execute("PRAGMA journal_mode = wal")
    cursor.execute("PRAGMA synchronous = 1")
    cursor.close()


class Database:
    """Lightweight async database wrapper."""

    def __init__(self, url: str) -> None:
        self.url = url
        self._engine: AsyncEngine | None = None
        self._session_maker: sessionmaker | None = None

    def connect(self) -> None:
        """Initialise engine and sessionmaker."""
        if self._engine:
            return

        url = make_url(self.url)
        is_sqlite = url.get_backend_name() == "sqlite"
        if is_sqlite:
            database = url.database
            if database and database != ":memory:":
                Path(database).expanduser().resolve().parent.mkdir(
                    parents=True, exist_ok=True
                )

        self._engine = create_async_engine(self.url, echo=False)
        if is_sqlite:
            event.listen(self._engine.sync_engine, "connect", _set_sqlite_pragmas)
        self._session_maker = sessionmaker(
            self._engine,
            class_=AsyncSession,
            expire_on_commit=False,
        )

    async def init_models(self) -> None:
        """Create tables if they do not exist."""
        if not self._engine:
            raise RuntimeError("Database engine is not initialised")

        async with self._engine.begin() as conn:
            await conn.run_sync(SQLModel.metadata.create_all)
        logger.info("database_ready", url=self.url)

    async def dispose(self) -> None:
        if self._engine:
            await self._engine.dispose()

    @asynccontextmanager
    async def session(self) -> AsyncGenerator[AsyncSession, None]:
        """Return an async session context."""
        if not self._session_maker:
            raise RuntimeError("Database session maker is not initialised")

        async with self._session_maker() as session:
            yield session


__all__ = [
    "Database",
    "AddressBinding",
    "ChannelEvents",
    "EVENT_NAMES",
    "check_event_name",
]
