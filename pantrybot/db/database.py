"""
Async database lifecycle.

Wraps a SQLAlchemy async engine and session factory behind the same
initialize/shutdown + async context manager protocol the bot uses for
every long-lived resource.

Example:
    >>> async with Database("sqlite+aiosqlite:///data/pantrybot.db") as db:
    ...     async with db.session() as session:
    ...         ...
"""

from pathlib import Path

from sqlalchemy import event
from sqlalchemy.engine import make_url
from sqlalchemy.ext.asyncio import (
    AsyncEngine,
    AsyncSession,
    async_sessionmaker,
    create_async_engine,
)
from sqlalchemy.pool import StaticPool

from pantrybot.config.logging import get_logger
from pantrybot.db.models import Base

logger = get_logger(__name__)


def _enable_sqlite_foreign_keys(dbapi_connection, connection_record) -> None:
    cursor = dbapi_connection.cursor()
    cursor.execute("PRAGMA foreign_keys=ON")
    cursor.close()


class Database:
    """
    Owns the async engine and hands out sessions.

    Args:
        url: SQLAlchemy async URL
        echo: Log every SQL statement
    """

    def __init__(self, url: str, echo: bool = False):
        self.url = url
        self.echo = echo
        self._engine: AsyncEngine | None = None
        self._sessionmaker: async_sessionmaker[AsyncSession] | None = None

    @property
    def is_sqlite(self) -> bool:
        return make_url(self.url).get_backend_name() == "sqlite"

    async def initialize(self) -> None:
        """
        Create the engine and make sure all tables exist.

        Raises:
            RuntimeError: If the database cannot be reached
        """
        url = make_url(self.url)
        kwargs = {"echo": self.echo}

        if self.is_sqlite:
            database = url.database
            if not database or database == ":memory:":
                # One shared connection, otherwise each session sees an empty database
                kwargs["poolclass"] = StaticPool
                kwargs["connect_args"] = {"check_same_thread": False}
            else:
                Path(database).parent.mkdir(parents=True, exist_ok=True)

        logger.info(f"Connecting to database ({url.render_as_string(hide_password=True)})")

        try:
            self._engine = create_async_engine(url, **kwargs)
            if self.is_sqlite:
                event.listen(self._engine.sync_engine, "connect", _enable_sqlite_foreign_keys)

            async with self._engine.begin() as conn:
                await conn.run_sync(Base.metadata.create_all)
        except Exception as e:
            logger.error(f"Failed to initialize database: {e}")
            if self._engine is not None:
                await self._engine.dispose()
                self._engine = None
            raise RuntimeError(f"Could not initialize database: {e}") from e

        self._sessionmaker = async_sessionmaker(self._engine, expire_on_commit=False)
        logger.info("Database ready")

    async def shutdown(self) -> None:
        """Dispose of the engine and its connection pool."""
        if self._engine is not None:
            await self._engine.dispose()
            logger.info("Database connection closed")
        self._engine = None
        self._sessionmaker = None

    def session(self) -> AsyncSession:
        """
        Open a new session. Use as ``async with db.session() as session:``.

        Raises:
            RuntimeError: If the database has not been initialized
        """
        if self._sessionmaker is None:
            raise RuntimeError(
                "Database not initialized. "
                "Use 'async with Database(...) as db:' or call await db.initialize()"
            )
        return self._sessionmaker()

    async def __aenter__(self) -> "Database":
        await self.initialize()
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb) -> bool:
        await self.shutdown()
        return False
