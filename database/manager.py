"""
============================================================================
HOSTWATCH - DATABASE MANAGER
============================================================================
Owns the SQLAlchemy async engine and session factory, creates the schema
and hands out transactional sessions.
============================================================================
"""

import asyncio
from contextlib import asynccontextmanager
from typing import Any, AsyncGenerator, Dict, Optional

from sqlalchemy import event, func, select, text
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import (
    AsyncEngine,
    AsyncSession,
    async_sessionmaker,
    create_async_engine,
)
from sqlalchemy.pool import NullPool

from config.settings import DatabaseSettings
from database.models import Base, Host
from exceptions import StoreConnectionError
from utils.logger import get_logger


logger = get_logger("Database")


# ============================================================================
# DATABASE MANAGER CLASS
# ============================================================================

class DatabaseManager:
    """
    Database manager handling engine lifecycle and session scopes.
    """

    def __init__(self, settings: DatabaseSettings):
        """
        Initialize database manager.

        Args:
            settings: Database section of the application settings
        """
        self.settings = settings
        self.engine: Optional[AsyncEngine] = None
        self.session_factory: Optional[async_sessionmaker[AsyncSession]] = None
        self._is_initialized = False
        self._lock = asyncio.Lock()

        self.database_url = settings.url

        logger.info(f"DatabaseManager created with URL: {self._mask_password(self.database_url)}")

    @staticmethod
    def _mask_password(url: str) -> str:
        """
        Mask password in database URL for logging.

        Args:
            url: Database URL

        Returns:
            Masked URL
        """
        if "://" not in url:
            return url

        protocol, rest = url.split("://", 1)
        if "@" not in rest:
            return url

        credentials, host_part = rest.split("@", 1)
        if ":" in credentials:
            user, _ = credentials.split(":", 1)
            return f"{protocol}://{user}:****@{host_part}"

        return url

    def _get_engine_kwargs(self) -> Dict[str, Any]:
        """
        Get engine configuration kwargs based on settings.

        Returns:
            Dictionary of engine configuration options
        """
        kwargs: Dict[str, Any] = {"echo": self.settings.echo}

        # Use NullPool for SQLite, a sized pool for others
        if self.settings.is_sqlite:
            kwargs["poolclass"] = NullPool
        else:
            kwargs["pool_size"] = self.settings.pool_size
            kwargs["max_overflow"] = self.settings.max_overflow
            kwargs["pool_timeout"] = self.settings.pool_timeout
            kwargs["pool_pre_ping"] = True

        return kwargs

    async def initialize(self, create_tables: bool = True) -> None:
        """
        Initialize database engine and session factory.

        Args:
            create_tables: Create missing tables after connecting

        Raises:
            StoreConnectionError: If the database cannot be reached
        """
        async with self._lock:
            if self._is_initialized:
                logger.warning("Database already initialized")
                return

            sqlite_path = self.settings.sqlite_path
            if sqlite_path is not None:
                sqlite_path.parent.mkdir(parents=True, exist_ok=True)

            try:
                self.engine = create_async_engine(
                    self.database_url,
                    **self._get_engine_kwargs()
                )

                self._register_event_listeners()

                self.session_factory = async_sessionmaker(
                    self.engine,
                    class_=AsyncSession,
                    expire_on_commit=False,
                    autoflush=False,
                )

                async with self.engine.connect() as conn:
                    await conn.execute(text("SELECT 1"))

                if create_tables:
                    await self.create_tables()

                self._is_initialized = True
                logger.info("Database initialized successfully")

            except SQLAlchemyError as e:
                logger.error(f"Failed to initialize database: {e}")
                if self.engine is not None:
                    await self.engine.dispose()
                    self.engine = None
                raise StoreConnectionError(
                    message=f"Failed to connect to database: {e}",
                    url=self._mask_password(self.database_url),
                    cause=e,
                ) from e

    def _register_event_listeners(self) -> None:
        """Register SQLAlchemy event listeners for connection tracing."""

        @event.listens_for(self.engine.sync_engine, "connect")
        def receive_connect(dbapi_conn, connection_record):
            logger.debug("New database connection established")

    async def create_tables(self) -> None:
        """
        Create all database tables.
        """
        async with self.engine.begin() as conn:
            await conn.run_sync(Base.metadata.create_all)
        logger.info("Database tables created successfully")

    @asynccontextmanager
    async def session(self) -> AsyncGenerator[AsyncSession, None]:
        """
        Provide a transactional scope for database operations.

        Yields:
            AsyncSession instance

        Example:
            async with db_manager.session() as session:
                host = await session.get(Host, host_key)
        """
        if not self._is_initialized:
            await self.initialize()

        session = self.session_factory()
        try:
            yield session
            await session.commit()
        except Exception:
            await session.rollback()
            raise
        finally:
            await session.close()

    async def get_database_info(self) -> Dict[str, Any]:
        """
        Get a short summary of the hosts table.

        Returns:
            Dictionary with host counts
        """
        async with self.session() as session:
            total = await session.scalar(select(func.count()).select_from(Host))
            offline = await session.scalar(
                select(func.count()).select_from(Host).where(Host.disconnected.is_(True))
            )
        return {"hosts": total or 0, "offline": offline or 0}

    async def close(self) -> None:
        """
        Close database connections.
        """
        if self.engine:
            await self.engine.dispose()
            self.engine = None
            self.session_factory = None
            self._is_initialized = False
            logger.info("Database connections closed")
