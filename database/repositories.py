"""
============================================================================
HOSTWATCH - HOST STORE
============================================================================
``HostStore`` is the storage interface the monitoring core depends on.
``HostRepository`` implements it on top of the SQLAlchemy ``hosts`` table.

Store contract
--------------
read_one(host_key)   -> HostRecord | None
read_all()           -> list of HostRecord
update(host_key, fields, expected_disconnected=None) -> bool

``update`` returns True when a row was changed. Passing
``expected_disconnected`` makes it a compare-and-set: the row is only
updated while its ``disconnected`` flag still holds that value, which is
how the check-in and sweep paths avoid firing the same alert twice.
Backend failures raise StoreReadError / StoreWriteError.
============================================================================
"""

from abc import ABC, abstractmethod
from typing import Any, List, Mapping, Optional

from sqlalchemy import select, update
from sqlalchemy.exc import IntegrityError, SQLAlchemyError

from database.manager import DatabaseManager
from database.models import RECORD_COLUMNS, Host, HostRecord
from exceptions import StoreReadError, StoreWriteError
from utils.logger import get_logger


logger = get_logger("HostStore")


# ============================================================================
# STORE INTERFACE
# ============================================================================

class HostStore(ABC):
    """Storage operations consumed by the check-in handler and the sweep."""

    @abstractmethod
    async def read_one(self, host_key: str) -> Optional[HostRecord]:
        """Return the host with this key, or None."""

    @abstractmethod
    async def read_all(self) -> List[HostRecord]:
        """Return every host record."""

    @abstractmethod
    async def update(
        self,
        host_key: str,
        fields: Mapping[str, Any],
        expected_disconnected: Optional[bool] = None,
    ) -> bool:
        """Apply ``fields`` to one host; see the module docstring."""


def validate_fields(fields: Mapping[str, Any]) -> None:
    """Only ``last_checkin`` and ``disconnected`` may be written by the core."""
    unknown = set(fields) - set(RECORD_COLUMNS)
    if unknown:
        raise ValueError(f"Unsupported host fields: {', '.join(sorted(unknown))}")
    if not fields:
        raise ValueError("No fields to update")


# ============================================================================
# SQLALCHEMY IMPLEMENTATION
# ============================================================================

class HostRepository(HostStore):
    """
    Host store backed by the ``hosts`` table.
    """

    def __init__(self, db_manager: DatabaseManager):
        """
        Initialize repository.

        Args:
            db_manager: Database manager instance
        """
        self.db_manager = db_manager

    async def read_one(self, host_key: str) -> Optional[HostRecord]:
        try:
            async with self.db_manager.session() as session:
                host = await session.get(Host, host_key)
                return host.to_record() if host else None
        except SQLAlchemyError as e:
            logger.error(f"Failed to read host: {e}")
            raise StoreReadError(
                message=f"Failed to read host: {e}",
                host_key=host_key,
                cause=e,
            ) from e

    async def read_all(self) -> List[HostRecord]:
        try:
            async with self.db_manager.session() as session:
                result = await session.execute(select(Host).order_by(Host.hostname))
                return [host.to_record() for host in result.scalars().all()]
        except SQLAlchemyError as e:
            logger.error(f"Failed to list hosts: {e}")
            raise StoreReadError(message=f"Failed to list hosts: {e}", cause=e) from e

    async def update(
        self,
        host_key: str,
        fields: Mapping[str, Any],
        expected_disconnected: Optional[bool] = None,
    ) -> bool:
        validate_fields(fields)
        values = {RECORD_COLUMNS[name]: value for name, value in fields.items()}

        stmt = update(Host).where(Host.hostkey == host_key)
        if expected_disconnected is not None:
            stmt = stmt.where(Host.disconnected == expected_disconnected)
        stmt = stmt.values(**values)

        try:
            async with self.db_manager.session() as session:
                result = await session.execute(stmt)
                return result.rowcount > 0
        except SQLAlchemyError as e:
            logger.error(f"Failed to update host: {e}")
            raise StoreWriteError(
                message=f"Failed to update host: {e}",
                query=str(stmt),
                host_key=host_key,
                fields=dict(fields),
                cause=e,
            ) from e

    async def add(self, record: HostRecord) -> HostRecord:
        """
        Insert a new host. Used by provisioning commands, never by the core.

        Raises:
            StoreWriteError: If the key already exists or the insert fails
        """
        host = Host(
            hostkey=record.host_key,
            hostname=record.hostname,
            lastcheckin=record.last_checkin,
            disconnected=record.disconnected,
        )
        try:
            async with self.db_manager.session() as session:
                session.add(host)
        except IntegrityError as e:
            raise StoreWriteError(
                message="A host with this key already exists",
                host_key=record.host_key,
                cause=e,
            ) from e
        except SQLAlchemyError as e:
            raise StoreWriteError(
                message=f"Failed to add host: {e}",
                host_key=record.host_key,
                cause=e,
            ) from e

        logger.info(f"Host '{record.hostname}' added")
        return record
