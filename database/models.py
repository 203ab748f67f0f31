"""
============================================================================
HOSTWATCH - DATABASE MODELS
============================================================================
SQLAlchemy model for the ``hosts`` table and the plain record type the
monitoring core works with.

The column names (hostkey, hostname, lastcheckin, disconnected) match the
schema of existing deployments so their data can be imported unchanged.
============================================================================
"""

from dataclasses import dataclass, replace
from typing import Any, Dict

from sqlalchemy import Boolean, Integer, String
from sqlalchemy.orm import DeclarativeBase, Mapped, mapped_column

from config.constants import HostStatus


class Base(DeclarativeBase):
    """Declarative base for all models."""


# ============================================================================
# HOST RECORD (core-facing)
# ============================================================================

@dataclass(frozen=True)
class HostRecord:
    """
    Snapshot of one monitored host as read from the store.

    Attributes
    ----------
    host_key : str       — secret key the host checks in with
    hostname : str       — display label used in alerts
    last_checkin : int   — epoch seconds of the last check-in (0 = never)
    disconnected : bool  — True while the host is considered offline
    """
    host_key: str
    hostname: str
    last_checkin: int = 0
    disconnected: bool = False

    @property
    def status(self) -> HostStatus:
        return HostStatus.from_flag(self.disconnected)

    def elapsed(self, now: int) -> int:
        """Seconds since the last check-in."""
        return now - self.last_checkin

    def with_changes(self, **fields: Any) -> "HostRecord":
        return replace(self, **fields)


# Record attribute -> column name
RECORD_COLUMNS: Dict[str, str] = {
    "last_checkin": "lastcheckin",
    "disconnected": "disconnected",
}


# ============================================================================
# HOST MODEL
# ============================================================================

class Host(Base):
    """A monitored host. Provisioned out-of-band; never deleted by the core."""

    __tablename__ = "hosts"

    hostkey: Mapped[str] = mapped_column(String(128), primary_key=True)
    hostname: Mapped[str] = mapped_column(String(255), nullable=False)
    lastcheckin: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    disconnected: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False)

    def to_record(self) -> HostRecord:
        return HostRecord(
            host_key=self.hostkey,
            hostname=self.hostname,
            last_checkin=int(self.lastcheckin or 0),
            disconnected=bool(self.disconnected),
        )

    def __repr__(self) -> str:
        return (
            f"<Host hostname={self.hostname!r} lastcheckin={self.lastcheckin} "
            f"disconnected={self.disconnected}>"
        )
