"""
Database Package for HostWatch

Provides database connectivity, the host model and the host store
used by the monitoring core, built on SQLAlchemy with async support.
"""

from database.manager import DatabaseManager

from database.models import (
    Base,
    Host,
    HostRecord,
)

from database.repositories import (
    HostStore,
    HostRepository,
)

__all__ = [
    # Connection
    "DatabaseManager",

    # Models
    "Base",
    "Host",
    "HostRecord",

    # Store
    "HostStore",
    "HostRepository",
]
