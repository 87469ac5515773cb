"""Relational persistence (SQLAlchemy async).

Holds the declarative base shared by the event log, index and audit tables,
and the engine/session manager used by the SQL adapters and Alembic.
"""

from src.infrastructure.persistence.base import BaseModel
from src.infrastructure.persistence.database import Database

__all__ = ["BaseModel", "Database"]
