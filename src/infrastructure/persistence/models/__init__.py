"""Database models for persistence layer.

This package contains SQLAlchemy database models that map to database
tables. These are infrastructure concerns and should not be imported by the
domain layer.

Models Organization:
    - event_record.py: Append-only event log (the only durable state)
    - audit_log.py: Audit trail model (immutable)
"""

from src.infrastructure.persistence.models.audit_log import AuditLog
from src.infrastructure.persistence.models.event_record import EventRecord

__all__ = [
    "AuditLog",
    "EventRecord",
]
