"""Audit infrastructure implementations.

This module contains concrete implementations of AuditSinkProtocol:
- LoggingAuditSink: structured log lines
- DatabaseAuditSink: `audit_logs` table (insert-only)
"""

from src.infrastructure.audit.database_audit_sink import DatabaseAuditSink
from src.infrastructure.audit.logging_audit_sink import LoggingAuditSink

__all__ = ["DatabaseAuditSink", "LoggingAuditSink"]
