"""Conflict errors for lost index claims."""

from src.core.enums import ErrorCode
from src.core.errors import ConflictError
from src.domain.protocols.index_store_protocol import IndexNamespace

_CLAIM_CODES = {
    IndexNamespace.EMAIL: ErrorCode.EMAIL_ALREADY_EXISTS,
    IndexNamespace.LINKED_IDENTITY: ErrorCode.IDENTITY_ALREADY_LINKED,
}


def claim_conflict(namespace: str) -> ConflictError:
    """ConflictError for a key already held by another value."""
    return ConflictError(
        code=_CLAIM_CODES.get(namespace, ErrorCode.CONCURRENCY_CONFLICT),
        message=f"{namespace} is already claimed",
        resource_type=namespace,
        conflicting_field=namespace,
    )
