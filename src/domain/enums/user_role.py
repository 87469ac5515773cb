"""User roles carried by identities and their access tokens.

Roles are free-form strings on the Identity aggregate; the values below are
the ones the service itself checks.

Usage:
    from src.domain.enums import UserRole

    if UserRole.ADMIN.value in claims.roles:
        # Admin-only logic
"""

from enum import Enum


class UserRole(str, Enum):
    """Well-known roles.

    String Enum:
        Values are lowercase and stored as-is in RoleAssigned events.
    """

    ADMIN = "admin"
    """May register, rotate and deactivate OAuth clients."""

    USER = "user"
    """Default role assigned at registration."""

    @classmethod
    def values(cls) -> list[str]:
        """Get all role values as strings.

        Returns:
            list[str]: List of role values ['admin', 'user'].
        """
        return [role.value for role in cls]

    @classmethod
    def is_valid(cls, value: str) -> bool:
        """Check if a string is a well-known role."""
        return value in cls.values()
