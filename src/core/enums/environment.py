"""Application environment types.

Used by Settings to pick environment-specific behaviour (log rendering,
ephemeral signing keys in development, strict checks in production).
"""

from enum import Enum


class Environment(str, Enum):
    """Application environment types."""

    DEVELOPMENT = "development"
    TESTING = "testing"
    CI = "ci"
    PRODUCTION = "production"
