"""create_event_log_and_audit_tables

Revision ID: 7c2e4f1a9b3d
Revises:
Create Date: 2026-10-19 09:00:00.000000+00:00

"""

from typing import Sequence, Union

from alembic import op
import sqlalchemy as sa


# revision identifiers, used by Alembic.
revision: str = "7c2e4f1a9b3d"
down_revision: Union[str, Sequence[str], None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def upgrade() -> None:
    """Create events and audit_logs tables."""
    op.create_table(
        "events",
        # Primary key and timestamp from BaseModel
        sa.Column("id", sa.Uuid(), nullable=False),
        sa.Column(
            "created_at",
            sa.DateTime(timezone=True),
            server_default=sa.text("now()"),
            nullable=False,
        ),
        # Stream position
        sa.Column(
            "aggregate_id",
            sa.String(length=255),
            nullable=False,
            comment="Stream identifier (user id, client id, jti, ...)",
        ),
        sa.Column("aggregate_type", sa.String(length=50), nullable=False, comment="Stream kind"),
        sa.Column(
            "version",
            sa.Integer(),
            nullable=False,
            comment="Position within the stream (1-based, gapless)",
        ),
        # Event body
        sa.Column("event_type", sa.String(length=100), nullable=False, comment="Registered event name"),
        sa.Column("event_id", sa.Uuid(), nullable=False),
        sa.Column("payload", sa.JSON(), nullable=False),
        sa.Column("occurred_at", sa.DateTime(timezone=True), nullable=False),
        sa.PrimaryKeyConstraint("id"),
        sa.UniqueConstraint("event_id"),
        sa.UniqueConstraint("aggregate_id", "version", name="uq_events_aggregate_version"),
    )
    op.create_index("idx_events_aggregate", "events", ["aggregate_id", "version"])
    op.create_index(op.f("ix_events_aggregate_type"), "events", ["aggregate_type"])

    op.create_table(
        "audit_logs",
        sa.Column("id", sa.Uuid(), nullable=False),
        sa.Column(
            "created_at",
            sa.DateTime(timezone=True),
            server_default=sa.text("now()"),
            nullable=False,
        ),
        sa.Column(
            "action",
            sa.String(length=100),
            nullable=False,
            comment="Audit action type (e.g., user_authenticated, token_revoked)",
        ),
        sa.Column(
            "user_id",
            sa.Uuid(),
            nullable=True,
            comment="User the entry concerns (None for client or system actions)",
        ),
        sa.Column(
            "resource_type",
            sa.String(length=100),
            nullable=False,
            comment="Type of resource affected (identity, client, token, etc.)",
        ),
        sa.Column(
            "resource_id",
            sa.String(length=255),
            nullable=True,
            comment="Specific resource identifier (if applicable)",
        ),
        sa.Column("ip_address", sa.String(length=45), nullable=True, comment="Client IP address, when known"),
        sa.Column("context", sa.JSON(), nullable=True, comment="Additional event context"),
        sa.PrimaryKeyConstraint("id"),
    )
    op.create_index(op.f("ix_audit_logs_action"), "audit_logs", ["action"])
    op.create_index(op.f("ix_audit_logs_user_id"), "audit_logs", ["user_id"])
    op.create_index(op.f("ix_audit_logs_resource_type"), "audit_logs", ["resource_type"])
    op.create_index(op.f("ix_audit_logs_resource_id"), "audit_logs", ["resource_id"])
    op.create_index("idx_audit_user_action", "audit_logs", ["user_id", "action"])
    op.create_index("idx_audit_resource", "audit_logs", ["resource_type", "resource_id"])


def downgrade() -> None:
    """Drop audit_logs and events tables."""
    op.drop_index("idx_audit_resource", table_name="audit_logs")
    op.drop_index("idx_audit_user_action", table_name="audit_logs")
    op.drop_index(op.f("ix_audit_logs_resource_id"), table_name="audit_logs")
    op.drop_index(op.f("ix_audit_logs_resource_type"), table_name="audit_logs")
    op.drop_index(op.f("ix_audit_logs_user_id"), table_name="audit_logs")
    op.drop_index(op.f("ix_audit_logs_action"), table_name="audit_logs")
    op.drop_table("audit_logs")

    op.drop_index(op.f("ix_events_aggregate_type"), table_name="events")
    op.drop_index("idx_events_aggregate", table_name="events")
    op.drop_table("events")
