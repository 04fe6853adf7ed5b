"""add background_jobs table for push-queue processing

Revision ID: 5b1e7c0a9d42
Revises:
Create Date: 2026-10-18 10:12:31.402117

"""

from typing import Sequence, Union

from alembic import op
import sqlalchemy as sa


# revision identifiers, used by Alembic.
revision: str = "5b1e7c0a9d42"
down_revision: Union[str, Sequence[str], None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def upgrade() -> None:
    """Upgrade schema."""
    op.create_table(
        "background_jobs",
        sa.Column("id", sa.UUID(as_uuid=True), primary_key=True),
        sa.Column(
            "kind", sa.Text, nullable=False, comment="Job kind: onboarding|agent-request"
        ),
        sa.Column(
            "payload",
            sa.JSON,
            nullable=False,
            comment="Input captured at enqueue time",
        ),
        sa.Column(
            "status",
            sa.Text,
            nullable=False,
            comment="Job status: queued|processing|completed|failed",
        ),
        sa.Column(
            "attempts",
            sa.Integer,
            nullable=False,
            server_default="0",
            comment="Number of processing attempts",
        ),
        # Outcome, mutually exclusive once terminal
        sa.Column(
            "result",
            sa.JSON,
            nullable=True,
            comment="Handler output, set only when completed",
        ),
        sa.Column(
            "error",
            sa.JSON,
            nullable=True,
            comment="{name, message, stack, kind}, set only when failed",
        ),
        sa.Column(
            "request_id",
            sa.Text,
            nullable=True,
            comment="Request ID that enqueued the job",
        ),
        # Timestamps
        sa.Column(
            "created_at",
            sa.TIMESTAMP(timezone=True),
            nullable=False,
            server_default=sa.func.now(),
        ),
        sa.Column(
            "updated_at",
            sa.TIMESTAMP(timezone=True),
            nullable=False,
            server_default=sa.func.now(),
        ),
        # Constraints
        sa.CheckConstraint(
            "status IN ('queued', 'processing', 'completed', 'failed')",
            name="background_jobs_status_check",
        ),
        sa.CheckConstraint("attempts >= 0", name="background_jobs_attempts_check"),
    )

    op.create_index("ix_background_jobs_status", "background_jobs", ["status"])
    op.create_index("ix_background_jobs_created_at", "background_jobs", ["created_at"])


def downgrade() -> None:
    """Downgrade schema."""
    op.drop_index("ix_background_jobs_created_at", table_name="background_jobs")
    op.drop_index("ix_background_jobs_status", table_name="background_jobs")
    op.drop_table("background_jobs")
