"""Create admins, submissions and notification_logs

Revision ID: 001
Revises: None
Create Date: 2026-10-18 00:00:00.000000+00:00

What:  Initial schema for the submission tracker.
How:   Enum columns become native PostgreSQL enum types
       (submission_status, notification_channel, notification_send_status).

Rollback: downgrade() drops all three tables and the enum types.
"""

from typing import Sequence, Union
from alembic import op
import sqlalchemy as sa

# revision identifiers
revision: str = "001"
down_revision: Union[str, None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None

submission_status = sa.Enum(
    "PENGAJUAN_BARU", "DIPROSES", "SELESAI", "DITOLAK",
    name="submission_status",
)
notification_channel = sa.Enum("WHATSAPP", "EMAIL", name="notification_channel")
notification_send_status = sa.Enum("SUCCESS", "FAILED", name="notification_send_status")


def upgrade() -> None:
    op.create_table(
        "admins",
        sa.Column("id", sa.Uuid(), nullable=False),
        sa.Column("username", sa.String(150), nullable=False),
        sa.Column("email", sa.String(255), nullable=False),
        sa.Column("password", sa.String(255), nullable=False),
        sa.Column(
            "created_at",
            sa.DateTime(timezone=True),
            server_default=sa.text("CURRENT_TIMESTAMP"),
            nullable=False,
        ),
        sa.Column(
            "updated_at",
            sa.DateTime(timezone=True),
            server_default=sa.text("CURRENT_TIMESTAMP"),
            nullable=False,
        ),
        sa.PrimaryKeyConstraint("id"),
        sa.UniqueConstraint("username"),
        sa.UniqueConstraint("email"),
    )

    op.create_table(
        "submissions",
        sa.Column("id", sa.Uuid(), nullable=False),
        sa.Column(
            "tracking_code",
            sa.String(32),
            nullable=False,
            comment="Public reference used by citizens to track the request",
        ),
        sa.Column("nama", sa.String(255), nullable=False),
        sa.Column(
            "nik",
            sa.String(16),
            nullable=False,
            comment="National id number; only the last 4 digits are ever exposed",
        ),
        sa.Column("email", sa.String(255), nullable=True),
        sa.Column(
            "no_wa",
            sa.String(32),
            nullable=False,
            comment="WhatsApp number that receives status notifications",
        ),
        sa.Column("jenis_layanan", sa.String(255), nullable=False),
        sa.Column(
            "status",
            submission_status,
            nullable=False,
            server_default="PENGAJUAN_BARU",
        ),
        sa.Column(
            "created_at",
            sa.DateTime(timezone=True),
            server_default=sa.text("CURRENT_TIMESTAMP"),
            nullable=False,
        ),
        sa.Column(
            "updated_at",
            sa.DateTime(timezone=True),
            server_default=sa.text("CURRENT_TIMESTAMP"),
            nullable=False,
        ),
        sa.PrimaryKeyConstraint("id"),
        sa.UniqueConstraint("tracking_code"),
    )
    op.create_index("idx_submissions_status", "submissions", ["status"])

    op.create_table(
        "notification_logs",
        sa.Column("id", sa.Uuid(), nullable=False),
        sa.Column("submission_id", sa.Uuid(), nullable=False),
        sa.Column("channel", notification_channel, nullable=False),
        sa.Column("send_status", notification_send_status, nullable=False),
        sa.Column("payload", sa.JSON(), nullable=False),
        sa.Column(
            "created_at",
            sa.DateTime(timezone=True),
            server_default=sa.text("CURRENT_TIMESTAMP"),
            nullable=False,
        ),
        sa.ForeignKeyConstraint(["submission_id"], ["submissions.id"]),
        sa.PrimaryKeyConstraint("id"),
    )
    op.create_index(
        "idx_notification_logs_submission_id",
        "notification_logs",
        ["submission_id"],
    )


def downgrade() -> None:
    """Destructive: every submission and audit row is lost."""
    op.drop_index("idx_notification_logs_submission_id", table_name="notification_logs")
    op.drop_table("notification_logs")
    op.drop_index("idx_submissions_status", table_name="submissions")
    op.drop_table("submissions")
    op.drop_table("admins")

    bind = op.get_bind()
    notification_send_status.drop(bind, checkfirst=True)
    notification_channel.drop(bind, checkfirst=True)
    submission_status.drop(bind, checkfirst=True)
