"""Create field_configs and project_manager_entries

Revision ID: 0001
Revises:
Create Date: 2026-10-17 12:00:00.000000

"""

from collections.abc import Sequence

from alembic import op
import sqlalchemy as sa
from sqlalchemy.dialects import postgresql

# revision identifiers, used by Alembic.
revision: str = "0001"
down_revision: str | None = None
branch_labels: str | Sequence[str] | None = None
depends_on: str | Sequence[str] | None = None

json_type = sa.JSON().with_variant(postgresql.JSONB(), "postgresql")


def upgrade() -> None:
    op.create_table(
        "field_configs",
        sa.Column("id", sa.Uuid(), nullable=False),
        sa.Column("upload_id", sa.Uuid(), nullable=False),
        sa.Column("user_id", sa.Text(), nullable=False),
        sa.Column("payload", json_type, nullable=False),
        sa.Column("editor_state", json_type, nullable=True),
        sa.Column("background_image", sa.Text(), nullable=True),
        sa.Column("content_hash", sa.String(length=8), nullable=False),
        sa.Column("is_draft", sa.Boolean(), nullable=False),
        sa.Column(
            "created_at",
            sa.DateTime(timezone=True),
            server_default=sa.func.now(),
            nullable=False,
        ),
        sa.Column(
            "updated_at",
            sa.DateTime(timezone=True),
            server_default=sa.func.now(),
            nullable=False,
        ),
        sa.PrimaryKeyConstraint("id"),
        sa.UniqueConstraint("upload_id"),
        sa.UniqueConstraint("content_hash"),
    )
    op.create_index("ix_field_configs_user_id", "field_configs", ["user_id"])

    op.create_table(
        "project_manager_entries",
        sa.Column("upload_id", sa.Uuid(), nullable=False),
        sa.Column("user_id", sa.Text(), nullable=False),
        sa.Column("name", sa.Text(), nullable=False),
        sa.Column("status", sa.String(length=16), server_default="active", nullable=False),
        sa.Column(
            "created_at",
            sa.DateTime(timezone=True),
            server_default=sa.func.now(),
            nullable=False,
        ),
        sa.Column(
            "updated_at",
            sa.DateTime(timezone=True),
            server_default=sa.func.now(),
            nullable=False,
        ),
        sa.ForeignKeyConstraint(
            ["upload_id"], ["field_configs.upload_id"], ondelete="CASCADE"
        ),
        sa.PrimaryKeyConstraint("upload_id"),
        sa.CheckConstraint(
            "status in ('active', 'archive', 'trash')",
            name="project_manager_entries_status_chk",
        ),
    )
    op.create_index(
        "project_manager_entries_user_status_updated_idx",
        "project_manager_entries",
        ["user_id", "status", sa.text("updated_at DESC")],
    )


def downgrade() -> None:
    op.drop_index(
        "project_manager_entries_user_status_updated_idx",
        table_name="project_manager_entries",
    )
    op.drop_table("project_manager_entries")
    op.drop_index("ix_field_configs_user_id", table_name="field_configs")
    op.drop_table("field_configs")
