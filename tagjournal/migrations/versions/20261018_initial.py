"""initial schema for TagJournal

Revision ID: 0001_initial
Revises:
Create Date: 2026-10-18
"""

from __future__ import annotations

from alembic import op
import sqlalchemy as sa
from sqlalchemy.dialects import postgresql

# revision identifiers, used by Alembic.
revision = "0001_initial"
down_revision = None
branch_labels = None
depends_on = None


def _tag_list():
    return sa.JSON().with_variant(postgresql.JSONB(), "postgresql")


def upgrade():
    op.create_table(
        "users",
        sa.Column("id", sa.Uuid(), primary_key=True),
        sa.Column("username", sa.String(length=64), nullable=False),
        sa.Column("password_hash", sa.String(length=255), nullable=False),
        sa.Column("email", sa.String(length=255), nullable=False, unique=True),
    )
    op.create_index("ix_users_username", "users", ["username"], unique=True)

    op.create_table(
        "event_type",
        sa.Column("id", sa.Uuid(), primary_key=True),
        sa.Column("user_id", sa.Uuid(), sa.ForeignKey("users.id"), nullable=False),
        sa.Column("name", sa.String(length=255), nullable=False),
        sa.Column("tags", _tag_list(), nullable=False),
        sa.UniqueConstraint("user_id", "name", name="uq_event_type_user_name"),
    )
    op.create_index("ix_event_type_user_id", "event_type", ["user_id"])

    op.create_table(
        "journal_entry",
        sa.Column("id", sa.Uuid(), primary_key=True),
        sa.Column("user_id", sa.Uuid(), sa.ForeignKey("users.id"), nullable=False),
        sa.Column("event_type_id", sa.Uuid(), sa.ForeignKey("event_type.id"), nullable=False),
        sa.Column("description", sa.Text()),
        sa.Column("tags", _tag_list(), nullable=False),
        sa.Column("created_at", sa.DateTime(timezone=True), nullable=False),
    )
    op.create_index(
        "idx_journal_entry_user_event_type", "journal_entry", ["user_id", "event_type_id"]
    )
    op.create_index(
        "ix_journal_entry_user_created_at", "journal_entry", ["user_id", "created_at"]
    )


def downgrade():
    op.drop_index("ix_journal_entry_user_created_at", table_name="journal_entry")
    op.drop_index("idx_journal_entry_user_event_type", table_name="journal_entry")
    op.drop_table("journal_entry")
    op.drop_index("ix_event_type_user_id", table_name="event_type")
    op.drop_table("event_type")
    op.drop_index("ix_users_username", table_name="users")
    op.drop_table("users")
