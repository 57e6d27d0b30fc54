"""initial diary schema

Revision ID: 20261018_initial_schema
Revises:
Create Date: 2026-10-18
"""

from __future__ import annotations

from alembic import op
import sqlalchemy as sa

# revision identifiers, used by Alembic.
revision = "20261018_initial_schema"
down_revision = None
branch_labels = None
depends_on = None


def upgrade():
    op.create_table(
        "user",
        sa.Column("id", sa.Integer(), primary_key=True),
        sa.Column("username", sa.String(length=255), nullable=False),
        sa.Column("email", sa.String(length=255), nullable=False),
        sa.Column("password_hash", sa.String(length=255), nullable=False),
        sa.Column("is_active", sa.Boolean(), nullable=False, server_default=sa.true()),
        sa.Column("created_at", sa.DateTime(), nullable=False, server_default=sa.func.now()),
        sa.Column("updated_at", sa.DateTime(), nullable=False, server_default=sa.func.now()),
    )
    op.create_index("ix_user_username", "user", ["username"], unique=True)
    op.create_index("ix_user_email", "user", ["email"], unique=True)

    op.create_table(
        "category",
        sa.Column("id", sa.Integer(), primary_key=True),
        sa.Column(
            "user_id",
            sa.Integer(),
            sa.ForeignKey("user.id", ondelete="CASCADE"),
            nullable=False,
            index=True,
        ),
        sa.Column("name", sa.String(length=255), nullable=False),
        sa.Column("created_at", sa.DateTime(), nullable=False, server_default=sa.func.now()),
        sa.UniqueConstraint("user_id", "name", name="uq_category_user_name"),
    )

    op.create_table(
        "diary_entry",
        sa.Column("id", sa.Integer(), primary_key=True),
        sa.Column(
            "user_id",
            sa.Integer(),
            sa.ForeignKey("user.id", ondelete="CASCADE"),
            nullable=False,
            index=True,
        ),
        sa.Column("entry_date", sa.Date(), nullable=False),
        sa.Column("title", sa.Text()),
        sa.Column("body_html", sa.Text()),
        sa.Column("body_text", sa.Text(), nullable=False, server_default=""),
        sa.Column("mood", sa.String(length=64)),
        sa.Column("weather", sa.String(length=64)),
        sa.Column("tags", sa.Text()),
        sa.Column("visibility", sa.String(length=20), nullable=False, server_default="private"),
        sa.Column("share_token", sa.String(length=64)),
        sa.Column("is_favorite", sa.Boolean(), nullable=False, server_default=sa.false()),
        sa.Column(
            "category_id",
            sa.Integer(),
            sa.ForeignKey("category.id", ondelete="SET NULL"),
            index=True,
        ),
        sa.Column("created_at", sa.DateTime(), nullable=False, server_default=sa.func.now()),
        sa.Column("updated_at", sa.DateTime(), server_default=sa.func.now()),
    )
    op.create_index("ix_diary_entry_share_token", "diary_entry", ["share_token"], unique=True)
    op.create_index("ix_diary_entry_user_entry_date", "diary_entry", ["user_id", "entry_date"])
    op.create_index("ix_diary_entry_user_favorite", "diary_entry", ["user_id", "is_favorite"])
    op.create_index("ix_diary_entry_user_mood", "diary_entry", ["user_id", "mood"])

    op.create_table(
        "attachment",
        sa.Column("id", sa.Integer(), primary_key=True),
        sa.Column(
            "entry_id",
            sa.Integer(),
            sa.ForeignKey("diary_entry.id", ondelete="CASCADE"),
            nullable=False,
            index=True,
        ),
        sa.Column("kind", sa.String(length=20), nullable=False),
        sa.Column("stored_name", sa.String(length=255), nullable=False),
        sa.Column("display_name", sa.String(length=255), nullable=False),
        sa.Column("external_ref", sa.Text(), nullable=False),
        sa.Column("public_url", sa.Text()),
        sa.Column("mime_type", sa.String(length=100)),
        sa.Column("size_bytes", sa.Integer()),
        sa.Column("created_at", sa.DateTime(), server_default=sa.func.now()),
    )

    op.create_table(
        "diary_search_token",
        sa.Column("id", sa.Integer(), primary_key=True),
        sa.Column(
            "entry_id",
            sa.Integer(),
            sa.ForeignKey("diary_entry.id", ondelete="CASCADE"),
            nullable=False,
            index=True,
        ),
        sa.Column("user_id", sa.Integer(), nullable=False),
        sa.Column("token", sa.String(length=128), nullable=False),
        sa.Column("zone_mask", sa.Integer(), nullable=False),
        sa.UniqueConstraint("entry_id", "token", name="uq_diary_search_token_entry_token"),
    )
    op.create_index("ix_diary_search_token_user_token", "diary_search_token", ["user_id", "token"])

    op.create_table(
        "task",
        sa.Column("id", sa.Integer(), primary_key=True),
        sa.Column(
            "user_id",
            sa.Integer(),
            sa.ForeignKey("user.id", ondelete="CASCADE"),
            nullable=False,
            index=True,
        ),
        sa.Column(
            "diary_entry_id",
            sa.Integer(),
            sa.ForeignKey("diary_entry.id", ondelete="SET NULL"),
            index=True,
        ),
        sa.Column("title", sa.Text(), nullable=False),
        sa.Column("description", sa.Text()),
        sa.Column("due_date", sa.Date()),
        sa.Column("completed", sa.Boolean(), nullable=False, server_default=sa.false()),
        sa.Column("priority", sa.String(length=20), nullable=False, server_default="medium"),
        sa.Column("created_at", sa.DateTime(), server_default=sa.func.now()),
        sa.Column("updated_at", sa.DateTime(), server_default=sa.func.now()),
    )
    op.create_index("ix_task_user_created_at", "task", ["user_id", "created_at"])


def downgrade():
    op.drop_index("ix_task_user_created_at", table_name="task")
    op.drop_table("task")
    op.drop_index("ix_diary_search_token_user_token", table_name="diary_search_token")
    op.drop_table("diary_search_token")
    op.drop_table("attachment")
    op.drop_index("ix_diary_entry_user_mood", table_name="diary_entry")
    op.drop_index("ix_diary_entry_user_favorite", table_name="diary_entry")
    op.drop_index("ix_diary_entry_user_entry_date", table_name="diary_entry")
    op.drop_index("ix_diary_entry_share_token", table_name="diary_entry")
    op.drop_table("diary_entry")
    op.drop_table("category")
    op.drop_index("ix_user_email", table_name="user")
    op.drop_index("ix_user_username", table_name="user")
    op.drop_table("user")
