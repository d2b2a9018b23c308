"""Initial schema

Revision ID: 0001
Revises:
Create Date: 2026-10-18

"""

from typing import Sequence, Union

import sqlalchemy as sa
from alembic import op
from sqlalchemy.dialects import postgresql

revision: str = "0001"
down_revision: Union[str, None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None

JSONType = sa.JSON().with_variant(postgresql.JSONB(), "postgresql")


def upgrade() -> None:
    # Channels table
    op.create_table(
        "channels",
        sa.Column("id", sa.Uuid(), nullable=False),
        sa.Column("name", sa.String(255), nullable=False),
        sa.Column("external_channel_id", sa.String(255), nullable=True),
        sa.Column("channel_url", sa.String(512), nullable=True),
        sa.Column("long_form_upload_time", sa.String(5), nullable=False, server_default="18:30"),
        sa.Column("short_upload_time", sa.String(5), nullable=False, server_default="20:30"),
        sa.Column("timezone", sa.String(64), nullable=False, server_default="Asia/Kolkata"),
        sa.Column("is_active", sa.Boolean(), nullable=False, server_default=sa.true()),
        sa.Column("created_at", sa.DateTime(timezone=True), server_default=sa.func.now()),
        sa.Column("updated_at", sa.DateTime(timezone=True), nullable=True),
        sa.PrimaryKeyConstraint("id"),
        sa.UniqueConstraint("external_channel_id"),
    )
    op.create_index("ix_channels_is_active", "channels", ["is_active"])

    # Trending topics table (written by the external topic analyzer)
    op.create_table(
        "trending_topics",
        sa.Column("id", sa.Uuid(), nullable=False),
        sa.Column("title", sa.String(500), nullable=False),
        sa.Column("description", sa.Text(), nullable=True),
        sa.Column("search_volume", sa.Integer(), nullable=False, server_default="0"),
        sa.Column("priority", sa.String(20), nullable=False, server_default="medium"),
        sa.Column("category", sa.String(100), nullable=True),
        sa.Column("source", sa.String(100), nullable=True),
        sa.Column("status", sa.String(50), nullable=False, server_default="pending"),
        sa.Column("created_at", sa.DateTime(timezone=True), server_default=sa.func.now()),
        sa.PrimaryKeyConstraint("id"),
    )
    op.create_index("ix_trending_topics_priority", "trending_topics", ["priority"])

    # Content jobs table
    op.create_table(
        "content_jobs",
        sa.Column("id", sa.Uuid(), nullable=False),
        sa.Column("topic_id", sa.Uuid(), nullable=True),
        sa.Column("channel_id", sa.Uuid(), nullable=True),
        sa.Column("idempotency_key", sa.String(255), nullable=True),
        sa.Column("video_type", sa.String(20), nullable=False),
        sa.Column("title", sa.String(500), nullable=False),
        sa.Column("stage", sa.String(50), nullable=False, server_default="pending"),
        sa.Column("progress", sa.Integer(), nullable=False, server_default="0"),
        sa.Column("scheduled_time", sa.DateTime(timezone=True), nullable=True),
        sa.Column("published_at", sa.DateTime(timezone=True), nullable=True),
        sa.Column("error_message", sa.Text(), nullable=True),
        sa.Column("metadata", JSONType, nullable=True),
        sa.Column("created_at", sa.DateTime(timezone=True), server_default=sa.func.now()),
        sa.Column("updated_at", sa.DateTime(timezone=True), nullable=True),
        sa.PrimaryKeyConstraint("id"),
        sa.ForeignKeyConstraint(["topic_id"], ["trending_topics.id"], ondelete="SET NULL"),
        sa.ForeignKeyConstraint(["channel_id"], ["channels.id"], ondelete="SET NULL"),
        sa.UniqueConstraint("idempotency_key"),
        sa.CheckConstraint("progress >= 0 AND progress <= 100", name="ck_content_jobs_progress"),
    )
    op.create_index("ix_content_jobs_stage", "content_jobs", ["stage"])
    op.create_index("ix_content_jobs_channel_id", "content_jobs", ["channel_id"])
    op.create_index("ix_content_jobs_scheduled_time", "content_jobs", ["scheduled_time"])
    op.create_index("ix_content_jobs_created_at", "content_jobs", ["created_at"])

    # Activity log table
    op.create_table(
        "activity_logs",
        sa.Column("id", sa.Uuid(), nullable=False),
        sa.Column("type", sa.String(50), nullable=False),
        sa.Column("title", sa.String(255), nullable=False),
        sa.Column("description", sa.Text(), nullable=True),
        sa.Column("status", sa.String(20), nullable=False),
        sa.Column("metadata", JSONType, nullable=True),
        sa.Column("created_at", sa.DateTime(timezone=True), server_default=sa.func.now()),
        sa.PrimaryKeyConstraint("id"),
    )
    op.create_index("ix_activity_logs_type", "activity_logs", ["type"])
    op.create_index("ix_activity_logs_created_at", "activity_logs", ["created_at"])

    # Automation settings table
    op.create_table(
        "automation_settings",
        sa.Column("key", sa.String(100), nullable=False),
        sa.Column("value", sa.Text(), nullable=False),
        sa.Column("description", sa.Text(), nullable=True),
        sa.Column("updated_at", sa.DateTime(timezone=True), nullable=True),
        sa.PrimaryKeyConstraint("key"),
    )


def downgrade() -> None:
    op.drop_table("automation_settings")
    op.drop_index("ix_activity_logs_created_at", table_name="activity_logs")
    op.drop_index("ix_activity_logs_type", table_name="activity_logs")
    op.drop_table("activity_logs")
    op.drop_index("ix_content_jobs_created_at", table_name="content_jobs")
    op.drop_index("ix_content_jobs_scheduled_time", table_name="content_jobs")
    op.drop_index("ix_content_jobs_channel_id", table_name="content_jobs")
    op.drop_index("ix_content_jobs_stage", table_name="content_jobs")
    op.drop_table("content_jobs")
    op.drop_index("ix_trending_topics_priority", table_name="trending_topics")
    op.drop_table("trending_topics")
    op.drop_index("ix_channels_is_active", table_name="channels")
    op.drop_table("channels")
