"""SQLAlchemy ORM models."""

from datetime import datetime, timezone
from typing import Any
from uuid import UUID as PyUUID
from uuid import uuid4

from sqlalchemy import (
    JSON,
    Boolean,
    CheckConstraint,
    DateTime,
    ForeignKey,
    Integer,
    String,
    Text,
    Uuid,
)
from sqlalchemy.dialects.postgresql import JSONB
from sqlalchemy.orm import DeclarativeBase, Mapped, mapped_column, relationship
from sqlalchemy.sql import func

# JSONB on PostgreSQL, plain JSON elsewhere (SQLite in tests)
JSONType = JSON().with_variant(JSONB(), "postgresql")


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


class Base(DeclarativeBase):
    """Base class for all ORM models."""

    pass


# =============================================================================
# Pipeline Models
# =============================================================================


class ChannelModel(Base):
    """Publishing channel and its upload-time policy."""

    __tablename__ = "channels"

    id: Mapped[PyUUID] = mapped_column(Uuid, primary_key=True, default=uuid4)
    name: Mapped[str] = mapped_column(String(255), nullable=False)
    external_channel_id: Mapped[str | None] = mapped_column(
        String(255), nullable=True, unique=True
    )
    channel_url: Mapped[str | None] = mapped_column(String(512), nullable=True)
    long_form_upload_time: Mapped[str] = mapped_column(String(5), default="18:30")
    short_upload_time: Mapped[str] = mapped_column(String(5), default="20:30")
    timezone: Mapped[str] = mapped_column(String(64), default="Asia/Kolkata")
    is_active: Mapped[bool] = mapped_column(Boolean, default=True, index=True)
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), default=_utcnow, server_default=func.now()
    )
    updated_at: Mapped[datetime | None] = mapped_column(
        DateTime(timezone=True), onupdate=_utcnow
    )

    # Relationships
    content_jobs: Mapped[list["ContentJobModel"]] = relationship(
        "ContentJobModel", back_populates="channel"
    )


class TrendingTopicModel(Base):
    """Trending topic discovered by the external analyzer (read-only here)."""

    __tablename__ = "trending_topics"

    id: Mapped[PyUUID] = mapped_column(Uuid, primary_key=True, default=uuid4)
    title: Mapped[str] = mapped_column(String(500), nullable=False)
    description: Mapped[str | None] = mapped_column(Text, nullable=True)
    search_volume: Mapped[int] = mapped_column(Integer, default=0)
    priority: Mapped[str] = mapped_column(String(20), default="medium", index=True)
    category: Mapped[str | None] = mapped_column(String(100), nullable=True)
    source: Mapped[str | None] = mapped_column(String(100), nullable=True)
    status: Mapped[str] = mapped_column(String(50), default="pending")
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), default=_utcnow, server_default=func.now()
    )


class ContentJobModel(Base):
    """Content job (one per video being produced) ORM model."""

    __tablename__ = "content_jobs"

    id: Mapped[PyUUID] = mapped_column(Uuid, primary_key=True, default=uuid4)
    topic_id: Mapped[PyUUID | None] = mapped_column(
        Uuid, ForeignKey("trending_topics.id", ondelete="SET NULL"), nullable=True
    )
    channel_id: Mapped[PyUUID | None] = mapped_column(
        Uuid, ForeignKey("channels.id", ondelete="SET NULL"), nullable=True, index=True
    )
    # Natural key for daily runs: daily:{date}:{channel}:{video_type}
    idempotency_key: Mapped[str | None] = mapped_column(String(255), nullable=True, unique=True)
    video_type: Mapped[str] = mapped_column(String(20), nullable=False)
    title: Mapped[str] = mapped_column(String(500), nullable=False)
    stage: Mapped[str] = mapped_column(String(50), default="pending", index=True)
    progress: Mapped[int] = mapped_column(Integer, default=0)
    scheduled_time: Mapped[datetime | None] = mapped_column(
        DateTime(timezone=True), nullable=True, index=True
    )
    published_at: Mapped[datetime | None] = mapped_column(DateTime(timezone=True), nullable=True)
    error_message: Mapped[str | None] = mapped_column(Text, nullable=True)
    metadata_: Mapped[dict[str, Any] | None] = mapped_column("metadata", JSONType, nullable=True)
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), default=_utcnow, server_default=func.now(), index=True
    )
    # Written by services.jobs.apply_progress with the caller's clock
    updated_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), default=_utcnow)

    __table_args__ = (
        CheckConstraint("progress >= 0 AND progress <= 100", name="ck_content_jobs_progress"),
    )

    # Relationships
    channel: Mapped["ChannelModel | None"] = relationship(
        "ChannelModel", back_populates="content_jobs"
    )
    topic: Mapped["TrendingTopicModel | None"] = relationship("TrendingTopicModel")


# =============================================================================
# Automation Bookkeeping
# =============================================================================


class ActivityLogModel(Base):
    """Activity feed entry shown on the dashboard."""

    __tablename__ = "activity_logs"

    id: Mapped[PyUUID] = mapped_column(Uuid, primary_key=True, default=uuid4)
    type: Mapped[str] = mapped_column(String(50), nullable=False, index=True)
    title: Mapped[str] = mapped_column(String(255), nullable=False)
    description: Mapped[str | None] = mapped_column(Text, nullable=True)
    status: Mapped[str] = mapped_column(String(20), nullable=False)
    metadata_: Mapped[dict[str, Any] | None] = mapped_column("metadata", JSONType, nullable=True)
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), default=_utcnow, server_default=func.now(), index=True
    )


class AutomationSettingModel(Base):
    """Key/value automation state (system status, last daily trigger)."""

    __tablename__ = "automation_settings"

    key: Mapped[str] = mapped_column(String(100), primary_key=True)
    value: Mapped[str] = mapped_column(Text, nullable=False)
    description: Mapped[str | None] = mapped_column(Text, nullable=True)
    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), default=_utcnow, onupdate=_utcnow
    )
