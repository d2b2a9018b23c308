"""Read-only access to publishing channels and their upload times."""

from uuid import UUID

from sqlalchemy import select
from sqlalchemy.orm import Session

from pipeline_dashboard.config import settings
from pipeline_dashboard.db.models import ChannelModel, ContentJobModel
from pipeline_dashboard.domain.models import Channel


class ChannelNotFoundError(Exception):
    """Raised when a channel is not found."""

    pass


def to_domain(model: ChannelModel) -> Channel:
    """Convert a channel row to its domain policy."""
    return Channel(
        id=model.id,
        name=model.name,
        long_form_upload_time=model.long_form_upload_time,
        short_upload_time=model.short_upload_time,
        timezone=model.timezone or settings.schedule_timezone,
        is_active=model.is_active,
    )


def default_channel() -> Channel:
    """Upload policy for jobs that are not tied to a channel."""
    return Channel(
        id=None,
        name="default",
        long_form_upload_time=settings.default_long_form_upload_time,
        short_upload_time=settings.default_short_upload_time,
        timezone=settings.schedule_timezone,
        is_active=True,
    )


def list_channels(session: Session, active_only: bool = False) -> list[ChannelModel]:
    query = select(ChannelModel).order_by(ChannelModel.name)
    if active_only:
        query = query.where(ChannelModel.is_active.is_(True))
    return list(session.execute(query).scalars().all())


def get_channel(session: Session, channel_id: UUID) -> ChannelModel:
    """Get a channel by id.

    Raises:
        ChannelNotFoundError: If no channel has this id.
    """
    channel = session.get(ChannelModel, channel_id)
    if channel is None:
        raise ChannelNotFoundError(f"Channel not found: {channel_id}")
    return channel


def channel_for_job(session: Session, job: ContentJobModel) -> Channel:
    """Upload policy that applies to a job."""
    if job.channel_id is None:
        return default_channel()
    channel = session.get(ChannelModel, job.channel_id)
    return to_domain(channel) if channel else default_channel()
