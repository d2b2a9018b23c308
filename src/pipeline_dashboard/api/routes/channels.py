"""Publishing channel endpoints."""

from datetime import UTC, datetime
from uuid import UUID
from zoneinfo import ZoneInfo

from fastapi import APIRouter, HTTPException, Query, status
from pydantic import BaseModel

from pipeline_dashboard.api.deps import SessionDep
from pipeline_dashboard.domain.enums import VideoType
from pipeline_dashboard.domain.timeline import next_slot
from pipeline_dashboard.services.channels import ChannelNotFoundError, get_channel, list_channels, to_domain

router = APIRouter(prefix="/channels", tags=["Channels"])


class ChannelResponse(BaseModel):
    id: str
    name: str
    external_channel_id: str | None = None
    channel_url: str | None = None
    long_form_upload_time: str
    short_upload_time: str
    timezone: str
    is_active: bool


class NextSlotResponse(BaseModel):
    """Next upload slot for a channel and video type."""

    channel_id: str
    video_type: str
    upload_time: str
    timezone: str
    next_slot: datetime
    next_slot_local: datetime


@router.get(
    "",
    response_model=list[ChannelResponse],
    summary="List channels",
)
async def get_channels(
    session: SessionDep,
    active_only: bool = Query(default=False),
) -> list[ChannelResponse]:
    return [
        ChannelResponse(
            id=str(channel.id),
            name=channel.name,
            external_channel_id=channel.external_channel_id,
            channel_url=channel.channel_url,
            long_form_upload_time=channel.long_form_upload_time,
            short_upload_time=channel.short_upload_time,
            timezone=to_domain(channel).timezone,
            is_active=channel.is_active,
        )
        for channel in list_channels(session, active_only=active_only)
    ]


@router.get(
    "/{channel_id}/next-slot",
    response_model=NextSlotResponse,
    summary="Next upload slot",
    description="When a video of this type would be published if scheduled now.",
)
async def get_next_slot(
    channel_id: UUID,
    session: SessionDep,
    video_type: VideoType = Query(default=VideoType.LONG_FORM),
) -> NextSlotResponse:
    try:
        channel = to_domain(get_channel(session, channel_id))
    except ChannelNotFoundError:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail="Channel not found",
        )

    slot = next_slot(channel, video_type, datetime.now(UTC))
    return NextSlotResponse(
        channel_id=str(channel_id),
        video_type=video_type.value,
        upload_time=channel.upload_time_for(video_type),
        timezone=channel.timezone,
        next_slot=slot,
        next_slot_local=slot.astimezone(ZoneInfo(channel.timezone)),
    )
