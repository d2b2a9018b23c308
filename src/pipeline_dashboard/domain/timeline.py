"""Scheduled upload timeline: when a job should publish."""

from datetime import datetime, time, timedelta, timezone
from zoneinfo import ZoneInfo

from pipeline_dashboard.domain.enums import VideoType
from pipeline_dashboard.domain.models import Channel, ensure_utc


def parse_time_of_day(value: str) -> time:
    """Parse an ``HH:MM`` string.

    Raises:
        ValueError: If the value is not a valid 24-hour time.
    """
    try:
        hours, minutes = value.strip().split(":")
        return time(hour=int(hours), minute=int(minutes))
    except (AttributeError, ValueError) as e:
        raise ValueError(f"Invalid time of day {value!r}, expected HH:MM") from e


def next_slot(channel: Channel, video_type: VideoType | str, now: datetime) -> datetime:
    """Next occurrence of the channel's upload time strictly after ``now``.

    The time of day is interpreted in the channel's timezone. A ``now`` that
    falls exactly on the slot counts as already passed, so the result rolls
    to the following day.

    Returns:
        Timezone-aware UTC datetime.
    """
    tz = ZoneInfo(channel.timezone)
    slot_time = parse_time_of_day(channel.upload_time_for(video_type))
    utc_now = ensure_utc(now)

    candidate_date = utc_now.astimezone(tz).date()
    while True:
        candidate = datetime.combine(candidate_date, slot_time, tzinfo=tz).astimezone(timezone.utc)
        if candidate > utc_now:
            return candidate
        candidate_date += timedelta(days=1)


def local_run_date(now: datetime, tz_name: str) -> str:
    """Calendar date (YYYY-MM-DD) of ``now`` in the given timezone."""
    return ensure_utc(now).astimezone(ZoneInfo(tz_name)).date().isoformat()


def local_day_start(now: datetime, tz_name: str) -> datetime:
    """Start of ``now``'s local calendar day, as an aware UTC datetime."""
    tz = ZoneInfo(tz_name)
    local_date = ensure_utc(now).astimezone(tz).date()
    return datetime.combine(local_date, time.min, tzinfo=tz).astimezone(timezone.utc)
