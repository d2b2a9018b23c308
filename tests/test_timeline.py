"""Tests for upload slot scheduling."""

from datetime import UTC, datetime
from zoneinfo import ZoneInfo

import pytest

from pipeline_dashboard.domain.enums import VideoType
from pipeline_dashboard.domain.models import Channel
from pipeline_dashboard.domain.timeline import (
    local_day_start,
    local_run_date,
    next_slot,
    parse_time_of_day,
)

IST = ZoneInfo("Asia/Kolkata")

CHANNEL = Channel(id=None, name="main", long_form_upload_time="18:30", short_upload_time="20:30")


def test_slot_at_exact_time_rolls_to_next_day() -> None:
    """Test that now == slot yields the following day's slot."""
    now = datetime(2024, 6, 1, 18, 30, tzinfo=IST)

    slot = next_slot(CHANNEL, VideoType.LONG_FORM, now)

    assert slot == datetime(2024, 6, 2, 18, 30, tzinfo=IST)
    assert slot.tzinfo is UTC


def test_slot_later_today() -> None:
    now = datetime(2024, 6, 1, 9, 0, tzinfo=IST)

    assert next_slot(CHANNEL, VideoType.LONG_FORM, now) == datetime(2024, 6, 1, 18, 30, tzinfo=IST)
    assert next_slot(CHANNEL, VideoType.SHORT, now) == datetime(2024, 6, 1, 20, 30, tzinfo=IST)


def test_slot_one_second_before() -> None:
    now = datetime(2024, 6, 1, 18, 29, 59, tzinfo=IST)
    assert next_slot(CHANNEL, "long_form", now) == datetime(2024, 6, 1, 18, 30, tzinfo=IST)


def test_slot_uses_channel_timezone_from_utc_now() -> None:
    # 23:00 UTC is already 04:30 the next day in India
    now = datetime(2024, 6, 1, 23, 0, tzinfo=UTC)
    assert next_slot(CHANNEL, VideoType.SHORT, now) == datetime(2024, 6, 2, 20, 30, tzinfo=IST)


def test_naive_now_is_treated_as_utc() -> None:
    now = datetime(2024, 6, 1, 13, 0)  # 18:30 IST
    assert next_slot(CHANNEL, VideoType.LONG_FORM, now) == datetime(2024, 6, 2, 18, 30, tzinfo=IST)


def test_slot_across_dst_change() -> None:
    channel = Channel(id=None, name="ny", long_form_upload_time="02:30", timezone="America/New_York")
    # 2024-03-10 02:30 does not exist in New York; the slot still lands after now
    now = datetime(2024, 3, 10, 5, 0, tzinfo=UTC)

    slot = next_slot(channel, VideoType.LONG_FORM, now)

    assert slot > now


@pytest.mark.parametrize("value", ["", "1830", "25:00", "18:61", "ab:cd", "18:30:00"])
def test_parse_time_of_day_rejects_malformed(value: str) -> None:
    with pytest.raises(ValueError):
        parse_time_of_day(value)


def test_parse_time_of_day() -> None:
    parsed = parse_time_of_day(" 07:05 ")
    assert (parsed.hour, parsed.minute) == (7, 5)


def test_local_run_date_and_day_start() -> None:
    now = datetime(2024, 6, 1, 20, 0, tzinfo=UTC)  # 01:30 on June 2 in India

    assert local_run_date(now, "Asia/Kolkata") == "2024-06-02"
    assert local_run_date(now, "UTC") == "2024-06-01"
    assert local_day_start(now, "Asia/Kolkata") == datetime(2024, 6, 2, 0, 0, tzinfo=IST)
