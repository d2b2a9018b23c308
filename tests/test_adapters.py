"""Tests for the publisher adapters."""

from uuid import uuid4

import pytest

from pipeline_dashboard.adapters.publisher import StubPublisherAdapter, get_publisher
from pipeline_dashboard.adapters.publisher.base import PublishRequest
from pipeline_dashboard.config import settings
from pipeline_dashboard.domain.enums import VideoType


@pytest.mark.asyncio
async def test_publisher_stub(publisher_adapter) -> None:
    """Test the stub publisher."""
    request = PublishRequest(job_id=uuid4(), title="Test Video", video_type=VideoType.SHORT)

    result = await publisher_adapter.publish(request)

    assert result.success
    assert result.platform_video_id.startswith("stub_")
    assert result.platform_video_id in result.url
    assert publisher_adapter.published == [request]


@pytest.mark.asyncio
async def test_publisher_stub_failure(publisher_adapter) -> None:
    request = PublishRequest(
        job_id=uuid4(),
        title="Test Video",
        video_type=VideoType.LONG_FORM,
        metadata={"stub_fail": "quota exceeded"},
    )

    result = await publisher_adapter.publish(request)

    assert not result.success
    assert result.error_message == "quota exceeded"
    assert publisher_adapter.published == []


@pytest.mark.asyncio
async def test_publisher_health_check(publisher_adapter) -> None:
    assert await publisher_adapter.health_check() is True
    assert publisher_adapter.name == "stub"


def test_get_publisher_falls_back_to_stub(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setattr(settings, "publisher_provider", "vimeo")

    assert isinstance(get_publisher(), StubPublisherAdapter)
