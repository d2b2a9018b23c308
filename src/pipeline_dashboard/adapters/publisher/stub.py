"""Stub publisher adapter for development and tests."""

from uuid import uuid4

from pipeline_dashboard.adapters.publisher.base import (
    PublisherAdapter,
    PublishRequest,
    PublishResponse,
)
from pipeline_dashboard.logging import get_logger

logger = get_logger(__name__)


class StubPublisherAdapter(PublisherAdapter):
    """Simulates publishing without external calls.

    Jobs whose metadata contains ``stub_fail`` are reported as failed, which
    lets tests and local runs exercise the failure path.
    """

    def __init__(self, base_url: str = "https://youtube.example.com/watch") -> None:
        self.base_url = base_url
        self.published: list[PublishRequest] = []

    @property
    def name(self) -> str:
        return "stub"

    async def publish(self, request: PublishRequest) -> PublishResponse:
        logger.info(
            "stub_publish_started",
            job_id=str(request.job_id),
            title=request.title,
            video_type=str(request.video_type),
        )

        if request.metadata and request.metadata.get("stub_fail"):
            error = str(request.metadata["stub_fail"])
            logger.warning("stub_publish_failed", job_id=str(request.job_id), error=error)
            return PublishResponse(success=False, error_message=error)

        platform_video_id = f"stub_{uuid4().hex[:11]}"
        url = f"{self.base_url}?v={platform_video_id}"
        self.published.append(request)

        logger.info(
            "stub_publish_completed",
            job_id=str(request.job_id),
            platform_video_id=platform_video_id,
            url=url,
        )

        return PublishResponse(
            success=True,
            platform_video_id=platform_video_id,
            url=url,
            metadata={"adapter": "stub", "visibility": request.visibility},
        )
