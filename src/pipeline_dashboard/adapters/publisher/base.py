"""Base interface for the publisher that performs scheduled uploads."""

from abc import ABC, abstractmethod
from dataclasses import dataclass
from datetime import datetime
from typing import Any
from uuid import UUID

from pipeline_dashboard.domain.enums import VideoType


@dataclass
class PublishRequest:
    """A due content job handed to the publisher."""

    job_id: UUID
    title: str
    video_type: VideoType
    scheduled_time: datetime | None = None
    drive_url: str | None = None
    visibility: str = "public"  # public, private, unlisted
    metadata: dict[str, Any] | None = None


@dataclass
class PublishResponse:
    """Response from publishing a video."""

    success: bool
    platform_video_id: str | None = None
    url: str | None = None
    error_message: str | None = None
    metadata: dict[str, Any] | None = None


class PublisherAdapter(ABC):
    """Abstract base class for publishers.

    The actual upload (YouTube auth, resumable upload, thumbnail) is owned by
    the external automation backend. Implementations only report the outcome.

    Implementations:
    - StubPublisherAdapter: Simulated upload for development and tests
    """

    @property
    @abstractmethod
    def name(self) -> str:
        """Provider name shown in health checks."""
        ...

    @abstractmethod
    async def publish(self, request: PublishRequest) -> PublishResponse:
        """Publish a content job.

        Args:
            request: The due job and its upload details

        Returns:
            PublishResponse with the platform video ID and URL, or an error
        """
        ...

    async def health_check(self) -> bool:
        """Check if the publisher is available and authenticated.

        Returns:
            True if publisher is operational, False otherwise
        """
        return True
