"""Video publishing adapters."""

from pipeline_dashboard.adapters.publisher.base import (
    PublisherAdapter,
    PublishRequest,
    PublishResponse,
)
from pipeline_dashboard.adapters.publisher.stub import StubPublisherAdapter
from pipeline_dashboard.config import settings
from pipeline_dashboard.logging import get_logger

logger = get_logger(__name__)


def get_publisher() -> PublisherAdapter:
    """Get the configured publisher for scheduled uploads."""
    provider_name = settings.publisher_provider.lower()

    if provider_name == "stub":
        return StubPublisherAdapter()

    logger.warning("unknown_publisher_provider", provider=provider_name, fallback="stub")
    return StubPublisherAdapter()


__all__ = [
    "PublisherAdapter",
    "PublishRequest",
    "PublishResponse",
    "StubPublisherAdapter",
    "get_publisher",
]
