"""Adapters for external services."""

from pipeline_dashboard.adapters.publisher.base import PublisherAdapter

__all__ = [
    "PublisherAdapter",
]
