"""API route modules."""

from pipeline_dashboard.api.routes import (
    automation,
    channels,
    dashboard,
    health,
    jobs,
)

__all__ = ["automation", "channels", "dashboard", "health", "jobs"]
