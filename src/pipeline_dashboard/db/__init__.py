"""Database layer."""

from pipeline_dashboard.db.models import (
    ActivityLogModel,
    AutomationSettingModel,
    Base,
    ChannelModel,
    ContentJobModel,
    TrendingTopicModel,
)
from pipeline_dashboard.db.session import get_session, get_session_context, init_db

__all__ = [
    "Base",
    "get_session",
    "get_session_context",
    "init_db",
    # Models
    "ActivityLogModel",
    "AutomationSettingModel",
    "ChannelModel",
    "ContentJobModel",
    "TrendingTopicModel",
]
