"""Key/value automation state stored in the database."""

import json
from typing import Any

from sqlalchemy.orm import Session

from pipeline_dashboard.db.models import AutomationSettingModel
from pipeline_dashboard.domain.enums import SystemStatus

SYSTEM_STATUS_KEY = "system_status"
LAST_DAILY_TRIGGER_KEY = "last_daily_trigger"


def get_setting(session: Session, key: str) -> str | None:
    setting = session.get(AutomationSettingModel, key)
    return setting.value if setting else None


def set_setting(
    session: Session, key: str, value: str, description: str | None = None
) -> AutomationSettingModel:
    """Create or update a setting."""
    setting = session.get(AutomationSettingModel, key)
    if setting is None:
        setting = AutomationSettingModel(key=key, value=value, description=description)
        session.add(setting)
    else:
        setting.value = value
        if description is not None:
            setting.description = description
    session.flush()
    return setting


def get_json_setting(session: Session, key: str) -> dict[str, Any] | None:
    raw = get_setting(session, key)
    if raw is None:
        return None
    try:
        value = json.loads(raw)
    except json.JSONDecodeError:
        return None
    return value if isinstance(value, dict) else None


def set_json_setting(
    session: Session, key: str, value: dict[str, Any], description: str | None = None
) -> AutomationSettingModel:
    return set_setting(session, key, json.dumps(value, default=str), description)


def get_system_status(session: Session) -> SystemStatus:
    raw = get_setting(session, SYSTEM_STATUS_KEY)
    if raw == SystemStatus.PAUSED.value:
        return SystemStatus.PAUSED
    return SystemStatus.ACTIVE


def set_system_status(session: Session, status: SystemStatus, description: str) -> None:
    set_setting(session, SYSTEM_STATUS_KEY, status.value, description)
