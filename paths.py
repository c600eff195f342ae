from __future__ import annotations
import logging
import os
import sys
from pathlib import Path
from models import AssistantConfig


APP_NAME = "SmartStudyPlanner"
DEFAULT_ASSISTANT_TIMEOUT = 60.0

logger = logging.getLogger(__name__)


def get_data_dir() -> Path:
    """
    Resolve the directory used for storing local app data.
    Uses an environment override when provided, otherwise falls back to a
    per-OS user data location.
    """
    override = os.environ.get("STUDY_PLANNER_DATA_DIR")
    if override:
        base = Path(override).expanduser()
    else:
        home = Path.home()
        platform = sys.platform
        if platform == "darwin":
            base = home / "Library" / "Application Support" / APP_NAME
        elif platform.startswith("win"):
            roaming = os.environ.get("APPDATA")
            base = Path(roaming) / APP_NAME if roaming else home / "AppData" / "Roaming" / APP_NAME
        else:
            base = home / ".local" / "share" / "smart-study-planner"

    base.mkdir(parents=True, exist_ok=True)
    return base


def get_log_level() -> str:
    return os.environ.get("STUDY_PLANNER_LOG_LEVEL", "INFO").upper()


def get_assistant_config() -> AssistantConfig | None:
    url = os.environ.get("STUDY_ASSISTANT_URL", "").strip()
    if not url:
        return None

    raw_timeout = os.environ.get("STUDY_ASSISTANT_TIMEOUT", "")
    try:
        timeout = float(raw_timeout) if raw_timeout else DEFAULT_ASSISTANT_TIMEOUT
    except ValueError:
        timeout = 0.0
    if timeout <= 0:
        logger.warning("Ignoring invalid STUDY_ASSISTANT_TIMEOUT=%r", raw_timeout)
        timeout = DEFAULT_ASSISTANT_TIMEOUT

    return AssistantConfig(
        url=url,
        key=os.environ.get("STUDY_ASSISTANT_KEY", "").strip(),
        timeout=timeout,
    )
