from __future__ import annotations
import logging
from pathlib import Path
from pydantic import ValidationError
from models import AppState
from storage import data_path, load_json, save_json

SNAPSHOT_FILE = "smart-study-planner.json"

logger = logging.getLogger(__name__)


def snapshot_path() -> Path:
    return data_path(SNAPSHOT_FILE)


def load_snapshot() -> AppState:
    """
    Load the saved subjects, plan and daily budget.

    Anything that does not validate is discarded as a whole: the caller gets a
    fresh empty state, never a partially restored plan.
    """
    raw = load_json(snapshot_path())
    if not raw:
        return AppState()

    try:
        return AppState.model_validate(raw)
    except ValidationError as e:
        logger.warning("Discarding invalid snapshot %s: %d errors", snapshot_path(), e.error_count())
        return AppState()


def save_snapshot(state: AppState) -> None:
    save_json(snapshot_path(), state.model_dump(mode="json"))
    logger.info(
        "Saved snapshot: %d subjects, %d tasks",
        len(state.subjects), len(state.plan.tasks),
    )


def clear_snapshot() -> None:
    try:
        snapshot_path().unlink()
    except FileNotFoundError:
        pass
