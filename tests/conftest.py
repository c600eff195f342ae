from __future__ import annotations
from datetime import date, timedelta
from itertools import count

import pytest

from models import DailyTask, Subject

TODAY = date(2026, 3, 2)  # a Monday

_ids = count(1)


@pytest.fixture
def today() -> date:
    return TODAY


@pytest.fixture
def make_subject():
    def _make(
        name: str = "Math",
        difficulty: int = 3,
        exam_in: int = 10,
        hours_needed: float = 20,
        completed_hours: float = 0,
        subject_id: str | None = None,
    ) -> Subject:
        return Subject(
            id=subject_id or f"s{next(_ids)}",
            name=name,
            difficulty=difficulty,
            exam_date=TODAY + timedelta(days=exam_in),
            hours_needed=hours_needed,
            completed_hours=completed_hours,
            color="hsl(36, 80%, 50%)",
        )

    return _make


@pytest.fixture
def make_task():
    def _make(
        subject: Subject,
        day_offset: int = 0,
        hours: float = 2,
        completed: bool = False,
        kind: str = "study",
    ) -> DailyTask:
        return DailyTask(
            id=f"t{next(_ids)}",
            day=TODAY + timedelta(days=day_offset),
            subject_id=subject.id,
            subject_name=subject.name,
            hours=hours,
            kind=kind,
            completed=completed,
            color=subject.color,
        )

    return _make


def task_key(task: DailyTask) -> tuple:
    return (task.day, task.subject_id, task.hours, task.kind, task.completed)
