from __future__ import annotations
from datetime import timedelta

import pytest
from pydantic import ValidationError

from conftest import TODAY
from models import SUBJECT_COLORS, AppState
from planner import get_tasks_for_date
from session import (
    add_subject,
    clear_all,
    regenerate_plan,
    remove_subject,
    reschedule,
    set_study_hours,
    toggle_task,
)


def _with_two_subjects() -> AppState:
    state = AppState()
    state = add_subject(state, "Math", 4, TODAY + timedelta(days=5), 12, today=TODAY)
    state = add_subject(state, "History", 2, TODAY + timedelta(days=9), 8, today=TODAY)
    return state


def test_add_subject_assigns_ordinal_colors_and_regenerates():
    state = _with_two_subjects()

    assert [s.name for s in state.subjects] == ["Math", "History"]
    assert [s.color for s in state.subjects] == SUBJECT_COLORS[:2]
    assert all(s.completed_hours == 0 for s in state.subjects)
    assert {t.subject_id for t in state.plan.tasks} == {s.id for s in state.subjects}
    assert state.plan.start_date == TODAY
    assert state.plan.end_date == TODAY + timedelta(days=9)


def test_color_palette_wraps_around():
    state = AppState()
    for i in range(len(SUBJECT_COLORS) + 1):
        state = add_subject(state, f"S{i}", 3, TODAY + timedelta(days=3), 2, today=TODAY)
    assert state.subjects[-1].color == SUBJECT_COLORS[0]


def test_add_subject_rejects_blank_name():
    with pytest.raises(ValueError, match="empty"):
        add_subject(AppState(), "   ", 3, TODAY, 10, today=TODAY)


def test_add_subject_rejects_out_of_range_difficulty():
    with pytest.raises(ValidationError):
        add_subject(AppState(), "Chem", 6, TODAY, 10, today=TODAY)


def test_add_subject_does_not_touch_previous_state():
    state = AppState()
    new_state = add_subject(state, "Math", 3, TODAY + timedelta(days=4), 6, today=TODAY)
    assert state.subjects == []
    assert state.plan.tasks == []
    assert len(new_state.subjects) == 1


def test_remove_subject_drops_its_tasks():
    state = _with_two_subjects()
    math = state.subjects[0]

    state = remove_subject(state, math.id, today=TODAY)
    assert [s.name for s in state.subjects] == ["History"]
    assert all(t.subject_id != math.id for t in state.plan.tasks)
    assert state.plan.end_date == TODAY + timedelta(days=9)


def test_toggle_task_flips_only_that_task():
    state = _with_two_subjects()
    target = state.plan.tasks[0]

    toggled = toggle_task(state, target.id)
    assert toggled.plan.tasks[0].completed is True
    assert all(not t.completed for t in toggled.plan.tasks[1:])
    assert state.plan.tasks[0].completed is False

    back = toggle_task(toggled, target.id)
    assert back.plan.tasks[0].completed is False


def test_toggle_unknown_task_changes_nothing():
    state = _with_two_subjects()
    assert toggle_task(state, "missing").plan == state.plan


def test_set_study_hours_then_regenerate():
    state = set_study_hours(_with_two_subjects(), 2)
    assert state.study_hours_per_day == 2

    state = regenerate_plan(state, today=TODAY)
    totals: dict = {}
    for t in state.plan.tasks:
        totals[t.day] = totals.get(t.day, 0) + t.hours
    assert max(totals.values()) <= 2


def test_reschedule_moves_missed_work_forward():
    state = _with_two_subjects()
    first_day = get_tasks_for_date(state.plan, TODAY)
    assert first_day

    # a day later, none of the first day's tasks were done
    tomorrow = TODAY + timedelta(days=1)
    state = reschedule(state, today=tomorrow)

    assert get_tasks_for_date(state.plan, TODAY) == []
    assert state.plan.start_date == TODAY
    assert all(t.day >= tomorrow for t in state.plan.tasks)


def test_clear_all_returns_empty_state():
    state = clear_all()
    assert state.subjects == []
    assert state.plan.tasks == []
    assert state.study_hours_per_day == 6
