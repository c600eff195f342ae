from __future__ import annotations
from datetime import date
from models import AppState, Subject, color_for_index
from planner import generate_study_plan, new_id, reschedule_missed_tasks


def add_subject(
    state: AppState,
    name: str,
    difficulty: int,
    exam_date: date,
    hours_needed: float,
    today: date | None = None,
) -> AppState:
    name = name.strip()
    if not name:
        raise ValueError("Subject name cannot be empty.")

    subject = Subject(
        id=new_id(),
        name=name,
        difficulty=int(difficulty),
        exam_date=exam_date,
        hours_needed=float(hours_needed),
        completed_hours=0,
        color=color_for_index(len(state.subjects)),
    )
    subjects = state.subjects + [subject]
    plan = generate_study_plan(subjects, state.study_hours_per_day, today)
    return state.model_copy(update={"subjects": subjects, "plan": plan})


def remove_subject(state: AppState, subject_id: str, today: date | None = None) -> AppState:
    subjects = [s for s in state.subjects if s.id != subject_id]
    plan = generate_study_plan(subjects, state.study_hours_per_day, today)
    return state.model_copy(update={"subjects": subjects, "plan": plan})


def toggle_task(state: AppState, task_id: str) -> AppState:
    tasks = [
        t.model_copy(update={"completed": not t.completed}) if t.id == task_id else t
        for t in state.plan.tasks
    ]
    plan = state.plan.model_copy(update={"tasks": tasks})
    return state.model_copy(update={"plan": plan})


def regenerate_plan(state: AppState, today: date | None = None) -> AppState:
    plan = generate_study_plan(state.subjects, state.study_hours_per_day, today)
    return state.model_copy(update={"plan": plan})


def reschedule(state: AppState, today: date | None = None) -> AppState:
    plan = reschedule_missed_tasks(
        state.plan, state.subjects, state.study_hours_per_day, today
    )
    return state.model_copy(update={"plan": plan})


def set_study_hours(state: AppState, hours: float) -> AppState:
    return state.model_copy(update={"study_hours_per_day": float(hours)})


def clear_all() -> AppState:
    return AppState()
