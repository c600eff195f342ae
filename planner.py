from __future__ import annotations
import logging
import math
from datetime import date, datetime, timedelta
from typing import Dict, List
from uuid import uuid4
from models import DEFAULT_STUDY_HOURS, DailyTask, StudyPlan, Subject

logger = logging.getLogger(__name__)

REVISION_WINDOW_DAYS = 2
MIN_TASK_HOURS = 0.5
STREAK_LOOKBACK_DAYS = 365


def new_id() -> str:
    return uuid4().hex[:8]


def _as_day(value: date | datetime) -> date:
    if isinstance(value, datetime):
        return value.date()
    return value


def round_half(value: float) -> float:
    # nearest 0.5, halves go up (2.25 -> 2.5, not banker's rounding)
    return math.floor(value * 2 + 0.5) / 2


def _percent(part: int, whole: int) -> int:
    if whole <= 0:
        return 0
    return int(math.floor((part / whole) * 100 + 0.5))


def _days_until(today: date, exam_date: date) -> int:
    return max(1, (exam_date - today).days)


def remaining_hours(s: Subject) -> float:
    return max(0.0, s.hours_needed - s.completed_hours)


def subject_weight(s: Subject, today: date) -> float:
    # higher = gets a bigger share of the day
    urgency = remaining_hours(s) / _days_until(today, s.exam_date)
    difficulty_weight = s.difficulty / 3
    return urgency * difficulty_weight


def generate_study_plan(
    subjects: List[Subject],
    study_hours_per_day: float = DEFAULT_STUDY_HOURS,
    today: date | None = None,
) -> StudyPlan:
    """
    Spread each subject's remaining hours over the days up to its exam.

    Weights are fixed against `today` for the whole run; only the per-subject
    remaining hours change as days are filled.
    """
    today = _as_day(today or date.today())
    if not subjects:
        return StudyPlan(tasks=[], start_date=today, end_date=today)

    end_date = subjects[0].exam_date
    for s in subjects[1:]:
        if s.exam_date > end_date:
            end_date = s.exam_date

    weights = {s.id: subject_weight(s, today) for s in subjects}
    remaining: Dict[str, float] = {s.id: remaining_hours(s) for s in subjects}
    total_days = max(1, (end_date - today).days)

    tasks: List[DailyTask] = []
    for offset in range(total_days + 1):
        current = today + timedelta(days=offset)

        # Subjects whose exam is behind `current` drop out even with hours left
        active = [
            s for s in subjects
            if s.exam_date >= current and remaining[s.id] > 0
        ]
        if not active:
            continue

        active = sorted(active, key=lambda s: weights[s.id], reverse=True)
        total_weight = sum(weights[s.id] for s in active)

        day_left = study_hours_per_day
        for s in active:
            if day_left <= 0:
                break

            if total_weight > 0:
                proportion = weights[s.id] / total_weight
            else:
                proportion = 1 / len(active)

            hours = round_half(study_hours_per_day * proportion)
            hours = min(hours, day_left, remaining[s.id])
            hours = max(hours, MIN_TASK_HOURS)

            # The floor above can lift hours past day_left; such slots are skipped
            if hours <= 0 or day_left < hours:
                continue

            days_to_exam = (s.exam_date - current).days
            tasks.append(DailyTask(
                id=new_id(),
                day=current,
                subject_id=s.id,
                subject_name=s.name,
                hours=hours,
                kind="revision" if days_to_exam <= REVISION_WINDOW_DAYS else "study",
                completed=False,
                color=s.color,
            ))
            remaining[s.id] -= hours
            day_left -= hours

    logger.debug(
        "Generated %d tasks for %d subjects (%s -> %s, %.1fh/day)",
        len(tasks), len(subjects), today, end_date, study_hours_per_day,
    )
    return StudyPlan(tasks=tasks, start_date=today, end_date=end_date)


def _missed_tasks(plan: StudyPlan, today: date) -> List[DailyTask]:
    return [t for t in plan.tasks if t.day < today and not t.completed]


def fold_missed_hours(
    plan: StudyPlan,
    subjects: List[Subject],
    today: date | None = None,
) -> List[Subject]:
    today = _as_day(today or date.today())
    missed_hours: Dict[str, float] = {}
    for t in _missed_tasks(plan, today):
        missed_hours[t.subject_id] = missed_hours.get(t.subject_id, 0.0) + t.hours

    return [
        s.model_copy(update={"hours_needed": s.hours_needed + missed_hours[s.id]})
        if s.id in missed_hours else s
        for s in subjects
    ]


def reschedule_missed_tasks(
    plan: StudyPlan,
    subjects: List[Subject],
    study_hours_per_day: float = DEFAULT_STUDY_HOURS,
    today: date | None = None,
) -> StudyPlan:
    """
    Drop unfinished past tasks, add their hours back to the subjects and
    rebuild everything from today on. Completed past tasks are kept as history.
    """
    today = _as_day(today or date.today())
    missed = _missed_tasks(plan, today)
    if not missed:
        return plan

    updated_subjects = fold_missed_hours(plan, subjects, today)
    kept = [t for t in plan.tasks if t.completed or t.day >= today]
    fresh = generate_study_plan(updated_subjects, study_hours_per_day, today)

    logger.info(
        "Rescheduled %d missed tasks (%.1fh) into a new plan of %d tasks",
        len(missed), sum(t.hours for t in missed), len(fresh.tasks),
    )
    return StudyPlan(
        tasks=[t for t in kept if t.day < today] + fresh.tasks,
        start_date=plan.start_date,
        end_date=fresh.end_date,
    )


def get_tasks_for_date(plan: StudyPlan, day: date | datetime) -> List[DailyTask]:
    target = _as_day(day)
    return [t for t in plan.tasks if t.day == target]


def get_subject_progress(plan: StudyPlan, subject: Subject) -> int:
    subject_tasks = [t for t in plan.tasks if t.subject_id == subject.id]
    if not subject_tasks:
        return 0
    completed = sum(1 for t in subject_tasks if t.completed)
    return _percent(completed, len(subject_tasks))


def _tasks_by_day(tasks: List[DailyTask]) -> Dict[date, List[DailyTask]]:
    by_day: Dict[date, List[DailyTask]] = {}
    for t in tasks:
        by_day.setdefault(t.day, []).append(t)
    return by_day


def calculate_streak(plan: StudyPlan, today: date | None = None) -> int:
    """
    Count consecutive fully completed days going back from yesterday, plus one
    for today when any of today's tasks is done.
    """
    today = _as_day(today or date.today())
    by_day = _tasks_by_day(plan.tasks)

    streak = 0
    today_tasks = by_day.get(today, [])
    if today_tasks and all(t.completed for t in today_tasks):
        streak = 1
    elif today_tasks and any(t.completed for t in today_tasks):
        # today is still in progress, partial completion counts
        streak = 1

    for i in range(1, STREAK_LOOKBACK_DAYS + 1):
        day_tasks = by_day.get(today - timedelta(days=i), [])
        if not day_tasks:
            break
        if not all(t.completed for t in day_tasks):
            break
        streak += 1

    return streak


def get_overall_progress(plan: StudyPlan) -> int:
    completed = sum(1 for t in plan.tasks if t.completed)
    return _percent(completed, len(plan.tasks))


def get_hours_studied(plan: StudyPlan) -> float:
    return sum(t.hours for t in plan.tasks if t.completed)


def count_active_exams(subjects: List[Subject], today: date | None = None) -> int:
    today = _as_day(today or date.today())
    return sum(1 for s in subjects if s.exam_date >= today)


def get_week_days(selected: date | datetime) -> List[date]:
    day = _as_day(selected)
    monday = day - timedelta(days=day.weekday())
    return [monday + timedelta(days=i) for i in range(7)]


def get_day_summary(plan: StudyPlan, day: date | datetime) -> dict:
    day_tasks = get_tasks_for_date(plan, day)
    return {
        "tasks": len(day_tasks),
        "hours": sum(t.hours for t in day_tasks),
        "completed_hours": sum(t.hours for t in day_tasks if t.completed),
        "all_done": bool(day_tasks) and all(t.completed for t in day_tasks),
    }


def build_progress_rows(
    subjects: List[Subject],
    plan: StudyPlan,
    today: date | None = None,
) -> List[dict]:
    today = _as_day(today or date.today())
    rows = []
    for s in subjects:
        subject_tasks = [t for t in plan.tasks if t.subject_id == s.id]
        rows.append({
            "subject": s.name,
            "exam_date": s.exam_date,
            "days_left": max(0, (s.exam_date - today).days),
            "difficulty": s.difficulty,
            "hours_needed": s.hours_needed,
            "planned_hours": sum(t.hours for t in subject_tasks),
            "progress": get_subject_progress(plan, s),
            "color": s.color,
        })
    rows.sort(key=lambda x: x["exam_date"])
    return rows
