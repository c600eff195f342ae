from __future__ import annotations
from datetime import timedelta
from typing import List
from icalendar import Calendar, Event as IcsEvent
from models import DailyTask


def _format_hours(hours: float) -> str:
    return f"{hours:g}h"


def plan_to_ics(tasks: List[DailyTask]) -> bytes:
    cal = Calendar()
    cal.add("PRODID", "-//Smart Study Planner//Local//")
    cal.add("version", "2.0")
    cal.add("X-WR-CALNAME", "Study Plan")

    # All-day events only; the plan has no time-of-day
    for task in sorted(tasks, key=lambda x: (x.day, x.subject_name.lower())):
        label = "Revision" if task.kind == "revision" else "Study"
        event = IcsEvent()
        event.add("uid", f"{task.id}-{task.day.strftime('%Y%m%d')}@smart-study-planner")
        event.add("summary", f"{label}: {task.subject_name}")
        event.add("dtstart", task.day)
        event.add("dtend", task.day + timedelta(days=1))
        status = "done" if task.completed else "planned"
        event.add("description", f"{_format_hours(task.hours)} {label.lower()} ({status}).")
        cal.add_component(event)

    return cal.to_ical()
