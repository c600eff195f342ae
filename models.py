from __future__ import annotations
from pydantic import BaseModel, Field
from datetime import date
from typing import List, Literal


SUBJECT_COLORS = [
    "hsl(36, 80%, 50%)",
    "hsl(200, 60%, 50%)",
    "hsl(145, 50%, 42%)",
    "hsl(340, 60%, 55%)",
    "hsl(270, 50%, 55%)",
    "hsl(15, 70%, 55%)",
    "hsl(180, 50%, 42%)",
    "hsl(55, 70%, 45%)",
]

DEFAULT_STUDY_HOURS = 6.0


def color_for_index(index: int) -> str:
    return SUBJECT_COLORS[index % len(SUBJECT_COLORS)]


class Subject(BaseModel):
    id: str
    name: str
    difficulty: int = Field(ge=1, le=5)
    exam_date: date
    hours_needed: float = Field(ge=0)
    completed_hours: float = Field(default=0, ge=0)
    color: str = SUBJECT_COLORS[0]


class DailyTask(BaseModel):
    id: str
    day: date
    subject_id: str
    subject_name: str
    hours: float = Field(gt=0)
    kind: Literal["study", "revision"] = "study"
    completed: bool = False
    color: str = SUBJECT_COLORS[0]


class StudyPlan(BaseModel):
    tasks: List[DailyTask] = Field(default_factory=list)
    start_date: date = Field(default_factory=date.today)
    end_date: date = Field(default_factory=date.today)


class AssistantConfig(BaseModel):
    url: str
    key: str = ""
    timeout: float = Field(default=60.0, gt=0)


class AppState(BaseModel):
    subjects: List[Subject] = Field(default_factory=list)
    plan: StudyPlan = Field(default_factory=StudyPlan)
    study_hours_per_day: float = DEFAULT_STUDY_HOURS
