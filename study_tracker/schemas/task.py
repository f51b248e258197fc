"""
Pydantic schemas for tasks, task categories and the day rollover
"""
from pydantic import Field, field_validator
from typing import List, Literal, Optional
from uuid import UUID
from datetime import date, datetime

from study_tracker.schemas.common import CamelModel, RequestModel

WEEKDAYS = ("monday", "tuesday", "wednesday", "thursday", "friday", "saturday", "sunday")

Weekday = Literal["monday", "tuesday", "wednesday", "thursday", "friday", "saturday", "sunday"]


def _normalize_repeat(value):
    """Lower-case, drop blanks and duplicates, keep first-seen order"""
    if value is None:
        return None
    if not isinstance(value, list):
        return value
    seen = []
    for day in value:
        if isinstance(day, str):
            day = day.strip().lower()
            if not day:
                continue
        if day not in seen:
            seen.append(day)
    return seen


class TaskCategoryCreate(RequestModel):
    """Schema for creating a task category"""
    category: str = Field(..., min_length=3, max_length=100)


class TaskCategoryUpdate(RequestModel):
    """PUT body for a task category"""
    id: UUID
    data: TaskCategoryCreate


class TaskCategoryResponse(CamelModel):
    """A stored task category"""
    id: UUID
    category: str


class TaskCreate(RequestModel):
    """Schema for creating a task or a recurring task template"""
    task: str = Field(..., min_length=3, description="Task text")
    category_id: UUID = Field(..., alias="category")
    done: bool = False
    assigned_date: Optional[datetime] = None
    completed_at: Optional[datetime] = None
    repeat: Optional[List[Weekday]] = Field(None, description="Weekdays the task recurs on")

    @field_validator("repeat", mode="before")
    @classmethod
    def normalize_repeat(cls, value):
        return _normalize_repeat(value)


class TaskUpdateData(RequestModel):
    """Fields of a task that may be replaced"""
    task: Optional[str] = Field(None, min_length=3)
    category_id: Optional[UUID] = Field(None, alias="category")
    done: Optional[bool] = None
    assigned_date: Optional[datetime] = None
    completed_at: Optional[datetime] = None
    repeat: Optional[List[Weekday]] = None

    @field_validator("repeat", mode="before")
    @classmethod
    def normalize_repeat(cls, value):
        return _normalize_repeat(value)


class TaskUpdate(RequestModel):
    """PUT body: target id plus the partial data"""
    id: UUID
    data: TaskUpdateData


class TaskResponse(CamelModel):
    """A stored task"""
    id: UUID
    task: str
    category_id: UUID = Field(..., alias="category")
    done: bool
    assigned_date: Optional[datetime] = None
    completed_at: Optional[datetime] = None
    repeat: Optional[List[str]] = None


class DayRolloverRequest(RequestModel):
    """PUT /api/tasks body"""
    type: Literal["dayPackup"]


class DayRolloverResult(CamelModel):
    """Outcome of a day rollover"""
    message: str
    day: date
    weekday: str
    already_performed: bool
    tasks_added: int
    trackers_closed: int
    created_task_ids: List[UUID] = []
    closed_tracker_ids: List[UUID] = []
