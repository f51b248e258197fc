"""
Pydantic schemas for task tracker rows and their summaries
"""
from pydantic import Field
from typing import List, Literal, Optional
from uuid import UUID
from datetime import datetime

from study_tracker.schemas.common import CamelModel, RequestModel

TrackerStatus = Literal["current", "past"]


class TrackerCreate(RequestModel):
    """Schema for assigning a task to a day"""
    date: datetime
    task_id: UUID = Field(..., alias="task")
    status: TrackerStatus = "current"


class TrackerUpdateData(RequestModel):
    """Fields of a tracker row that may be replaced"""
    date: Optional[datetime] = None
    task_id: Optional[UUID] = Field(None, alias="task")
    status: Optional[TrackerStatus] = None


class TrackerUpdate(RequestModel):
    """PUT body: target id plus the partial data"""
    id: UUID
    data: TrackerUpdateData


class TrackerResponse(CamelModel):
    """A stored tracker row"""
    id: UUID
    date: datetime
    task_id: UUID = Field(..., alias="task")
    status: str


class TrackedTask(CamelModel):
    """Task joined onto a tracker row"""
    id: UUID
    task: str
    category_id: UUID = Field(..., alias="category")
    done: bool
    assigned_date: Optional[datetime] = None
    completed_at: Optional[datetime] = None


class TrackerSummary(CamelModel):
    """Counts and points of one tracker bucket"""
    day: Optional[str] = None
    task_details: List[TrackedTask]
    total_task_assigned: int
    total_task_done: int
    points: float


class WeeklyDay(TrackerSummary):
    """One day inside a weekly breakdown"""
    day_name: str


class WeeklySummary(CamelModel):
    """Past buckets grouped by ISO week"""
    year: int
    week: int
    weekly_breakdown: List[WeeklyDay]
    total_tasks_assigned_weekly: int
    total_tasks_done_weekly: int
    weekly_points: float
