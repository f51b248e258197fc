"""
Task, task category, task tracker and day rollover API endpoints
"""
from fastapi import APIRouter, Depends
from typing import List, Literal
from uuid import UUID
import logging

from study_tracker.api.deps import get_rollover_lock, get_settings, get_store, partial_update
from study_tracker.config import Settings
from study_tracker.database import utcnow
from study_tracker.exceptions import ConflictError
from study_tracker.models import Task, TaskCategory, TaskTracker
from study_tracker.schemas.common import MessageResponse
from study_tracker.schemas.task import (
    DayRolloverRequest, DayRolloverResult,
    TaskCategoryCreate, TaskCategoryResponse, TaskCategoryUpdate,
    TaskCreate, TaskResponse, TaskUpdate,
)
from study_tracker.schemas.tracker import TrackerCreate, TrackerResponse, TrackerUpdate
from study_tracker.services import projector
from study_tracker.services.aggregation_service import aggregation_service
from study_tracker.services.entity_store import EntityStore
from study_tracker.services.rollover_service import rollover_service
from study_tracker.utils.lock import RolloverLock

router = APIRouter(prefix="/api/tasks", tags=["tasks"])
logger = logging.getLogger(__name__)


# ---------------------------------------------------------------------------
# Day rollover
# ---------------------------------------------------------------------------

@router.put("", response_model=DayRolloverResult)
async def day_packup(
    body: DayRolloverRequest,
    store: EntityStore = Depends(get_store),
    lock: RolloverLock = Depends(get_rollover_lock),
    settings: Settings = Depends(get_settings)
):
    """
    Close today's tracker bucket and seed recurring tasks

    - Marks every current tracker row as past
    - Copies each task whose repeat list contains today's weekday
    - Runs at most once per day; later calls report ``alreadyPerformed``
    """
    return rollover_service.run_day_rollover(store, lock, tz_name=settings.TIMEZONE)


# ---------------------------------------------------------------------------
# Tasks
# ---------------------------------------------------------------------------

@router.post("/task", response_model=TaskResponse, status_code=201)
async def create_task(
    task: TaskCreate,
    store: EntityStore = Depends(get_store)
):
    """Create a task (a recurring template when ``repeat`` is set)"""
    store.find_by_id(TaskCategory, task.category_id)

    data = task.model_dump()
    if data["done"] and data["completed_at"] is None:
        data["completed_at"] = utcnow()

    record = store.insert(Task, data)
    logger.info(f"Task created: {record.id}")
    return projector.task(record)


@router.get("/task", response_model=List[TaskResponse])
async def get_tasks(store: EntityStore = Depends(get_store)):
    """Every task in creation order"""
    return [projector.task(t) for t in store.find(Task, order_by=(Task.created_at, Task.id))]


@router.put("/task", response_model=TaskResponse)
async def update_task(
    body: TaskUpdate,
    store: EntityStore = Depends(get_store)
):
    """
    Replace the given fields of a task

    Toggling ``done`` stamps or clears ``completedAt`` unless the client sends one.
    """
    changes = partial_update(body.data, nullable=("assigned_date", "completed_at", "repeat"))
    if "category_id" in changes:
        store.find_by_id(TaskCategory, changes["category_id"])
    if "done" in changes and "completed_at" not in changes:
        changes["completed_at"] = utcnow() if changes["done"] else None

    record = store.update_by_id(Task, body.id, changes)
    return projector.task(record)


@router.delete("/task", response_model=MessageResponse)
async def delete_task(
    id: UUID,
    store: EntityStore = Depends(get_store)
):
    """Delete a task and its tracker rows"""
    store.delete_by_id(Task, id)
    logger.info(f"Task deleted: {id}")
    return MessageResponse(message="Task deleted successfully")


# ---------------------------------------------------------------------------
# Tracker
# ---------------------------------------------------------------------------

@router.post("/tracker", response_model=TrackerResponse, status_code=201)
async def create_tracker_entry(
    entry: TrackerCreate,
    store: EntityStore = Depends(get_store)
):
    """Assign an existing task to a day"""
    store.find_by_id(Task, entry.task_id)

    record = store.insert(TaskTracker, entry.model_dump())
    return projector.tracker(record)


@router.get("/tracker")
async def get_tracker(
    status: Literal["current", "past", "weekly", "all"] = "all",
    store: EntityStore = Depends(get_store)
):
    """
    Tracker summaries

    - ``current``: one summary of today's bucket
    - ``past``: one summary per past day
    - ``weekly``: past days grouped by ISO week
    - ``all`` (default): one summary per day regardless of status
    """
    if status == "weekly":
        return aggregation_service.compute_weekly_summary(store)
    return aggregation_service.compute_task_tracker_summary(store, status)


@router.put("/tracker", response_model=TrackerResponse)
async def update_tracker_entry(
    body: TrackerUpdate,
    store: EntityStore = Depends(get_store)
):
    """Replace the given fields of a tracker row"""
    changes = partial_update(body.data)
    if "task_id" in changes:
        store.find_by_id(Task, changes["task_id"])

    record = store.update_by_id(TaskTracker, body.id, changes)
    return projector.tracker(record)


@router.delete("/tracker", response_model=MessageResponse)
async def delete_tracker_entry(
    id: UUID,
    store: EntityStore = Depends(get_store)
):
    """Delete a tracker row"""
    store.delete_by_id(TaskTracker, id)
    return MessageResponse(message="Task tracker entry deleted successfully")


# ---------------------------------------------------------------------------
# Categories
# ---------------------------------------------------------------------------

@router.post("/category", response_model=TaskCategoryResponse, status_code=201)
async def create_category(
    category: TaskCategoryCreate,
    store: EntityStore = Depends(get_store)
):
    """Create a task category"""
    record = store.insert(TaskCategory, category.model_dump())
    return projector.task_category(record)


@router.get("/category", response_model=List[TaskCategoryResponse])
async def get_categories(store: EntityStore = Depends(get_store)):
    """Every task category in creation order"""
    records = store.find(TaskCategory, order_by=(TaskCategory.created_at, TaskCategory.id))
    return [projector.task_category(c) for c in records]


@router.put("/category", response_model=TaskCategoryResponse)
async def update_category(
    body: TaskCategoryUpdate,
    store: EntityStore = Depends(get_store)
):
    """Rename a task category"""
    record = store.update_by_id(TaskCategory, body.id, partial_update(body.data))
    return projector.task_category(record)


@router.delete("/category", response_model=MessageResponse)
async def delete_category(
    id: UUID,
    store: EntityStore = Depends(get_store)
):
    """
    Delete a task category

    Refused with 409 while any task still uses it.
    """
    store.find_by_id(TaskCategory, id)
    if store.exists(Task, Task.category_id == id):
        raise ConflictError("Task category is still used by tasks")

    store.delete_by_id(TaskCategory, id)
    return MessageResponse(message="Task category deleted successfully")
