"""
Chapter management API endpoints
"""
from fastapi import APIRouter, Depends, HTTPException, Query
from typing import Literal, Optional
from uuid import UUID
import logging

from study_tracker.api.deps import get_store, partial_update
from study_tracker.models import Chapter, Subject
from study_tracker.schemas.chapter import (
    ChapterCreate, ChapterProgress, ChapterResponse, ChapterUpdate
)
from study_tracker.schemas.common import MessageResponse
from study_tracker.services import projector
from study_tracker.services.aggregation_service import aggregation_service
from study_tracker.services.entity_store import EntityStore

router = APIRouter(prefix="/api/chapters", tags=["chapters"])
logger = logging.getLogger(__name__)


@router.post("", response_model=ChapterResponse, status_code=201)
async def create_chapter(
    chapter: ChapterCreate,
    store: EntityStore = Depends(get_store)
):
    """
    Create a chapter

    - Validates the payload
    - Verifies the owning subject exists (404 otherwise)
    """
    store.find_by_id(Subject, chapter.subject_id)

    record = store.insert(Chapter, chapter.model_dump())
    logger.info(f"Chapter created: {record.id}")
    return projector.chapter(record)


@router.get("")
async def get_chapters(
    id: Optional[UUID] = None,
    fetch_type: Optional[Literal["all", "subjectWise"]] = Query(None, alias="type"),
    store: EntityStore = Depends(get_store)
):
    """
    Retrieve chapter(s)

    - ``?id=``: one chapter
    - ``?type=all``: every chapter with its subject embedded
    - ``?type=subjectWise``: every subject with its chapter list
    """
    if id is not None:
        return projector.chapter(store.find_by_id(Chapter, id))

    if fetch_type == "all":
        return aggregation_service.list_chapters_with_subject(store)

    if fetch_type == "subjectWise":
        return aggregation_service.list_subjects_with_chapters(store)

    raise HTTPException(status_code=400, detail="Invalid request parameters")


@router.get("/progress", response_model=ChapterProgress)
async def get_chapter_progress(
    id: UUID,
    store: EntityStore = Depends(get_store)
):
    """
    Topic completion of a chapter

    Returns total topics, completed topics and the percentage
    (0 for a chapter without topics).
    """
    return aggregation_service.compute_chapter_progress(store, id)


@router.put("", response_model=ChapterResponse)
async def update_chapter(
    body: ChapterUpdate,
    store: EntityStore = Depends(get_store)
):
    """Replace the given fields of a chapter"""
    changes = partial_update(body.data)
    if "subject_id" in changes:
        store.find_by_id(Subject, changes["subject_id"])

    record = store.update_by_id(Chapter, body.id, changes)
    return projector.chapter(record)


@router.delete("", response_model=MessageResponse)
async def delete_chapter(
    id: UUID,
    store: EntityStore = Depends(get_store)
):
    """Delete a chapter together with its topics"""
    store.delete_by_id(Chapter, id)
    logger.info(f"Chapter deleted: {id}")
    return MessageResponse(message="Chapter deleted successfully")
