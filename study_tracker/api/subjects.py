"""
Subject management API endpoints
"""
from fastapi import APIRouter, Depends, Query
from typing import Literal, Optional
from uuid import UUID
import logging

from study_tracker.api.deps import get_store, partial_update
from study_tracker.models import Subject
from study_tracker.schemas.common import MessageResponse
from study_tracker.schemas.subject import SubjectCreate, SubjectResponse, SubjectUpdate
from study_tracker.services import projector
from study_tracker.services.aggregation_service import SUBJECT_ORDER, aggregation_service
from study_tracker.services.entity_store import EntityStore

router = APIRouter(prefix="/api/subjects", tags=["subjects"])
logger = logging.getLogger(__name__)


@router.post("", response_model=SubjectResponse, status_code=201)
async def create_subject(
    subject: SubjectCreate,
    store: EntityStore = Depends(get_store)
):
    """Create a subject"""
    record = store.insert(Subject, subject.model_dump())
    logger.info(f"Subject created: {record.id}")
    return projector.subject(record)


@router.get("")
async def get_subjects(
    id: Optional[UUID] = None,
    fetch_type: Optional[Literal["progress"]] = Query(None, alias="type"),
    store: EntityStore = Depends(get_store)
):
    """
    Retrieve subject(s)

    - ``?id=`` returns one subject (404 if unknown)
    - ``?type=progress`` returns chapter completion and the current chapter per subject
    - otherwise every subject sorted by standard then name
    """
    if id is not None:
        return projector.subject(store.find_by_id(Subject, id))

    if fetch_type == "progress":
        return aggregation_service.compute_subject_progress(store)

    return [projector.subject(s) for s in store.find(Subject, order_by=SUBJECT_ORDER)]


@router.put("", response_model=SubjectResponse)
async def update_subject(
    body: SubjectUpdate,
    store: EntityStore = Depends(get_store)
):
    """Replace the given fields of a subject"""
    record = store.update_by_id(Subject, body.id, partial_update(body.data))
    return projector.subject(record)


@router.delete("", response_model=MessageResponse)
async def delete_subject(
    id: UUID,
    store: EntityStore = Depends(get_store)
):
    """Delete a subject together with its chapters and their topics"""
    store.delete_by_id(Subject, id)
    logger.info(f"Subject deleted: {id}")
    return MessageResponse(message="Subject deleted successfully")
