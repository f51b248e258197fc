"""
Topic management API endpoints
"""
from fastapi import APIRouter, Depends
from typing import Optional
from uuid import UUID
import logging

from study_tracker.api.deps import get_store, partial_update
from study_tracker.models import Chapter, Topic
from study_tracker.schemas.common import MessageResponse
from study_tracker.schemas.topic import TopicCreate, TopicResponse, TopicUpdate
from study_tracker.services import projector
from study_tracker.services.aggregation_service import TOPIC_ORDER
from study_tracker.services.entity_store import EntityStore

router = APIRouter(prefix="/api/topics", tags=["topics"])
logger = logging.getLogger(__name__)


@router.post("", response_model=TopicResponse, status_code=201)
async def create_topic(
    topic: TopicCreate,
    store: EntityStore = Depends(get_store)
):
    """Create a topic under an existing chapter"""
    store.find_by_id(Chapter, topic.chapter_id)

    record = store.insert(Topic, topic.model_dump())
    logger.info(f"Topic created: {record.id}")
    return projector.topic(record)


@router.get("")
async def get_topics(
    id: Optional[UUID] = None,
    chapter: Optional[UUID] = None,
    store: EntityStore = Depends(get_store)
):
    """
    Retrieve topic(s)

    - ``?id=``: one topic
    - ``?chapter=``: topics of a chapter sorted by seqNumber
    - otherwise every topic in creation order
    """
    if id is not None:
        return projector.topic(store.find_by_id(Topic, id))

    if chapter is not None:
        records = store.find(Topic, Topic.chapter_id == chapter, order_by=TOPIC_ORDER)
    else:
        records = store.find(Topic, order_by=(Topic.created_at, Topic.id))
    return [projector.topic(t) for t in records]


@router.put("", response_model=TopicResponse)
async def update_topic(
    body: TopicUpdate,
    store: EntityStore = Depends(get_store)
):
    """Replace the given fields of a topic"""
    changes = partial_update(body.data)
    if "chapter_id" in changes:
        store.find_by_id(Chapter, changes["chapter_id"])

    record = store.update_by_id(Topic, body.id, changes)
    return projector.topic(record)


@router.delete("", response_model=MessageResponse)
async def delete_topic(
    id: UUID,
    store: EntityStore = Depends(get_store)
):
    """Delete a topic"""
    store.delete_by_id(Topic, id)
    logger.info(f"Topic deleted: {id}")
    return MessageResponse(message="Topic deleted successfully")
