"""
Nested catalog endpoint
"""
from fastapi import APIRouter, Depends
from typing import List
import logging

from study_tracker.api.deps import get_store
from study_tracker.schemas.catalog import CatalogSubject
from study_tracker.services.aggregation_service import aggregation_service
from study_tracker.services.entity_store import EntityStore

router = APIRouter(prefix="/api", tags=["data"])
logger = logging.getLogger(__name__)


@router.get("/data", response_model=List[CatalogSubject])
async def get_catalog(store: EntityStore = Depends(get_store)):
    """
    Subject → Chapters → Topics in one document

    Subjects sorted by standard then name; chapters and topics by seqNumber.
    """
    return aggregation_service.build_nested_catalog(store)
