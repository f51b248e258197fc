"""
Shared FastAPI dependencies for the routers
"""
from typing import Any, Dict, Iterable

from fastapi import Depends, Request
from fastapi.exceptions import RequestValidationError
from pydantic import BaseModel
from sqlalchemy.orm import Session

from study_tracker.config import Settings
from study_tracker.database import get_db
from study_tracker.services.entity_store import EntityStore
from study_tracker.utils.lock import RolloverLock


def get_store(db: Session = Depends(get_db)) -> EntityStore:
    return EntityStore(db)


def get_settings(request: Request) -> Settings:
    return request.app.state.settings


def get_rollover_lock(request: Request) -> RolloverLock:
    return request.app.state.rollover_lock


def partial_update(data: BaseModel, nullable: Iterable[str] = ()) -> Dict[str, Any]:
    """
    Fields the client actually sent, keyed by attribute name

    Raises:
        RequestValidationError: an explicit null for a field not listed
            in ``nullable``
    """
    nullable = set(nullable)
    changes = data.model_dump(exclude_unset=True)

    errors = [
        {
            "loc": ("body", "data", type(data).model_fields[field].alias or field),
            "msg": "Field may not be null",
            "type": "null_not_allowed",
        }
        for field, value in changes.items()
        if value is None and field not in nullable
    ]
    if errors:
        raise RequestValidationError(errors)

    return changes
