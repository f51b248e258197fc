"""
Pydantic schemas for subject requests and responses
"""
from pydantic import Field
from typing import Optional
from uuid import UUID
from datetime import datetime

from study_tracker.schemas.common import CamelModel, RequestModel


class SubjectCreate(RequestModel):
    """Schema for creating a subject"""
    name: str = Field(..., min_length=3, max_length=255, description="Subject name")
    standard: str = Field(..., min_length=1, max_length=50, description="Class/grade label")


class SubjectUpdateData(RequestModel):
    """Fields of a subject that may be replaced"""
    name: Optional[str] = Field(None, min_length=3, max_length=255)
    standard: Optional[str] = Field(None, min_length=1, max_length=50)


class SubjectUpdate(RequestModel):
    """PUT body: target id plus the partial data"""
    id: UUID
    data: SubjectUpdateData


class SubjectResponse(CamelModel):
    """A stored subject"""
    id: UUID
    name: str
    standard: str
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None


class SubjectRef(CamelModel):
    """Subject fields embedded in chapter views"""
    id: UUID
    name: str
    standard: str
