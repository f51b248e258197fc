"""
Pydantic schemas for topic requests and responses
"""
from pydantic import Field
from typing import Optional
from uuid import UUID
from datetime import datetime

from study_tracker.schemas.common import CamelModel, RequestModel


class TopicCreate(RequestModel):
    """Schema for creating a topic"""
    name: str = Field(..., min_length=3, max_length=255, description="Topic name")
    chapter_id: UUID = Field(..., alias="chapter", description="Owning chapter id")
    seq_number: int = Field(0, ge=0)
    done: bool = False
    boards: bool = False
    mains: bool = False
    advanced: bool = False


class TopicUpdateData(RequestModel):
    """Fields of a topic that may be replaced"""
    name: Optional[str] = Field(None, min_length=3, max_length=255)
    chapter_id: Optional[UUID] = Field(None, alias="chapter")
    seq_number: Optional[int] = Field(None, ge=0)
    done: Optional[bool] = None
    boards: Optional[bool] = None
    mains: Optional[bool] = None
    advanced: Optional[bool] = None


class TopicUpdate(RequestModel):
    """PUT body: target id plus the partial data"""
    id: UUID
    data: TopicUpdateData


class TopicSummary(CamelModel):
    """Topic fields nested under a chapter"""
    id: UUID
    name: str
    seq_number: int
    done: bool
    boards: bool
    mains: bool
    advanced: bool


class TopicResponse(TopicSummary):
    """A stored topic"""
    chapter_id: UUID = Field(..., alias="chapter")
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None
