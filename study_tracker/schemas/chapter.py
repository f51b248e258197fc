"""
Pydantic schemas for chapter-related requests and responses
"""
from pydantic import Field
from typing import List, Optional
from uuid import UUID
from datetime import datetime

from study_tracker.schemas.common import CamelModel, RequestModel
from study_tracker.schemas.subject import SubjectRef


class ChapterFlags(CamelModel):
    """Resource/completion flags; the last four keep their original key spelling"""
    done: bool = False
    selection_diary: bool = False
    one_pager: bool = False
    dpp: bool = Field(False, alias="DPP")
    module: bool = Field(False, alias="Module")
    pyq: bool = Field(False, alias="PYQ")
    extra_material: bool = Field(False, alias="ExtraMaterial")


class ChapterCreate(ChapterFlags, RequestModel):
    """Schema for creating a chapter"""
    name: str = Field(..., min_length=3, max_length=255, description="Chapter name")
    subject_id: UUID = Field(..., alias="subject", description="Owning subject id")
    seq_number: int = Field(0, ge=0, description="Display order hint")


class ChapterUpdateData(RequestModel):
    """Fields of a chapter that may be replaced"""
    name: Optional[str] = Field(None, min_length=3, max_length=255)
    subject_id: Optional[UUID] = Field(None, alias="subject")
    seq_number: Optional[int] = Field(None, ge=0)
    done: Optional[bool] = None
    selection_diary: Optional[bool] = None
    one_pager: Optional[bool] = None
    dpp: Optional[bool] = Field(None, alias="DPP")
    module: Optional[bool] = Field(None, alias="Module")
    pyq: Optional[bool] = Field(None, alias="PYQ")
    extra_material: Optional[bool] = Field(None, alias="ExtraMaterial")


class ChapterUpdate(RequestModel):
    """PUT body: target id plus the partial data"""
    id: UUID
    data: ChapterUpdateData


class ChapterSummary(ChapterFlags):
    """Chapter fields nested under a subject"""
    id: UUID
    name: str
    seq_number: int


class ChapterResponse(ChapterSummary):
    """A stored chapter"""
    subject_id: UUID = Field(..., alias="subject")
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None


class ChapterWithSubject(ChapterSummary):
    """Chapter with its subject embedded (``type=all``)"""
    subject: Optional[SubjectRef] = None


class SubjectWithChapters(CamelModel):
    """Subject with its chapters (``type=subjectWise``)"""
    id: UUID
    name: str
    standard: str
    chapter_list: List[ChapterSummary]


class ChapterProgress(CamelModel):
    """Topic completion of one chapter"""
    chapter_id: UUID
    name: str
    total_topics: int
    total_completed_topics: int
    percent_completed: float
