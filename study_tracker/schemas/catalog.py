"""
Read models for the nested catalog and subject progress views
"""
from typing import List, Optional
from uuid import UUID

from study_tracker.schemas.common import CamelModel
from study_tracker.schemas.chapter import ChapterSummary
from study_tracker.schemas.topic import TopicSummary


class CatalogChapter(ChapterSummary):
    """Chapter with its topics"""
    topics: List[TopicSummary]


class CatalogSubject(CamelModel):
    """One subject of the Subject → Chapter → Topic catalog"""
    subject_id: UUID
    name: str
    standard: str
    chapters: List[CatalogChapter]


class SubjectProgress(CamelModel):
    """Chapter completion of one subject plus its current-chapter pointer"""
    id: UUID
    name: str
    standard: str
    chapters: List[ChapterSummary]
    total_chapters: int
    total_completed_chapters: int
    total_completed_selection_diary_chapters: int
    percent_completed: float
    percent_selection_diary_completed: float
    prev_chapter: Optional[ChapterSummary] = None
    curr_chapter: Optional[ChapterSummary] = None
    curr_chapter_topics: List[TopicSummary]
