"""
Read-model projector - reshapes records and aggregate rows into response models

Pure functions, no I/O.
"""
from collections import OrderedDict
from datetime import date
from typing import Dict, Iterable, List, Optional, Sequence

from study_tracker.models import Chapter, Subject, Task, TaskCategory, TaskTracker, Topic
from study_tracker.models.chapter import CHAPTER_FLAGS
from study_tracker.schemas.catalog import CatalogChapter, CatalogSubject, SubjectProgress
from study_tracker.schemas.chapter import (
    ChapterProgress,
    ChapterResponse,
    ChapterSummary,
    ChapterWithSubject,
    SubjectWithChapters,
)
from study_tracker.schemas.subject import SubjectRef, SubjectResponse
from study_tracker.schemas.task import TaskCategoryResponse, TaskResponse
from study_tracker.schemas.topic import TopicResponse, TopicSummary
from study_tracker.schemas.tracker import (
    TrackedTask,
    TrackerResponse,
    TrackerSummary,
    WeeklyDay,
    WeeklySummary,
)

DAY_NAMES = ("Monday", "Tuesday", "Wednesday", "Thursday", "Friday", "Saturday", "Sunday")


def _flags(chapter: Chapter) -> Dict[str, bool]:
    return {flag: bool(getattr(chapter, flag)) for flag in CHAPTER_FLAGS}


# ---------------------------------------------------------------------------
# Plain records
# ---------------------------------------------------------------------------

def subject(record: Subject) -> SubjectResponse:
    return SubjectResponse(
        id=record.id,
        name=record.name,
        standard=record.standard,
        created_at=record.created_at,
        updated_at=record.updated_at,
    )


def subject_ref(record: Optional[Subject]) -> Optional[SubjectRef]:
    if record is None:
        return None
    return SubjectRef(id=record.id, name=record.name, standard=record.standard)


def chapter_summary(record: Chapter) -> ChapterSummary:
    return ChapterSummary(
        id=record.id,
        name=record.name,
        seq_number=record.seq_number,
        **_flags(record),
    )


def chapter(record: Chapter) -> ChapterResponse:
    return ChapterResponse(
        id=record.id,
        name=record.name,
        seq_number=record.seq_number,
        subject_id=record.subject_id,
        created_at=record.created_at,
        updated_at=record.updated_at,
        **_flags(record),
    )


def topic_summary(record: Topic) -> TopicSummary:
    return TopicSummary(
        id=record.id,
        name=record.name,
        seq_number=record.seq_number,
        done=record.done,
        boards=record.boards,
        mains=record.mains,
        advanced=record.advanced,
    )


def topic(record: Topic) -> TopicResponse:
    return TopicResponse(
        chapter_id=record.chapter_id,
        created_at=record.created_at,
        updated_at=record.updated_at,
        **topic_summary(record).model_dump(),
    )


def task_category(record: TaskCategory) -> TaskCategoryResponse:
    return TaskCategoryResponse(id=record.id, category=record.category)


def task(record: Task) -> TaskResponse:
    return TaskResponse(
        id=record.id,
        task=record.task,
        category_id=record.category_id,
        done=record.done,
        assigned_date=record.assigned_date,
        completed_at=record.completed_at,
        repeat=record.repeat,
    )


def tracker(record: TaskTracker) -> TrackerResponse:
    return TrackerResponse(
        id=record.id,
        date=record.date,
        task_id=record.task_id,
        status=record.status,
    )


def tracked_task(record: Task) -> TrackedTask:
    return TrackedTask(
        id=record.id,
        task=record.task,
        category_id=record.category_id,
        done=record.done,
        assigned_date=record.assigned_date,
        completed_at=record.completed_at,
    )


# ---------------------------------------------------------------------------
# Chapter / subject views
# ---------------------------------------------------------------------------

def chapter_with_subject(record: Chapter, owner: Optional[Subject]) -> ChapterWithSubject:
    return ChapterWithSubject(
        id=record.id,
        name=record.name,
        seq_number=record.seq_number,
        subject=subject_ref(owner),
        **_flags(record),
    )


def subject_with_chapters(record: Subject, chapters: Sequence[Chapter]) -> SubjectWithChapters:
    return SubjectWithChapters(
        id=record.id,
        name=record.name,
        standard=record.standard,
        chapter_list=[chapter_summary(c) for c in chapters],
    )


def catalog_subject(
    record: Subject,
    chapters: Sequence[Chapter],
    topics_by_chapter: Dict,
) -> CatalogSubject:
    return CatalogSubject(
        subject_id=record.id,
        name=record.name,
        standard=record.standard,
        chapters=[
            CatalogChapter(
                topics=[topic_summary(t) for t in topics_by_chapter.get(c.id, [])],
                **chapter_summary(c).model_dump(),
            )
            for c in chapters
        ],
    )


def chapter_progress(
    record: Chapter,
    total_topics: int,
    total_completed_topics: int,
    percent_completed: float,
) -> ChapterProgress:
    return ChapterProgress(
        chapter_id=record.id,
        name=record.name,
        total_topics=total_topics,
        total_completed_topics=total_completed_topics,
        percent_completed=percent_completed,
    )


def subject_progress(
    record: Subject,
    chapters: Sequence[Chapter],
    totals: Dict[str, int],
    percents: Dict[str, float],
    prev_chapter: Optional[Chapter],
    curr_chapter: Optional[Chapter],
    curr_chapter_topics: Sequence[Topic],
) -> SubjectProgress:
    return SubjectProgress(
        id=record.id,
        name=record.name,
        standard=record.standard,
        chapters=[chapter_summary(c) for c in chapters],
        total_chapters=totals["chapters"],
        total_completed_chapters=totals["completed"],
        total_completed_selection_diary_chapters=totals["selection_diary"],
        percent_completed=percents["completed"],
        percent_selection_diary_completed=percents["selection_diary"],
        prev_chapter=chapter_summary(prev_chapter) if prev_chapter else None,
        curr_chapter=chapter_summary(curr_chapter) if curr_chapter else None,
        curr_chapter_topics=[topic_summary(t) for t in curr_chapter_topics],
    )


# ---------------------------------------------------------------------------
# Tracker summaries
# ---------------------------------------------------------------------------

def tracker_summary(
    day: Optional[str],
    tasks: Iterable[Task],
    total_task_assigned: int,
    total_task_done: int,
    points: float,
) -> TrackerSummary:
    return TrackerSummary(
        day=day,
        task_details=[tracked_task(t) for t in tasks],
        total_task_assigned=total_task_assigned,
        total_task_done=total_task_done,
        points=points,
    )


def weekly_day(summary: TrackerSummary) -> WeeklyDay:
    day_name = DAY_NAMES[date.fromisoformat(summary.day).weekday()]
    return WeeklyDay(day_name=day_name, **summary.model_dump())


def weekly_summaries(
    days: Sequence[TrackerSummary],
    percent,
) -> List[WeeklySummary]:
    """
    Group day summaries by ISO (year, week)

    Args:
        days: Day summaries sorted ascending by day
        percent: Function computing the weekly points from (done, assigned)
    """
    weeks: "OrderedDict[tuple, List[TrackerSummary]]" = OrderedDict()
    for summary in days:
        iso = date.fromisoformat(summary.day).isocalendar()
        weeks.setdefault((iso[0], iso[1]), []).append(summary)

    result = []
    for (year, week), summaries in sorted(weeks.items()):
        assigned = sum(s.total_task_assigned for s in summaries)
        done = sum(s.total_task_done for s in summaries)
        result.append(
            WeeklySummary(
                year=year,
                week=week,
                weekly_breakdown=[weekly_day(s) for s in summaries],
                total_tasks_assigned_weekly=assigned,
                total_tasks_done_weekly=done,
                weekly_points=percent(done, assigned),
            )
        )
    return result
