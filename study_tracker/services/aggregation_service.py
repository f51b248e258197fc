"""
Aggregation service - query-time joins and progress rollups
"""
import logging
from collections import OrderedDict
from datetime import date
from typing import Any, Callable, Dict, Iterable, List, Optional
from uuid import UUID

from sqlalchemy import case, func, select

from study_tracker.models import Chapter, Subject, Task, TaskTracker, Topic
from study_tracker.models.task_tracker import STATUS_CURRENT, STATUS_PAST
from study_tracker.schemas.catalog import CatalogSubject, SubjectProgress
from study_tracker.schemas.chapter import ChapterProgress, ChapterWithSubject, SubjectWithChapters
from study_tracker.schemas.tracker import TrackerSummary, WeeklySummary
from study_tracker.services import projector
from study_tracker.services.completion_service import completion_service
from study_tracker.services.entity_store import EntityStore

logger = logging.getLogger(__name__)

SUMMARY_STATUSES = ("current", "past", "all")

# Stable orderings: the stated key first, then creation time and id
SUBJECT_ORDER = (Subject.standard, Subject.name, Subject.created_at, Subject.id)
CHAPTER_ORDER = (Chapter.seq_number, Chapter.created_at, Chapter.id)
TOPIC_ORDER = (Topic.seq_number, Topic.created_at, Topic.id)


def _count_where(condition):
    """SUM(CASE WHEN condition THEN 1 ELSE 0 END), never NULL"""
    return func.coalesce(func.sum(case((condition, 1), else_=0)), 0)


def _group_by(records: Iterable[Any], key: Callable[[Any], Any]) -> Dict[Any, List[Any]]:
    """Bucket records by key, keeping their incoming order"""
    groups: Dict[Any, List[Any]] = OrderedDict()
    for record in records:
        groups.setdefault(key(record), []).append(record)
    return groups


def _day_key(value) -> Optional[str]:
    """Normalize a SQL DATE() result (date on PostgreSQL, text on SQLite)"""
    if value is None:
        return None
    if isinstance(value, date):
        return value.isoformat()
    return str(value)[:10]


class AggregationService:
    """Builds nested read models from the normalized entity tables"""

    # ------------------------------------------------------------------
    # Curriculum views
    # ------------------------------------------------------------------

    def list_chapters_with_subject(self, store: EntityStore) -> List[ChapterWithSubject]:
        """
        Every chapter with its subject embedded

        Ordered by owning subject (creation order) then seq_number.
        Chapters whose subject is missing carry ``subject=None``.
        """
        stmt = (
            select(Chapter, Subject)
            .outerjoin(Subject, Chapter.subject_id == Subject.id)
            .order_by(
                Subject.created_at.asc().nulls_last(),
                Chapter.subject_id,
                *CHAPTER_ORDER,
            )
        )
        rows = store.aggregate(stmt)
        return [projector.chapter_with_subject(chapter, subject) for chapter, subject in rows]

    def list_subjects_with_chapters(self, store: EntityStore) -> List[SubjectWithChapters]:
        """Every subject (by standard, name) with its chapters sorted by seq_number"""
        subjects = store.find(Subject, order_by=SUBJECT_ORDER)
        chapters = _group_by(
            store.find(Chapter, order_by=CHAPTER_ORDER),
            lambda c: c.subject_id,
        )
        return [
            projector.subject_with_chapters(subject, chapters.get(subject.id, []))
            for subject in subjects
        ]

    def build_nested_catalog(self, store: EntityStore) -> List[CatalogSubject]:
        """
        Subject → Chapters → Topics

        Subjects sorted by (standard, name), chapters and topics by
        seq_number. Subjects without chapters are included with an
        empty list.
        """
        subjects = store.find(Subject, order_by=SUBJECT_ORDER)
        chapters = _group_by(
            store.find(Chapter, order_by=CHAPTER_ORDER),
            lambda c: c.subject_id,
        )
        topics = _group_by(
            store.find(Topic, order_by=TOPIC_ORDER),
            lambda t: t.chapter_id,
        )

        catalog = [
            projector.catalog_subject(subject, chapters.get(subject.id, []), topics)
            for subject in subjects
        ]
        logger.debug(f"Catalog built: {len(catalog)} subjects")
        return catalog

    # ------------------------------------------------------------------
    # Progress rollups
    # ------------------------------------------------------------------

    def compute_chapter_progress(self, store: EntityStore, chapter_id: UUID) -> ChapterProgress:
        """
        Topic completion for one chapter

        Raises:
            NotFoundError: unknown chapter
        """
        chapter = store.find_by_id(Chapter, chapter_id)

        stmt = select(
            func.count(Topic.id),
            _count_where(Topic.done.is_(True)),
        ).where(Topic.chapter_id == chapter_id)
        total, completed = store.aggregate(stmt)[0]

        return projector.chapter_progress(
            chapter,
            total_topics=int(total),
            total_completed_topics=int(completed),
            percent_completed=completion_service.percent(int(completed), int(total)),
        )

    def compute_subject_progress(self, store: EntityStore) -> List[SubjectProgress]:
        """
        Per-subject chapter completion and current-chapter pointer

        Returns one entry per subject, ordered by (standard, name).
        """
        subjects = store.find(Subject, order_by=SUBJECT_ORDER)
        chapters = _group_by(
            store.find(Chapter, order_by=CHAPTER_ORDER),
            lambda c: c.subject_id,
        )

        counts_stmt = (
            select(
                Chapter.subject_id,
                func.count(Chapter.id),
                _count_where(Chapter.done.is_(True)),
                _count_where(Chapter.selection_diary.is_(True)),
            )
            .group_by(Chapter.subject_id)
        )
        counts = {
            subject_id: (int(total), int(done), int(diary))
            for subject_id, total, done, diary in store.aggregate(counts_stmt)
        }

        pointers = {
            subject.id: completion_service.current_chapter(chapters.get(subject.id, []))
            for subject in subjects
        }
        current_ids = [curr.id for _, curr in pointers.values() if curr is not None]
        current_topics = _group_by(
            store.find(
                Topic,
                Topic.chapter_id.in_(current_ids),
                order_by=(Topic.name, Topic.seq_number, Topic.id),
            ) if current_ids else [],
            lambda t: t.chapter_id,
        )

        result = []
        for subject in subjects:
            total, done, diary = counts.get(subject.id, (0, 0, 0))
            prev_chapter, curr_chapter = pointers[subject.id]
            result.append(
                projector.subject_progress(
                    subject,
                    chapters.get(subject.id, []),
                    totals={"chapters": total, "completed": done, "selection_diary": diary},
                    percents={
                        "completed": completion_service.percent(done, total),
                        "selection_diary": completion_service.percent(diary, total),
                    },
                    prev_chapter=prev_chapter,
                    curr_chapter=curr_chapter,
                    curr_chapter_topics=current_topics.get(curr_chapter.id, []) if curr_chapter else [],
                )
            )
        return result

    # ------------------------------------------------------------------
    # Task tracker
    # ------------------------------------------------------------------

    def compute_task_tracker_summary(self, store: EntityStore, status: str):
        """
        Tracker buckets with assigned/done counts and points

        Args:
            store: Entity store
            status: "current", "past" or "all"

        Returns:
            - current: a single TrackerSummary over every current row
            - past/all: one TrackerSummary per calendar day, ascending
        """
        if status not in SUMMARY_STATUSES:
            raise ValueError(f"Unsupported tracker status: {status}")

        if status == STATUS_CURRENT:
            return self._current_bucket(store)
        return self._daily_buckets(store, status)

    def compute_weekly_summary(self, store: EntityStore) -> List[WeeklySummary]:
        """Past day buckets grouped by ISO week"""
        days = self._daily_buckets(store, STATUS_PAST)
        return projector.weekly_summaries(days, completion_service.percent)

    def _current_bucket(self, store: EntityStore) -> TrackerSummary:
        current = TaskTracker.status == STATUS_CURRENT

        counts_stmt = (
            select(
                func.count(TaskTracker.id),
                _count_where(Task.done.is_(True)),
                func.min(func.date(TaskTracker.date)),
            )
            .select_from(TaskTracker)
            .outerjoin(Task, TaskTracker.task_id == Task.id)
            .where(current)
        )
        assigned, done, first_day = store.aggregate(counts_stmt)[0]

        details_stmt = (
            select(Task)
            .join(TaskTracker, TaskTracker.task_id == Task.id)
            .where(current)
            .order_by(TaskTracker.date, TaskTracker.created_at, TaskTracker.id)
        )
        tasks = [task for (task,) in store.aggregate(details_stmt)]

        assigned, done = int(assigned), int(done)
        return projector.tracker_summary(
            day=_day_key(first_day),
            tasks=tasks,
            total_task_assigned=assigned,
            total_task_done=done,
            points=completion_service.percent(done, assigned),
        )

    def _daily_buckets(self, store: EntityStore, status: str) -> List[TrackerSummary]:
        day = func.date(TaskTracker.date)
        criteria = [TaskTracker.status == status] if status != "all" else []

        counts_stmt = (
            select(
                day.label("day"),
                func.count(TaskTracker.id),
                _count_where(Task.done.is_(True)),
            )
            .select_from(TaskTracker)
            .outerjoin(Task, TaskTracker.task_id == Task.id)
            .where(*criteria)
            .group_by(day)
            .order_by(day)
        )
        buckets = [
            (_day_key(key), int(assigned), int(done))
            for key, assigned, done in store.aggregate(counts_stmt)
        ]

        details_stmt = (
            select(day.label("day"), Task)
            .select_from(TaskTracker)
            .join(Task, TaskTracker.task_id == Task.id)
            .where(*criteria)
            .order_by(TaskTracker.date, TaskTracker.created_at, TaskTracker.id)
        )
        details = _group_by(store.aggregate(details_stmt), lambda row: _day_key(row[0]))

        return [
            projector.tracker_summary(
                day=key,
                tasks=[task for _, task in details.get(key, [])],
                total_task_assigned=assigned,
                total_task_done=done,
                points=completion_service.percent(done, assigned),
            )
            for key, assigned, done in buckets
        ]


# Global instance
aggregation_service = AggregationService()
