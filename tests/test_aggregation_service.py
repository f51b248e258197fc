from datetime import datetime, timezone
import uuid

import pytest

from study_tracker.exceptions import NotFoundError
from study_tracker.services.aggregation_service import AggregationService


@pytest.fixture
def service():
    return AggregationService()


def _at(day, hour=9):
    return datetime(2024, 1, day, hour, 0, tzinfo=timezone.utc)


class TestChaptersWithSubject:
    def test_empty_store_gives_empty_list(self, service, store):
        assert service.list_chapters_with_subject(store) == []

    def test_grouped_by_subject_then_seq_number(self, service, factory):
        physics = factory.subject("Physics", "XI")
        maths = factory.subject("Maths", "XI")
        factory.chapter(maths, "Algebra", seq_number=1)
        factory.chapter(physics, "Dynamics", seq_number=2)
        factory.chapter(physics, "Kinematics", seq_number=1)

        result = service.list_chapters_with_subject(factory.store)

        assert [c.name for c in result] == ["Kinematics", "Dynamics", "Algebra"]
        assert result[0].subject.id == physics.id
        assert result[0].subject.name == "Physics"
        assert result[0].subject.standard == "XI"

    def test_flags_are_carried(self, service, factory):
        subject = factory.subject()
        factory.chapter(subject, dpp=True, pyq=True)

        chapter = service.list_chapters_with_subject(factory.store)[0]
        dumped = chapter.model_dump(by_alias=True)

        assert dumped["DPP"] is True
        assert dumped["PYQ"] is True
        assert dumped["Module"] is False
        assert dumped["seqNumber"] == 0


class TestSubjectsWithChapters:
    def test_chapter_list_holds_exactly_own_chapters_sorted(self, service, factory):
        physics = factory.subject("Physics", "XI")
        maths = factory.subject("Maths", "XI")
        factory.chapter(physics, "Waves", seq_number=3)
        factory.chapter(physics, "Kinematics", seq_number=1)
        factory.chapter(maths, "Algebra", seq_number=1)

        result = {s.id: s for s in service.list_subjects_with_chapters(factory.store)}

        assert [c.name for c in result[physics.id].chapter_list] == ["Kinematics", "Waves"]
        assert [c.name for c in result[maths.id].chapter_list] == ["Algebra"]

    def test_standard_xi_before_xii(self, service, factory):
        factory.subject("Physics", "XII")
        factory.subject("Physics", "XI")

        result = service.list_subjects_with_chapters(factory.store)

        assert [s.standard for s in result] == ["XI", "XII"]

    def test_subject_without_chapters_has_empty_list(self, service, factory):
        factory.subject()

        result = service.list_subjects_with_chapters(factory.store)

        assert result[0].chapter_list == []


class TestNestedCatalog:
    def test_chapters_sorted_by_seq_number_with_empty_topics(self, service, factory):
        subject = factory.subject("A subject", "XI")
        factory.chapter(subject, "Chapter X", seq_number=2)
        factory.chapter(subject, "Chapter Y", seq_number=1)

        catalog = service.build_nested_catalog(factory.store)

        assert len(catalog) == 1
        assert catalog[0].subject_id == subject.id
        assert catalog[0].name == "A subject"
        assert catalog[0].standard == "XI"
        assert [c.name for c in catalog[0].chapters] == ["Chapter Y", "Chapter X"]
        assert all(c.topics == [] for c in catalog[0].chapters)

    def test_subjects_sorted_by_standard_then_name(self, service, factory):
        factory.subject("Physics", "XII")
        factory.subject("Physics", "XI")
        factory.subject("Chemistry", "XI")

        catalog = service.build_nested_catalog(factory.store)

        assert [(s.standard, s.name) for s in catalog] == [
            ("XI", "Chemistry"), ("XI", "Physics"), ("XII", "Physics"),
        ]

    def test_topics_nested_and_sorted(self, service, factory):
        subject = factory.subject()
        chapter = factory.chapter(subject)
        factory.topic(chapter, "Relative motion", seq_number=2, mains=True)
        factory.topic(chapter, "Vectors", seq_number=1, boards=True)

        topics = service.build_nested_catalog(factory.store)[0].chapters[0].topics

        assert [t.name for t in topics] == ["Vectors", "Relative motion"]
        assert topics[0].boards is True
        assert topics[1].mains is True


class TestChapterProgress:
    def test_zero_topics_is_zero_percent(self, service, factory):
        chapter = factory.chapter(factory.subject())

        progress = service.compute_chapter_progress(factory.store, chapter.id)

        assert progress.total_topics == 0
        assert progress.total_completed_topics == 0
        assert progress.percent_completed == 0

    def test_counts_done_topics(self, service, factory):
        chapter = factory.chapter(factory.subject())
        factory.topic(chapter, "Topic one", done=True)
        factory.topic(chapter, "Topic two")
        factory.topic(chapter, "Topic three")
        other = factory.chapter(factory.subject("Maths"))
        factory.topic(other, "Elsewhere", done=True)

        progress = service.compute_chapter_progress(factory.store, chapter.id)

        assert progress.total_topics == 3
        assert progress.total_completed_topics == 1
        assert progress.percent_completed == 33.33
        assert 0 <= progress.percent_completed <= 100

    def test_unknown_chapter(self, service, store):
        with pytest.raises(NotFoundError):
            service.compute_chapter_progress(store, uuid.uuid4())


class TestSubjectProgress:
    def test_current_chapter_follows_last_completed(self, service, factory):
        subject = factory.subject()
        factory.chapter(subject, "One", seq_number=1, done=True, selection_diary=True)
        factory.chapter(subject, "Two", seq_number=2, done=True)
        three = factory.chapter(subject, "Three", seq_number=3)
        factory.chapter(subject, "Four", seq_number=4)
        factory.topic(three, "Zeta")
        factory.topic(three, "Alpha")

        progress = service.compute_subject_progress(factory.store)[0]

        assert progress.total_chapters == 4
        assert progress.total_completed_chapters == 2
        assert progress.total_completed_selection_diary_chapters == 1
        assert progress.percent_completed == 50.0
        assert progress.percent_selection_diary_completed == 25.0
        assert progress.prev_chapter.name == "Two"
        assert progress.curr_chapter.name == "Three"
        assert [t.name for t in progress.curr_chapter_topics] == ["Alpha", "Zeta"]

    def test_subject_without_chapters(self, service, factory):
        factory.subject()

        progress = service.compute_subject_progress(factory.store)[0]

        assert progress.total_chapters == 0
        assert progress.percent_completed == 0
        assert progress.prev_chapter is None
        assert progress.curr_chapter is None
        assert progress.curr_chapter_topics == []


class TestTaskTrackerSummary:
    def test_current_bucket_counts_and_points(self, service, factory):
        category = factory.category()
        for done in (True, True, False, False):
            task = factory.task(category, done=done)
            factory.tracker(task, date=_at(1))

        summary = service.compute_task_tracker_summary(factory.store, "current")

        assert summary.total_task_assigned == 4
        assert summary.total_task_done == 2
        assert summary.points == 50
        assert summary.day == "2024-01-01"
        assert len(summary.task_details) == 4

    def test_current_ignores_past_rows(self, service, factory):
        category = factory.category()
        factory.tracker(factory.task(category, done=True), date=_at(1), status="past")
        factory.tracker(factory.task(category), date=_at(2))

        summary = service.compute_task_tracker_summary(factory.store, "current")

        assert summary.total_task_assigned == 1
        assert summary.total_task_done == 0
        assert summary.points == 0

    def test_no_current_rows_gives_zero_summary(self, service, store):
        summary = service.compute_task_tracker_summary(store, "current")

        assert summary.day is None
        assert summary.total_task_assigned == 0
        assert summary.points == 0
        assert summary.task_details == []

    def test_past_grouped_per_day_ascending(self, service, factory):
        category = factory.category()
        factory.tracker(factory.task(category, done=True), date=_at(3), status="past")
        factory.tracker(factory.task(category, done=True), date=_at(1, 7), status="past")
        factory.tracker(factory.task(category), date=_at(1, 20), status="past")
        factory.tracker(factory.task(category), date=_at(4))

        days = service.compute_task_tracker_summary(factory.store, "past")

        assert [d.day for d in days] == ["2024-01-01", "2024-01-03"]
        assert (days[0].total_task_assigned, days[0].total_task_done, days[0].points) == (2, 1, 50.0)
        assert (days[1].total_task_assigned, days[1].total_task_done, days[1].points) == (1, 1, 100.0)
        assert len(days[0].task_details) == 2

    def test_all_includes_current_rows(self, service, factory):
        category = factory.category()
        factory.tracker(factory.task(category), date=_at(1), status="past")
        factory.tracker(factory.task(category), date=_at(2))

        days = service.compute_task_tracker_summary(factory.store, "all")

        assert [d.day for d in days] == ["2024-01-01", "2024-01-02"]

    def test_unknown_status(self, service, store):
        with pytest.raises(ValueError):
            service.compute_task_tracker_summary(store, "weekly")


class TestWeeklySummary:
    def test_days_grouped_by_iso_week(self, service, factory):
        category = factory.category()
        factory.tracker(factory.task(category, done=True), date=_at(1), status="past")
        factory.tracker(factory.task(category), date=_at(3), status="past")
        factory.tracker(factory.task(category, done=True), date=_at(8), status="past")

        weeks = service.compute_weekly_summary(factory.store)

        assert [(w.year, w.week) for w in weeks] == [(2024, 1), (2024, 2)]
        first = weeks[0]
        assert [d.day_name for d in first.weekly_breakdown] == ["Monday", "Wednesday"]
        assert first.total_tasks_assigned_weekly == 2
        assert first.total_tasks_done_weekly == 1
        assert first.weekly_points == 50.0
        assert weeks[1].weekly_points == 100.0
