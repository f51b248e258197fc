import uuid

from study_tracker.schemas.chapter import ChapterCreate
from study_tracker.schemas.task import TaskCreate
from study_tracker.schemas.tracker import TrackerSummary
from study_tracker.services import projector
from study_tracker.services.completion_service import completion_service


def _day(day, assigned, done):
    return TrackerSummary(
        day=day,
        task_details=[],
        total_task_assigned=assigned,
        total_task_done=done,
        points=completion_service.percent(done, assigned),
    )


def test_chapter_response_uses_wire_names(factory):
    chapter = factory.chapter(factory.subject(), seq_number=4, extra_material=True, one_pager=True)

    body = projector.chapter(chapter).model_dump(by_alias=True)

    assert body["subject"] == chapter.subject_id
    assert body["seqNumber"] == 4
    assert body["ExtraMaterial"] is True
    assert body["onePager"] is True
    assert body["selectionDiary"] is False


def test_chapter_create_accepts_wire_names():
    subject_id = uuid.uuid4()
    chapter = ChapterCreate.model_validate({
        "name": "  Thermodynamics ",
        "subject": str(subject_id),
        "seqNumber": 3,
        "DPP": True,
    })

    assert chapter.name == "Thermodynamics"
    assert chapter.subject_id == subject_id
    assert chapter.dpp is True
    assert chapter.model_dump()["seq_number"] == 3


def test_task_repeat_is_normalized():
    task = TaskCreate.model_validate({
        "task": "Mock test",
        "category": str(uuid.uuid4()),
        "repeat": ["Monday", "", "monday", "friday"],
    })

    assert task.repeat == ["monday", "friday"]


def test_weekly_summaries_group_and_name_days():
    days = [
        _day("2024-01-06", 2, 1),  # Saturday, ISO week 1
        _day("2024-01-07", 2, 2),  # Sunday, ISO week 1
        _day("2024-01-08", 0, 0),  # Monday, ISO week 2
    ]

    weeks = projector.weekly_summaries(days, completion_service.percent)

    assert [(w.year, w.week) for w in weeks] == [(2024, 1), (2024, 2)]
    assert [d.day_name for d in weeks[0].weekly_breakdown] == ["Saturday", "Sunday"]
    assert weeks[0].total_tasks_assigned_weekly == 4
    assert weeks[0].total_tasks_done_weekly == 3
    assert weeks[0].weekly_points == 75.0
    assert weeks[1].weekly_points == 0


def test_tracker_summary_serializes_camel_case(factory):
    task = factory.task(factory.category(), done=True)

    body = projector.tracker_summary(
        day="2024-01-01",
        tasks=[task],
        total_task_assigned=1,
        total_task_done=1,
        points=100.0,
    ).model_dump(by_alias=True)

    assert body["totalTaskAssigned"] == 1
    assert body["totalTaskDone"] == 1
    assert body["taskDetails"][0]["category"] == task.category_id
