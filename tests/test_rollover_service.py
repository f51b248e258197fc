from datetime import date, datetime, timezone
from unittest.mock import MagicMock

import pytest

from study_tracker.exceptions import ConflictError, StoreError
from study_tracker.models import DayRollover, Task, TaskTracker
from study_tracker.services.aggregation_service import aggregation_service
from study_tracker.services.rollover_service import RolloverService
from study_tracker.utils.lock import RolloverLock

MONDAY = datetime(2024, 1, 1, 6, 30, tzinfo=timezone.utc)
TUESDAY = datetime(2024, 1, 2, 6, 30, tzinfo=timezone.utc)


@pytest.fixture
def service():
    return RolloverService()


@pytest.fixture
def lock():
    return RolloverLock(None)


def test_monday_template_closes_current_and_seeds_one_task(service, lock, factory):
    store = factory.store
    category = factory.category()
    template = factory.task(category, task="Revise formulas", repeat=["monday"])
    old_row = factory.tracker(factory.task(category, task="Yesterday task"))

    result = service.run_day_rollover(store, lock, now=MONDAY)

    store.session.expire_all()
    assert result.already_performed is False
    assert result.weekday == "monday"
    assert result.day == date(2024, 1, 1)
    assert result.tasks_added == 1
    assert result.trackers_closed == 1

    assert store.find_by_id(TaskTracker, old_row.id).status == "past"

    new_task = store.find_by_id(Task, result.created_task_ids[0])
    assert new_task.id != template.id
    assert new_task.task == "Revise formulas"
    assert new_task.category_id == category.id
    assert new_task.done is False
    assert new_task.assigned_date is not None
    assert new_task.repeat is None

    current = store.find(TaskTracker, TaskTracker.status == "current")
    assert len(current) == 1
    assert current[0].task_id == new_task.id


def test_templates_for_other_weekdays_are_skipped(service, lock, factory):
    category = factory.category()
    factory.task(category, repeat=["tuesday", "friday"])

    result = service.run_day_rollover(factory.store, lock, now=MONDAY)

    assert result.tasks_added == 0
    assert len(factory.store.find(Task)) == 1


def test_second_run_on_same_day_is_a_no_op(service, lock, factory):
    category = factory.category()
    factory.task(category, repeat=["monday"])

    first = service.run_day_rollover(factory.store, lock, now=MONDAY)
    second = service.run_day_rollover(factory.store, lock, now=MONDAY.replace(hour=22))

    assert first.tasks_added == 1
    assert second.already_performed is True
    assert second.tasks_added == 0
    assert len(factory.store.find(Task)) == 2
    assert len(factory.store.find(DayRollover)) == 1


def test_next_day_runs_again(service, lock, factory):
    category = factory.category()
    factory.task(category, repeat=["monday", "tuesday"])

    service.run_day_rollover(factory.store, lock, now=MONDAY)
    result = service.run_day_rollover(factory.store, lock, now=TUESDAY)

    assert result.already_performed is False
    assert result.tasks_added == 1
    assert result.trackers_closed == 1


def test_marker_records_counts(service, lock, factory):
    category = factory.category()
    factory.task(category, repeat=["monday"])
    factory.tracker(factory.task(category))

    service.run_day_rollover(factory.store, lock, now=MONDAY)

    factory.store.session.expire_all()
    marker = factory.store.find(DayRollover)[0]
    assert marker.day == date(2024, 1, 1)
    assert marker.tasks_added == 1
    assert marker.trackers_closed == 1


def test_timezone_decides_the_weekday(service, lock, factory):
    category = factory.category()
    factory.task(category, repeat=["tuesday"])

    # Monday 20:00 UTC is already Tuesday in Kolkata
    late_monday = datetime(2024, 1, 1, 20, 0, tzinfo=timezone.utc)
    result = service.run_day_rollover(factory.store, lock, now=late_monday, tz_name="Asia/Kolkata")

    assert result.weekday == "tuesday"
    assert result.tasks_added == 1


def test_failure_rolls_back_the_whole_day(service, lock, factory, monkeypatch):
    store = factory.store
    category = factory.category()
    factory.task(category, repeat=["monday"])
    old_row = factory.tracker(factory.task(category))

    original_insert = store.insert

    def failing_insert(model, data):
        if model is TaskTracker:
            raise StoreError("Store operation failed: insert task_trackers")
        return original_insert(model, data)

    monkeypatch.setattr(store, "insert", failing_insert)

    with pytest.raises(StoreError):
        service.run_day_rollover(store, lock, now=MONDAY)

    store.session.expire_all()
    assert store.find(DayRollover) == []
    assert store.find_by_id(TaskTracker, old_row.id).status == "current"
    assert len(store.find(Task)) == 2


def test_busy_lock_skips_without_writing(service, factory):
    client = MagicMock()
    client.set.return_value = None
    busy_lock = RolloverLock(None, client=client)
    category = factory.category()
    factory.task(category, repeat=["monday"])

    result = service.run_day_rollover(factory.store, busy_lock, now=MONDAY)

    assert result.already_performed is True
    assert result.message == "Day rollover already in progress"
    assert factory.store.find(DayRollover) == []
    assert client.set.call_args.args[0] == "rollover:2024-01-01"
    assert client.set.call_args.kwargs == {"nx": True, "ex": 60}


def test_lock_is_released_after_run(service, factory):
    client = MagicMock()
    client.set.return_value = True
    held_lock = RolloverLock(None, client=client)

    service.run_day_rollover(factory.store, held_lock, now=MONDAY)

    client.eval.assert_called_once()
    assert client.eval.call_args[0][2] == "rollover:2024-01-01"


def test_new_rows_are_stamped_in_utc(service, lock, factory):
    store = factory.store
    category = factory.category()
    factory.task(category, repeat=["tuesday"])
    late_monday = datetime(2024, 1, 1, 20, 0, tzinfo=timezone.utc)

    result = service.run_day_rollover(store, lock, now=late_monday, tz_name="Asia/Kolkata")

    store.session.expire_all()
    new_task = store.find_by_id(Task, result.created_task_ids[0])
    row = store.find(TaskTracker, TaskTracker.task_id == new_task.id)[0]
    assert new_task.assigned_date == late_monday
    assert row.date == late_monday
    assert row.date.utcoffset().total_seconds() == 0


def test_same_moment_lands_in_one_day_bucket(service, lock, factory):
    store = factory.store
    category = factory.category()
    factory.task(category, repeat=["tuesday"])
    late_monday = datetime(2024, 1, 1, 20, 0, tzinfo=timezone.utc)

    service.run_day_rollover(store, lock, now=late_monday, tz_name="Asia/Kolkata")
    factory.tracker(factory.task(category, task="Manual entry"), date=late_monday)

    store.session.expire_all()
    days = aggregation_service.compute_task_tracker_summary(store, "all")
    assert [(d.day, d.total_task_assigned) for d in days] == [("2024-01-01", 2)]


def test_other_conflicts_are_not_reported_as_done(service, lock, factory, monkeypatch):
    store = factory.store
    category = factory.category()
    factory.task(category, repeat=["monday"])
    old_row = factory.tracker(factory.task(category))

    original_insert = store.insert

    def conflicting_insert(model, data):
        if model is Task:
            raise ConflictError("Conflicting write during insert tasks")
        return original_insert(model, data)

    monkeypatch.setattr(store, "insert", conflicting_insert)

    with pytest.raises(ConflictError):
        service.run_day_rollover(store, lock, now=MONDAY)

    store.session.expire_all()
    assert store.find(DayRollover) == []
    assert store.find_by_id(TaskTracker, old_row.id).status == "current"


def test_concurrent_marker_reports_already_performed(service, lock, factory, database, monkeypatch):
    store = factory.store
    category = factory.category()
    factory.task(category, repeat=["monday"])

    original_insert = store.insert

    def racing_insert(model, data):
        if model is DayRollover:
            # another worker commits the same day's marker first
            other = database.session()
            other.add(DayRollover(day=date(2024, 1, 1), weekday="monday"))
            other.commit()
            other.close()
        return original_insert(model, data)

    monkeypatch.setattr(store, "insert", racing_insert)

    result = service.run_day_rollover(store, lock, now=MONDAY)

    assert result.already_performed is True
    assert result.message == "Day pack-up already performed for this day"
    store.session.expire_all()
    assert len(store.find(DayRollover)) == 1
    assert len(store.find(Task)) == 1
