"""
Day rollover ("day packup") service
Closes the current tracker bucket and seeds today's recurring tasks
"""
import logging
from datetime import date, datetime, timezone
from typing import List, Optional
from uuid import UUID
from zoneinfo import ZoneInfo

from study_tracker.exceptions import ConflictError
from study_tracker.models import DayRollover, Task, TaskTracker
from study_tracker.models.task_tracker import STATUS_CURRENT, STATUS_PAST
from study_tracker.schemas.task import WEEKDAYS, DayRolloverResult
from study_tracker.services.entity_store import EntityStore
from study_tracker.utils.lock import RolloverLock

logger = logging.getLogger(__name__)


class RolloverService:
    """
    Day rollover in one transaction

    Steps (all inside ``store.transaction()``):
    1. Stop if a DayRollover marker exists for today
    2. Insert the marker (unique per day)
    3. Flip every ``current`` tracker row to ``past``
    4. For each task whose ``repeat`` contains today's weekday, create a
       fresh task and a ``current`` tracker row pointing at it

    The configured timezone only decides the calendar day and weekday;
    the new rows are stamped in UTC.

    Any failure rolls back the whole day. Concurrent callers are
    serialized by the redis lock when available and by the marker's
    unique constraint otherwise.
    """

    def resolve_now(self, now: Optional[datetime], tz_name: str) -> datetime:
        tz = ZoneInfo(tz_name)
        if now is None:
            return datetime.now(timezone.utc).astimezone(tz)
        if now.tzinfo is None:
            return now.replace(tzinfo=tz)
        return now.astimezone(tz)

    def run_day_rollover(
        self,
        store: EntityStore,
        lock: RolloverLock,
        now: Optional[datetime] = None,
        tz_name: str = "UTC"
    ) -> DayRolloverResult:
        """
        Perform today's rollover once

        Args:
            store: Entity store
            lock: Cross-process lock
            now: Override for the current time
            tz_name: IANA timezone deciding what "today" is

        Returns:
            DayRolloverResult; ``already_performed`` is True when the day
            was already rolled over (or another caller is doing it)
        """
        now = self.resolve_now(now, tz_name)
        day = now.date()
        weekday = WEEKDAYS[now.weekday()]

        logger.info(f"Day rollover requested: day={day} weekday={weekday}")

        with lock.hold(lock.generate_key(day.isoformat())) as owned:
            if not owned:
                return self._already_performed(day, weekday, "Day rollover already in progress")

            try:
                with store.transaction():
                    return self._perform(store, now, day, weekday)
            except ConflictError:
                # Only a concurrent marker for the same day counts as done
                if store.exists(DayRollover, DayRollover.day == day):
                    return self._already_performed(day, weekday)
                raise

    def _perform(
        self,
        store: EntityStore,
        now: datetime,
        day: date,
        weekday: str
    ) -> DayRolloverResult:
        if store.exists(DayRollover, DayRollover.day == day):
            return self._already_performed(day, weekday)

        marker = store.insert(DayRollover, {"day": day, "weekday": weekday})
        stamp = now.astimezone(timezone.utc)

        templates = [
            task for task in store.find(Task, order_by=(Task.created_at, Task.id))
            if task.repeats_on(weekday)
        ]

        current_rows = store.find(
            TaskTracker,
            TaskTracker.status == STATUS_CURRENT,
            order_by=(TaskTracker.date, TaskTracker.id),
        )
        closed_ids: List[UUID] = []
        for row in current_rows:
            store.update_by_id(TaskTracker, row.id, {"status": STATUS_PAST})
            closed_ids.append(row.id)

        created_ids: List[UUID] = []
        for template in templates:
            new_task = store.insert(Task, {
                "task": template.task,
                "category_id": template.category_id,
                "done": False,
                "assigned_date": stamp,
            })
            store.insert(TaskTracker, {
                "date": stamp,
                "task_id": new_task.id,
                "status": STATUS_CURRENT,
            })
            created_ids.append(new_task.id)

        store.update_by_id(DayRollover, marker.id, {
            "tasks_added": len(created_ids),
            "trackers_closed": len(closed_ids),
        })

        logger.info(
            f"Day rollover complete: day={day}, closed={len(closed_ids)}, "
            f"added={len(created_ids)}"
        )

        return DayRolloverResult(
            message="Day pack-up completed successfully",
            day=day,
            weekday=weekday,
            already_performed=False,
            tasks_added=len(created_ids),
            trackers_closed=len(closed_ids),
            created_task_ids=created_ids,
            closed_tracker_ids=closed_ids,
        )

    def _already_performed(
        self,
        day: date,
        weekday: str,
        message: str = "Day pack-up already performed for this day"
    ) -> DayRolloverResult:
        logger.info(f"Day rollover skipped: day={day} ({message})")
        return DayRolloverResult(
            message=message,
            day=day,
            weekday=weekday,
            already_performed=True,
            tasks_added=0,
            trackers_closed=0,
        )


# Global instance
rollover_service = RolloverService()
