import os
from datetime import datetime, timedelta, timezone

import pytest
from fastapi.testclient import TestClient

# Test-mode runtime guards: no redis, no rate limiting, throwaway database
os.environ.setdefault("REDIS_ENABLED", "false")
os.environ.setdefault("RATE_LIMIT_ENABLED", "false")
os.environ.setdefault("DATABASE_URL", "sqlite://")

from study_tracker.config import Settings  # noqa: E402
from study_tracker.main import create_app  # noqa: E402
from study_tracker.models import (  # noqa: E402
    Chapter, Subject, Task, TaskCategory, TaskTracker, Topic
)
from study_tracker.services.entity_store import EntityStore  # noqa: E402

BASE_TIME = datetime(2024, 1, 1, 8, 0, tzinfo=timezone.utc)  # a Monday


@pytest.fixture
def settings(tmp_path):
    return Settings(
        DATABASE_URL=f"sqlite:///{tmp_path / 'tracker.db'}",
        REDIS_ENABLED=False,
        RATE_LIMIT_ENABLED=False,
        LOG_LEVEL="WARNING",
    )


@pytest.fixture
def app(settings):
    return create_app(settings)


@pytest.fixture
def client(app):
    with TestClient(app) as tc:
        yield tc


@pytest.fixture
def database(app):
    app.state.database.create_all()
    return app.state.database


@pytest.fixture
def store(database):
    session = database.session()
    yield EntityStore(session)
    session.close()


class Factory:
    """Inserts records with explicit, increasing creation times"""

    def __init__(self, store: EntityStore):
        self.store = store
        self._tick = 0

    def _created(self):
        self._tick += 1
        return BASE_TIME + timedelta(seconds=self._tick)

    def subject(self, name="Physics", standard="XI"):
        return self.store.insert(Subject, {
            "name": name, "standard": standard, "created_at": self._created(),
        })

    def chapter(self, subject, name="Kinematics", seq_number=0, **flags):
        return self.store.insert(Chapter, {
            "name": name, "subject_id": subject.id, "seq_number": seq_number,
            "created_at": self._created(), **flags,
        })

    def topic(self, chapter, name="Projectile motion", seq_number=0, **flags):
        return self.store.insert(Topic, {
            "name": name, "chapter_id": chapter.id, "seq_number": seq_number,
            "created_at": self._created(), **flags,
        })

    def category(self, category="Revision"):
        return self.store.insert(TaskCategory, {"category": category})

    def task(self, category, task="Solve DPP", done=False, repeat=None):
        return self.store.insert(Task, {
            "task": task, "category_id": category.id, "done": done, "repeat": repeat,
            "created_at": self._created(),
        })

    def tracker(self, task, date=BASE_TIME, status="current"):
        return self.store.insert(TaskTracker, {
            "date": date, "task_id": task.id, "status": status,
            "created_at": self._created(),
        })


@pytest.fixture
def factory(store):
    return Factory(store)
