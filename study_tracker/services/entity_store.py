"""
Entity store - generic CRUD and aggregate access over the SQLAlchemy session
"""
import logging
from contextlib import contextmanager
from typing import Any, Dict, Iterable, Iterator, List, Optional
from uuid import UUID

from sqlalchemy import exists, select
from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.orm import Session

from study_tracker.exceptions import ConflictError, NotFoundError, StoreError

logger = logging.getLogger(__name__)

# Display names used in "<entity> not found" messages
ENTITY_NAMES = {
    "subjects": "Subject",
    "chapters": "Chapter",
    "topics": "Topic",
    "task_categories": "Task category",
    "tasks": "Task",
    "task_trackers": "Task tracker",
    "day_rollovers": "Day rollover",
}


def entity_name(model) -> str:
    return ENTITY_NAMES.get(model.__tablename__, model.__name__)


class EntityStore:
    """
    Collection-style access to the entity tables

    Every write commits on its own unless it runs inside ``transaction()``,
    in which case the whole block commits (or rolls back) once.
    Storage failures are rolled back and re-raised as ``StoreError``;
    integrity violations as ``ConflictError``.
    """

    def __init__(self, session: Session):
        self.session = session
        self._in_transaction = False

    # ------------------------------------------------------------------
    # Reads
    # ------------------------------------------------------------------

    def find(self, model, *criteria, order_by: Iterable = ()) -> List[Any]:
        stmt = select(model).where(*criteria).order_by(*order_by)
        with self._guard(f"find {model.__tablename__}"):
            return list(self.session.scalars(stmt).all())

    def get(self, model, record_id: UUID) -> Optional[Any]:
        """Return the record or None"""
        with self._guard(f"get {model.__tablename__}"):
            return self.session.get(model, record_id)

    def find_by_id(self, model, record_id: UUID) -> Any:
        record = self.get(model, record_id)
        if record is None:
            raise NotFoundError.for_entity(entity_name(model))
        return record

    def exists(self, model, *criteria) -> bool:
        stmt = select(exists().where(*criteria))
        with self._guard(f"exists {model.__tablename__}"):
            return bool(self.session.scalar(stmt))

    def aggregate(self, statement) -> List[Any]:
        """Run a composed select (joins, GROUP BY, aggregates) and return its rows"""
        with self._guard("aggregate"):
            return list(self.session.execute(statement).all())

    # ------------------------------------------------------------------
    # Writes
    # ------------------------------------------------------------------

    def insert(self, model, data: Dict[str, Any]) -> Any:
        record = model(**data)
        with self._guard(f"insert {model.__tablename__}"):
            self.session.add(record)
            self._flush_or_commit(record)
        return record

    def update_by_id(self, model, record_id: UUID, partial: Dict[str, Any]) -> Any:
        record = self.find_by_id(model, record_id)
        with self._guard(f"update {model.__tablename__}"):
            for field, value in partial.items():
                setattr(record, field, value)
            self._flush_or_commit(record)
        return record

    def delete_by_id(self, model, record_id: UUID) -> Any:
        record = self.find_by_id(model, record_id)
        with self._guard(f"delete {model.__tablename__}"):
            self.session.delete(record)
            self._flush_or_commit(None)
        return record

    @contextmanager
    def transaction(self) -> Iterator["EntityStore"]:
        """Group several writes into one commit"""
        if self._in_transaction:
            yield self
            return

        self._in_transaction = True
        try:
            yield self
            with self._guard("commit"):
                self.session.commit()
        except Exception:
            self.session.rollback()
            raise
        finally:
            self._in_transaction = False

    # ------------------------------------------------------------------
    # Internals
    # ------------------------------------------------------------------

    def _flush_or_commit(self, record) -> None:
        if self._in_transaction:
            self.session.flush()
            return
        self.session.commit()
        if record is not None:
            self.session.refresh(record)

    @contextmanager
    def _guard(self, operation: str) -> Iterator[None]:
        try:
            yield
        except IntegrityError as e:
            self.session.rollback()
            logger.warning(f"Integrity violation during {operation}: {str(e.orig)}")
            raise ConflictError(f"Conflicting write during {operation}") from e
        except SQLAlchemyError as e:
            self.session.rollback()
            logger.error(f"Store failure during {operation}: {str(e)}")
            raise StoreError(f"Store operation failed: {operation}") from e
