"""
Task model - a to-do item, optionally a recurring template
"""
from sqlalchemy import Column, Text, Boolean, ForeignKey, JSON, Uuid
from sqlalchemy.orm import relationship
from study_tracker.database import Base, UTCDateTime, utcnow
import uuid


class Task(Base):
    """
    Tasks table - rows with a non-empty ``repeat`` act as templates for the day rollover
    """
    __tablename__ = "tasks"

    id = Column(Uuid, primary_key=True, default=uuid.uuid4)
    task = Column(Text, nullable=False)
    category_id = Column(Uuid, ForeignKey("task_categories.id"), nullable=False, index=True)
    done = Column(Boolean, nullable=False, default=False)
    assigned_date = Column(UTCDateTime)
    completed_at = Column(UTCDateTime)
    repeat = Column(JSON(none_as_null=True))  # ["monday", "thursday"]
    created_at = Column(UTCDateTime, default=utcnow)
    updated_at = Column(UTCDateTime, default=utcnow, onupdate=utcnow)

    trackers = relationship(
        "TaskTracker",
        back_populates="task",
        cascade="all, delete-orphan",
    )

    def repeats_on(self, weekday: str) -> bool:
        return weekday in (self.repeat or [])

    def __repr__(self):
        return f"<Task(id={self.id}, task={self.task}, done={self.done})>"
