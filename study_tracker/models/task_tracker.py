"""
TaskTracker model - per-day assignment record of a task
"""
from sqlalchemy import Column, String, ForeignKey, Uuid
from sqlalchemy.orm import relationship
from study_tracker.database import Base, UTCDateTime, utcnow
import uuid

STATUS_CURRENT = "current"
STATUS_PAST = "past"


class TaskTracker(Base):
    """
    Task tracker table - ``current`` rows form today's bucket, ``past`` rows are history
    """
    __tablename__ = "task_trackers"

    id = Column(Uuid, primary_key=True, default=uuid.uuid4)
    date = Column(UTCDateTime, nullable=False, index=True)
    task_id = Column(Uuid, ForeignKey("tasks.id"), nullable=False, index=True)
    status = Column(String(20), nullable=False, default=STATUS_CURRENT, index=True)
    created_at = Column(UTCDateTime, default=utcnow)
    updated_at = Column(UTCDateTime, default=utcnow, onupdate=utcnow)

    task = relationship("Task", back_populates="trackers")

    def __repr__(self):
        return f"<TaskTracker(id={self.id}, task_id={self.task_id}, status={self.status})>"
