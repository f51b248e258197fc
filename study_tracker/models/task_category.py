"""
TaskCategory model - label grouping daily tasks
"""
from sqlalchemy import Column, String, Uuid
from study_tracker.database import Base, UTCDateTime, utcnow
import uuid


class TaskCategory(Base):
    """
    Task categories table
    """
    __tablename__ = "task_categories"

    id = Column(Uuid, primary_key=True, default=uuid.uuid4)
    category = Column(String(100), nullable=False)
    created_at = Column(UTCDateTime, default=utcnow)
    updated_at = Column(UTCDateTime, default=utcnow, onupdate=utcnow)

    def __repr__(self):
        return f"<TaskCategory(id={self.id}, category={self.category})>"
