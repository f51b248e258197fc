"""
DayRollover model - marker recording that a day's rollover already ran
"""
from sqlalchemy import Column, String, Integer, Date, Uuid
from study_tracker.database import Base, UTCDateTime, utcnow
import uuid


class DayRollover(Base):
    """
    Day rollovers table - unique per calendar day
    """
    __tablename__ = "day_rollovers"

    id = Column(Uuid, primary_key=True, default=uuid.uuid4)
    day = Column(Date, nullable=False, unique=True)
    weekday = Column(String(10), nullable=False)
    tasks_added = Column(Integer, nullable=False, default=0)
    trackers_closed = Column(Integer, nullable=False, default=0)
    created_at = Column(UTCDateTime, default=utcnow)

    def __repr__(self):
        return f"<DayRollover(day={self.day}, tasks_added={self.tasks_added})>"
