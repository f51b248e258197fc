"""
Subject model - top-level curriculum grouping
"""
from sqlalchemy import Column, String, Uuid
from sqlalchemy.orm import relationship
from study_tracker.database import Base, UTCDateTime, utcnow
import uuid


class Subject(Base):
    """
    Subjects table - a course at a given standard/grade
    """
    __tablename__ = "subjects"

    id = Column(Uuid, primary_key=True, default=uuid.uuid4)
    name = Column(String(255), nullable=False)
    standard = Column(String(50), nullable=False, index=True)
    created_at = Column(UTCDateTime, default=utcnow)
    updated_at = Column(UTCDateTime, default=utcnow, onupdate=utcnow)

    # Deleting a subject removes its chapters (and, through them, topics)
    chapters = relationship(
        "Chapter",
        back_populates="subject",
        cascade="all, delete-orphan",
    )

    def __repr__(self):
        return f"<Subject(id={self.id}, name={self.name}, standard={self.standard})>"
