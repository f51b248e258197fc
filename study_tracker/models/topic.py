"""
Topic model - sub-unit of a chapter with exam-relevance flags
"""
from sqlalchemy import Column, String, Integer, Boolean, ForeignKey, Uuid
from sqlalchemy.orm import relationship
from study_tracker.database import Base, UTCDateTime, utcnow
import uuid


class Topic(Base):
    """
    Topics table - owned by exactly one chapter
    """
    __tablename__ = "topics"

    id = Column(Uuid, primary_key=True, default=uuid.uuid4)
    name = Column(String(255), nullable=False)
    chapter_id = Column(Uuid, ForeignKey("chapters.id"), nullable=False, index=True)
    seq_number = Column(Integer, nullable=False, default=0)
    done = Column(Boolean, nullable=False, default=False)
    boards = Column(Boolean, nullable=False, default=False)
    mains = Column(Boolean, nullable=False, default=False)
    advanced = Column(Boolean, nullable=False, default=False)
    created_at = Column(UTCDateTime, default=utcnow)
    updated_at = Column(UTCDateTime, default=utcnow, onupdate=utcnow)

    chapter = relationship("Chapter", back_populates="topics")

    def __repr__(self):
        return f"<Topic(id={self.id}, name={self.name}, done={self.done})>"
