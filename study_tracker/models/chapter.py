"""
Chapter model - a unit within a subject with resource/completion flags
"""
from sqlalchemy import Column, String, Integer, Boolean, ForeignKey, Uuid
from sqlalchemy.orm import relationship
from study_tracker.database import Base, UTCDateTime, utcnow
import uuid

# Resource/completion flags, in display order
CHAPTER_FLAGS = (
    "done",
    "selection_diary",
    "one_pager",
    "dpp",
    "module",
    "pyq",
    "extra_material",
)


class Chapter(Base):
    """
    Chapters table - owned by exactly one subject
    """
    __tablename__ = "chapters"

    id = Column(Uuid, primary_key=True, default=uuid.uuid4)
    name = Column(String(255), nullable=False)
    subject_id = Column(Uuid, ForeignKey("subjects.id"), nullable=False, index=True)
    seq_number = Column(Integer, nullable=False, default=0)  # ordering hint, not unique

    done = Column(Boolean, nullable=False, default=False)
    selection_diary = Column(Boolean, nullable=False, default=False)
    one_pager = Column(Boolean, nullable=False, default=False)
    dpp = Column(Boolean, nullable=False, default=False)
    module = Column(Boolean, nullable=False, default=False)
    pyq = Column(Boolean, nullable=False, default=False)
    extra_material = Column(Boolean, nullable=False, default=False)

    created_at = Column(UTCDateTime, default=utcnow)
    updated_at = Column(UTCDateTime, default=utcnow, onupdate=utcnow)

    subject = relationship("Subject", back_populates="chapters")
    topics = relationship(
        "Topic",
        back_populates="chapter",
        cascade="all, delete-orphan",
    )

    def __repr__(self):
        return f"<Chapter(id={self.id}, name={self.name}, seq={self.seq_number})>"
