from sqlalchemy import Column, Integer, String, Text, DateTime, Boolean, JSON
from sqlalchemy.orm import relationship
from sqlalchemy.sql import func
from gradebook.core.database import Base
from gradebook.core.constants import DEFAULT_EXAM_DURATION_MINUTES
from gradebook.engine.grader import question_marks

class Exam(Base):
    __tablename__ = "exams"

    id = Column(Integer, primary_key=True, index=True)
    course_id = Column(Integer, nullable=False, index=True)
    title = Column(String, nullable=False)
    description = Column(Text, nullable=True)
    duration_minutes = Column(Integer, nullable=False, default=DEFAULT_EXAM_DURATION_MINUTES)
    passing_score = Column(Integer, nullable=True)
    allow_resubmission = Column(Boolean, nullable=True) # None falls back to ALLOW_RESUBMISSION_DEFAULT
    is_published = Column(Boolean, nullable=False, default=True)
    questions = Column(JSON, nullable=False, default=list) # Ordered question dicts, answer key included
    created_at = Column(DateTime(timezone=True), server_default=func.now())
    updated_at = Column(DateTime(timezone=True), onupdate=func.now())

    submissions = relationship("ExamSubmission", back_populates="exam", cascade="all, delete-orphan")
    completions = relationship("ExamCompletion", back_populates="exam", cascade="all, delete-orphan")

    @property
    def total_marks(self) -> int:
        return sum(question_marks(q) for q in (self.questions or []))

    @property
    def total_questions(self) -> int:
        return len(self.questions or [])
