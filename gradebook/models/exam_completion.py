from sqlalchemy import Column, Integer, String, DateTime, ForeignKey, Boolean, UniqueConstraint
from sqlalchemy.orm import relationship
from sqlalchemy.sql import func
from gradebook.core.database import Base

class ExamCompletion(Base):
    """Course progress entry: one row per exam a student has submitted in a course."""
    __tablename__ = "exam_completions"
    __table_args__ = (
        UniqueConstraint("student_id", "course_id", "exam_id", name="uq_exam_completion_student_course_exam"),
    )

    id = Column(Integer, primary_key=True, index=True)
    student_id = Column(Integer, nullable=False, index=True)
    course_id = Column(Integer, nullable=False, index=True)
    exam_id = Column(Integer, ForeignKey("exams.id"), nullable=False)
    submission_id = Column(Integer, nullable=True)
    percentage = Column(Integer, nullable=False, default=0)
    grade = Column(String, nullable=True)
    passed = Column(Boolean, nullable=False, default=False)
    completed_at = Column(DateTime(timezone=True), nullable=False)
    created_at = Column(DateTime(timezone=True), server_default=func.now())
    updated_at = Column(DateTime(timezone=True), onupdate=func.now())

    exam = relationship("Exam", back_populates="completions")
