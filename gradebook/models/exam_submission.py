from sqlalchemy import Column, Integer, String, DateTime, ForeignKey, Float, Boolean, JSON, UniqueConstraint
from sqlalchemy.orm import relationship
from sqlalchemy.sql import func
from gradebook.core.database import Base

class ExamSubmission(Base):
    __tablename__ = "exam_submissions"
    __table_args__ = (
        UniqueConstraint("student_id", "course_id", "exam_id", name="uq_exam_submission_student_course_exam"),
    )

    id = Column(Integer, primary_key=True, index=True)
    student_id = Column(Integer, nullable=False, index=True)
    course_id = Column(Integer, nullable=False, index=True)
    exam_id = Column(Integer, ForeignKey("exams.id"), nullable=False)
    exam_title = Column(String, nullable=False)
    answers = Column(JSON, nullable=False, default=dict) # Raw answer map as submitted
    graded_answers = Column(JSON, nullable=False, default=list)
    score = Column(Float, nullable=False, default=0)
    max_score = Column(Float, nullable=False, default=0)
    percentage = Column(Integer, nullable=False, default=0)
    grade = Column(String, nullable=False)
    level = Column(String, nullable=False)
    passed = Column(Boolean, nullable=False, default=False)
    correct_count = Column(Integer, nullable=False, default=0)
    skipped_count = Column(Integer, nullable=False, default=0)
    time_spent = Column(Integer, nullable=False, default=0)
    is_editable = Column(Boolean, nullable=False, default=False)
    submitted_at = Column(DateTime(timezone=True), server_default=func.now())
    created_at = Column(DateTime(timezone=True), server_default=func.now())
    updated_at = Column(DateTime(timezone=True), onupdate=func.now())

    exam = relationship("Exam", back_populates="submissions")
