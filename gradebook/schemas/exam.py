import uuid
from pydantic import BaseModel, ConfigDict, Field, field_validator
from typing import Optional, List
from datetime import datetime

from gradebook.core.constants import DEFAULT_EXAM_DURATION_MINUTES
from gradebook.schemas.question import Question, QuestionCreate, QuestionPublic
from gradebook.schemas.submission import ResultSummary


def _assign_question_ids(questions: List[QuestionCreate]) -> List[QuestionCreate]:
    assigned = [q if q.id else q.with_id(f"q_{uuid.uuid4().hex[:8]}") for q in questions]
    ids = [q.id for q in assigned]
    if len(ids) != len(set(ids)):
        raise ValueError("Question ids must be unique within an exam")
    return assigned


class ExamBase(BaseModel):
    title: str = Field(..., min_length=1)
    description: Optional[str] = None
    course_id: int
    duration_minutes: int = Field(default=DEFAULT_EXAM_DURATION_MINUTES, gt=0)
    passing_score: Optional[int] = Field(default=None, ge=0, le=100)
    allow_resubmission: Optional[bool] = None
    is_published: bool = True

    class Config:
        json_schema_extra = {
            "example": {
                "title": "Unit 1 Exam",
                "description": "Geography basics",
                "course_id": 1,
                "duration_minutes": 30,
                "passing_score": 60,
                "allow_resubmission": False,
                "is_published": True,
                "questions": [
                    {
                        "id": "q1",
                        "type": "mcq",
                        "question_text": "What is the capital of France?",
                        "options": [{"id": "a", "text": "Paris"}, {"id": "b", "text": "London"}],
                        "correct_answer": "a",
                        "marks": 10
                    }
                ]
            }
        }

class ExamCreate(ExamBase):
    questions: List[QuestionCreate] = Field(..., min_length=1)

    @field_validator("questions")
    @classmethod
    def validate_questions(cls, v):
        return _assign_question_ids(v)

class ExamUpdate(BaseModel):
    title: Optional[str] = Field(default=None, min_length=1)
    description: Optional[str] = None
    duration_minutes: Optional[int] = Field(default=None, gt=0)
    passing_score: Optional[int] = Field(default=None, ge=0, le=100)
    allow_resubmission: Optional[bool] = None
    is_published: Optional[bool] = None
    questions: Optional[List[QuestionCreate]] = None

    @field_validator("title", "duration_minutes", "is_published", "questions")
    @classmethod
    def reject_null(cls, v, info):
        # Omit a field to keep it; these columns cannot be cleared.
        if v is None:
            raise ValueError(f"{info.field_name} cannot be null")
        return v

    @field_validator("questions")
    @classmethod
    def validate_questions(cls, v):
        if not v:
            raise ValueError("An exam needs at least one question")
        return _assign_question_ids(v)

class Exam(ExamBase):
    id: int
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None
    total_marks: int
    total_questions: int
    questions: List[Question] = []

    model_config = ConfigDict(from_attributes=True)

class ExamForTaking(BaseModel):
    id: int
    course_id: int
    title: str
    description: Optional[str] = None
    duration_minutes: int
    passing_score: int
    total_marks: int
    total_questions: int
    questions: List[QuestionPublic]
    is_completed: bool = False
    is_editable: bool = False
    previous_result: Optional[ResultSummary] = None

class CourseExamSummary(BaseModel):
    id: int
    title: str
    description: Optional[str] = None
    duration_minutes: int
    passing_score: int
    total_marks: int
    total_questions: int
    is_completed: bool = False
    result: Optional[ResultSummary] = None
