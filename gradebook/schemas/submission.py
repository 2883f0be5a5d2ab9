from pydantic import BaseModel, ConfigDict, Field, field_validator
from typing import Optional, List, Dict, Any
from datetime import datetime

class ExamSubmissionCreate(BaseModel):
    # {question_id: value}; values are a single option id, a boolean, text or a legacy index.
    answers: Dict[str, Any] = Field(default_factory=dict)
    time_spent: int = Field(default=0, ge=0)

    @field_validator("answers", mode="before")
    @classmethod
    def answers_from_list(cls, v):
        # Older clients post [{"questionId": ..., "answer": ...}]
        if not isinstance(v, list):
            return v
        mapped = {}
        for item in v:
            if not isinstance(item, dict):
                continue
            question_id = item.get("question_id", item.get("questionId"))
            if question_id is not None:
                mapped[str(question_id)] = item.get("answer")
        return mapped

class ExamSubmissionUpdate(BaseModel):
    is_editable: Optional[bool] = None

class GradedAnswer(BaseModel):
    question_id: str
    question_text: Optional[str] = None
    type: Optional[str] = None
    user_answer: Optional[Any] = None
    correct_answer: Optional[Any] = None
    is_correct: bool
    earned_marks: float
    max_marks: float
    detail: str
    skipped: bool = False

class ResultSummary(BaseModel):
    score: float
    max_score: float
    percentage: int
    grade: str
    level: str
    passed: bool
    submitted_at: Optional[datetime] = None

    model_config = ConfigDict(from_attributes=True)

class ExamResultItem(ResultSummary):
    exam_id: int
    course_id: int
    exam_title: str

class SubmissionResult(ResultSummary):
    exam_id: int
    total_questions: int
    correct_count: int
    skipped_count: int
    passing_score: int
    time_spent: int
    is_editable: bool
    is_resubmission: bool = False
    answers: List[GradedAnswer]

class ExamSubmission(ResultSummary):
    id: int
    student_id: int
    course_id: int
    exam_id: int
    exam_title: str
    correct_count: int
    skipped_count: int
    time_spent: int
    is_editable: bool
    answers: Dict[str, Any]
    graded_answers: List[GradedAnswer]

class CourseResults(BaseModel):
    results: List[ExamResultItem]
    total_exams: int
    passed_exams: int
    average_score: int

class PerformanceOverview(BaseModel):
    total_exams: int
    passed_exams: int
    failed_exams: int
    pass_rate: int
    average_score: int

class CoursePerformance(BaseModel):
    course_id: int
    total_exams: int
    passed_exams: int
    average_score: int

class StudentPerformance(BaseModel):
    overview: PerformanceOverview
    grade_distribution: Dict[str, int]
    recent_results: List[ExamResultItem]
    course_performance: List[CoursePerformance]
