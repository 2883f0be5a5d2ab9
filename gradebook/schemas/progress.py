from pydantic import BaseModel, ConfigDict, Field
from typing import Optional, List
from datetime import datetime

class ExamCompletionCreate(BaseModel):
    student_id: int
    course_id: int
    exam_id: int
    submission_id: Optional[int] = None
    percentage: int = Field(default=0, ge=0, le=100)
    grade: Optional[str] = None
    passed: bool = False
    completed_at: datetime

class ExamCompletion(BaseModel):
    exam_id: int
    submission_id: Optional[int] = None
    percentage: int
    grade: Optional[str] = None
    passed: bool
    completed_at: datetime

    model_config = ConfigDict(from_attributes=True)

class CourseProgress(BaseModel):
    course_id: int
    total_exams: int
    completed_exams: int
    passed_exams: int
    progress: int # Completed published exams, as a whole percentage
    is_completed: bool
    completions: List[ExamCompletion]
