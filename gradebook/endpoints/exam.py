from typing import List
from fastapi import APIRouter, Depends, status
from sqlalchemy.orm import Session

from gradebook.schemas.response import APIResponse
from gradebook.utils import deps
from gradebook.schemas.exam import Exam, ExamCreate, ExamUpdate, ExamForTaking, CourseExamSummary
from gradebook.schemas.progress import CourseProgress
from gradebook.schemas.submission import (
    CourseResults,
    ExamSubmission,
    ExamSubmissionCreate,
    StudentPerformance,
    SubmissionResult,
)
from gradebook.services.exam import exam_service
from gradebook.services.exam_submission import exam_submission_service
from gradebook.services.progress import progress_service

router = APIRouter()

@router.post("/", response_model=APIResponse[Exam], status_code=status.HTTP_201_CREATED)
async def create_exam(
    *,
    db: Session = Depends(deps.get_transactional_db),
    exam_in: ExamCreate
):
    new_exam = exam_service.create_exam(db, exam_in=exam_in)
    return APIResponse(message="Exam created successfully", data=Exam.model_validate(new_exam))


@router.get("/course/{course_id}", response_model=APIResponse[List[CourseExamSummary]])
async def get_course_exams(
    *,
    db: Session = Depends(deps.get_db),
    course_id: int,
    student_id: int = Depends(deps.get_student_id)
):
    exams = exam_service.get_course_exams(db, course_id=course_id, student_id=student_id)
    return APIResponse(message="Course exams retrieved successfully", data=exams)


@router.get("/results/course/{course_id}", response_model=APIResponse[CourseResults])
async def get_course_results(
    *,
    db: Session = Depends(deps.get_db),
    course_id: int,
    student_id: int = Depends(deps.get_student_id)
):
    results = exam_submission_service.get_course_results(db, course_id=course_id, student_id=student_id)
    return APIResponse(message="Course results retrieved successfully", data=results)


@router.get("/progress/course/{course_id}", response_model=APIResponse[CourseProgress])
async def get_course_progress(
    *,
    db: Session = Depends(deps.get_db),
    course_id: int,
    student_id: int = Depends(deps.get_student_id)
):
    progress = progress_service.get_course_progress(db, course_id=course_id, student_id=student_id)
    return APIResponse(message="Course progress retrieved successfully", data=progress)


@router.get("/performance/me", response_model=APIResponse[StudentPerformance])
async def get_my_performance(
    *,
    db: Session = Depends(deps.get_db),
    student_id: int = Depends(deps.get_student_id)
):
    performance = exam_submission_service.get_student_performance(db, student_id=student_id)
    return APIResponse(message="Performance retrieved successfully", data=performance)


@router.get("/{exam_id}", response_model=APIResponse[Exam])
async def get_exam(
    *,
    db: Session = Depends(deps.get_db),
    exam_id: int
):
    exam = exam_service.get_exam(db, exam_id=exam_id)
    return APIResponse(message="Exam retrieved successfully", data=Exam.model_validate(exam))


@router.put("/{exam_id}", response_model=APIResponse[Exam])
async def update_exam(
    *,
    db: Session = Depends(deps.get_transactional_db),
    exam_id: int,
    exam_in: ExamUpdate
):
    updated_exam = exam_service.update_exam(db, exam_id=exam_id, exam_in=exam_in)
    return APIResponse(message="Exam updated successfully", data=Exam.model_validate(updated_exam))


@router.delete("/{exam_id}", response_model=APIResponse[Exam])
async def delete_exam(
    *,
    db: Session = Depends(deps.get_transactional_db),
    exam_id: int
):
    deleted_exam = exam_service.delete_exam(db, exam_id=exam_id)
    return APIResponse(message="Exam deleted successfully", data=Exam.model_validate(deleted_exam))


@router.get("/{exam_id}/take", response_model=APIResponse[ExamForTaking])
async def get_exam_for_taking(
    *,
    db: Session = Depends(deps.get_db),
    exam_id: int,
    student_id: int = Depends(deps.get_student_id)
):
    exam = exam_service.get_exam_for_taking(db, exam_id=exam_id, student_id=student_id)
    return APIResponse(message="Exam retrieved successfully", data=exam)


@router.post("/{exam_id}/submit", response_model=APIResponse[SubmissionResult])
async def submit_exam(
    *,
    db: Session = Depends(deps.get_transactional_db),
    exam_id: int,
    submission_in: ExamSubmissionCreate,
    student_id: int = Depends(deps.get_student_id)
):
    result = await exam_submission_service.submit_exam(db, exam_id=exam_id, student_id=student_id, submission_in=submission_in)
    message = "Exam resubmitted successfully" if result.is_resubmission else "Exam submitted successfully"
    return APIResponse(message=message, data=result)


@router.get("/{exam_id}/result", response_model=APIResponse[SubmissionResult])
async def get_exam_result(
    *,
    db: Session = Depends(deps.get_db),
    exam_id: int,
    student_id: int = Depends(deps.get_student_id)
):
    result = exam_submission_service.get_result(db, exam_id=exam_id, student_id=student_id)
    return APIResponse(message="Exam result retrieved successfully", data=result)


@router.get("/{exam_id}/submission", response_model=APIResponse[ExamSubmission])
async def get_exam_submission(
    *,
    db: Session = Depends(deps.get_db),
    exam_id: int,
    student_id: int = Depends(deps.get_student_id)
):
    submission = exam_submission_service.get_submission(db, exam_id=exam_id, student_id=student_id)
    return APIResponse(message="Submission retrieved successfully", data=ExamSubmission.model_validate(submission))


@router.post("/{exam_id}/submissions/{student_id}/reopen", response_model=APIResponse[ExamSubmission])
async def reopen_submission(
    *,
    db: Session = Depends(deps.get_transactional_db),
    exam_id: int,
    student_id: int
):
    submission = exam_submission_service.reopen_submission(db, exam_id=exam_id, student_id=student_id)
    return APIResponse(message="Submission reopened successfully", data=ExamSubmission.model_validate(submission))


@router.post("/{exam_id}/submissions/{student_id}/lock", response_model=APIResponse[ExamSubmission])
async def lock_submission(
    *,
    db: Session = Depends(deps.get_transactional_db),
    exam_id: int,
    student_id: int
):
    submission = exam_submission_service.lock_submission(db, exam_id=exam_id, student_id=student_id)
    return APIResponse(message="Submission locked successfully", data=ExamSubmission.model_validate(submission))
