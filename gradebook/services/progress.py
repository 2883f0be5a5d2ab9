import logging
from datetime import datetime, timezone

from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from gradebook.core.database import SessionLocal
from gradebook.crud.exam import exam as crud_exam
from gradebook.crud.exam_completion import exam_completion as crud_exam_completion
from gradebook.engine.grader import round_half_up
from gradebook.models.exam_completion import ExamCompletion as ExamCompletionModel
from gradebook.schemas.progress import CourseProgress, ExamCompletion, ExamCompletionCreate
from gradebook.utils.events import EXAM_SUBMITTED, event_bus

logger = logging.getLogger(__name__)


class ProgressService:

    def record_exam_completion(self, db: Session, completion_in: ExamCompletionCreate) -> ExamCompletionModel:
        """Insert or refresh the student's completion entry for an exam. A resubmission replaces the earlier score."""
        lookup = {
            "student_id": completion_in.student_id,
            "course_id": completion_in.course_id,
            "exam_id": completion_in.exam_id,
        }
        existing = crud_exam_completion.get_by_student_and_exam(db, **lookup)
        if existing:
            completion = crud_exam_completion.update(db, db_obj=existing, obj_in=completion_in)
        else:
            try:
                completion = crud_exam_completion.create(db, obj_in=completion_in)
            except IntegrityError:
                db.rollback()
                stored = crud_exam_completion.get_by_student_and_exam(db, **lookup)
                if stored is None:
                    raise
                completion = crud_exam_completion.update(db, db_obj=stored, obj_in=completion_in)

        logger.info(
            f"Recorded completion of exam {completion.exam_id} for student {completion.student_id} "
            f"in course {completion.course_id} ({completion.percentage}%)"
        )
        return completion

    def get_course_progress(self, db: Session, course_id: int, student_id: int) -> CourseProgress:
        published_ids = {e.id for e in crud_exam.get_by_course(db, course_id, published_only=True)}
        completions = crud_exam_completion.get_by_student_and_course(db, student_id=student_id, course_id=course_id)
        counted = [c for c in completions if c.exam_id in published_ids]

        total = len(published_ids)
        progress = min(round_half_up(len(counted) / total * 100), 100) if total else 0
        return CourseProgress(
            course_id=course_id,
            total_exams=total,
            completed_exams=len(counted),
            passed_exams=sum(1 for c in counted if c.passed),
            progress=progress,
            is_completed=total > 0 and len(counted) == total,
            completions=[ExamCompletion.model_validate(c) for c in completions],
        )


async def handle_exam_submitted_event(data: dict):
    student_id = data.get("student_id")
    course_id = data.get("course_id")
    exam_id = data.get("exam_id")
    if not all([student_id, course_id, exam_id]):
        return

    db = SessionLocal()
    try:
        progress_service.record_exam_completion(db, ExamCompletionCreate(
            student_id=student_id,
            course_id=course_id,
            exam_id=exam_id,
            submission_id=data.get("submission_id"),
            percentage=data.get("percentage", 0),
            grade=data.get("grade"),
            passed=bool(data.get("passed")),
            completed_at=datetime.now(timezone.utc),
        ))
    finally:
        db.close()


progress_service = ProgressService()

event_bus.subscribe(EXAM_SUBMITTED, handle_exam_submitted_event)
