import logging
from collections import Counter
from datetime import datetime, timezone
from typing import Dict, List, Optional

from fastapi import HTTPException, status
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from gradebook.core.config import settings
from gradebook.core.constants import RECENT_RESULTS_LIMIT
from gradebook.crud.exam_submission import exam_submission as crud_exam_submission
from gradebook.engine.grade_scale import GradeScale
from gradebook.engine.grader import grade_exam, round_half_up
from gradebook.engine.lifecycle import apply_grading, ensure_can_submit
from gradebook.models.exam_submission import ExamSubmission as ExamSubmissionModel
from gradebook.schemas.submission import (
    CoursePerformance,
    CourseResults,
    ExamResultItem,
    ExamSubmissionCreate,
    ExamSubmissionUpdate,
    PerformanceOverview,
    StudentPerformance,
    SubmissionResult,
)
from gradebook.services.exam import exam_service
from gradebook.utils.events import EXAM_SUBMITTED, event_bus

logger = logging.getLogger(__name__)


def _average_percentage(submissions: List[ExamSubmissionModel]) -> int:
    if not submissions:
        return 0
    return round_half_up(sum(s.percentage for s in submissions) / len(submissions))


class ExamSubmissionService:
    def __init__(self, scale: Optional[GradeScale] = None):
        self.grade_scale = scale or GradeScale(bands=settings.GRADE_BANDS)

    def _get_submission_or_404(self, db: Session, exam, student_id: int) -> ExamSubmissionModel:
        submission = crud_exam_submission.get_by_student_and_exam(
            db, student_id=student_id, course_id=exam.course_id, exam_id=exam.id
        )
        if not submission:
            raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="No submission found for this exam.")
        return submission

    def _to_result(self, exam, submission: ExamSubmissionModel, is_resubmission: bool) -> SubmissionResult:
        return SubmissionResult(
            exam_id=exam.id,
            score=submission.score,
            max_score=submission.max_score,
            percentage=submission.percentage,
            grade=submission.grade,
            level=submission.level,
            passed=submission.passed,
            submitted_at=submission.submitted_at,
            total_questions=exam.total_questions,
            correct_count=submission.correct_count,
            skipped_count=submission.skipped_count,
            passing_score=exam_service.passing_score(exam),
            time_spent=submission.time_spent or 0,
            is_editable=submission.is_editable,
            is_resubmission=is_resubmission,
            answers=submission.graded_answers or [],
        )

    def _overwrite(self, db: Session, submission: ExamSubmissionModel, graded: Dict, *, submission_in: ExamSubmissionCreate,
                   passing_score: int, is_editable: bool, submitted_at: datetime) -> ExamSubmissionModel:
        apply_grading(
            submission, graded,
            answers=submission_in.answers,
            passing_score=passing_score,
            is_editable=is_editable,
            submitted_at=submitted_at,
        )
        submission.time_spent = submission_in.time_spent
        db.add(submission)
        db.commit()
        db.refresh(submission)
        return submission

    async def submit_exam(self, db: Session, exam_id: int, student_id: int, submission_in: ExamSubmissionCreate) -> SubmissionResult:
        exam = exam_service.get_published_exam(db, exam_id)
        if not exam.questions:
            raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail="Exam has no questions.")

        existing = crud_exam_submission.get_by_student_and_exam(
            db, student_id=student_id, course_id=exam.course_id, exam_id=exam.id
        )
        ensure_can_submit(existing)

        graded = grade_exam(exam.questions, submission_in.answers, scale=self.grade_scale)
        passing_score = exam_service.passing_score(exam)
        is_editable = exam_service.allows_resubmission(exam)
        now = datetime.now(timezone.utc)

        if existing:
            submission = self._overwrite(
                db, existing, graded, submission_in=submission_in,
                passing_score=passing_score, is_editable=is_editable, submitted_at=now,
            )
            is_resubmission = True
        else:
            record = apply_grading(
                ExamSubmissionModel(
                    student_id=student_id,
                    course_id=exam.course_id,
                    exam_id=exam.id,
                    exam_title=exam.title,
                    time_spent=submission_in.time_spent,
                ),
                graded,
                answers=submission_in.answers,
                passing_score=passing_score,
                is_editable=is_editable,
                submitted_at=now,
            )
            try:
                db.add(record)
                db.commit()
                db.refresh(record)
                submission = record
                is_resubmission = False
            except IntegrityError:
                # Another request stored the first submission in the meantime.
                db.rollback()
                logger.warning(f"Concurrent first submission for exam {exam.id} by student {student_id}, re-checking")
                stored = crud_exam_submission.get_by_student_and_exam(
                    db, student_id=student_id, course_id=exam.course_id, exam_id=exam.id
                )
                if stored is None:
                    raise
                ensure_can_submit(stored)
                submission = self._overwrite(
                    db, stored, graded, submission_in=submission_in,
                    passing_score=passing_score, is_editable=is_editable, submitted_at=now,
                )
                is_resubmission = True

        logger.info(
            f"Student {student_id} submitted exam {exam.id}: {submission.score}/{submission.max_score} "
            f"({submission.percentage}%, {submission.grade})"
        )

        await event_bus.publish(EXAM_SUBMITTED, {
            "submission_id": submission.id,
            "student_id": student_id,
            "course_id": exam.course_id,
            "exam_id": exam.id,
            "percentage": submission.percentage,
            "grade": submission.grade,
            "passed": submission.passed,
            "is_resubmission": is_resubmission,
        })

        return self._to_result(exam, submission, is_resubmission)

    def get_result(self, db: Session, exam_id: int, student_id: int) -> SubmissionResult:
        exam = exam_service.get_exam(db, exam_id)
        submission = self._get_submission_or_404(db, exam, student_id)
        return self._to_result(exam, submission, is_resubmission=False)

    def get_submission(self, db: Session, exam_id: int, student_id: int) -> ExamSubmissionModel:
        exam = exam_service.get_exam(db, exam_id)
        return self._get_submission_or_404(db, exam, student_id)

    def _set_editable(self, db: Session, exam_id: int, student_id: int, is_editable: bool) -> ExamSubmissionModel:
        exam = exam_service.get_exam(db, exam_id)
        submission = self._get_submission_or_404(db, exam, student_id)
        submission = crud_exam_submission.update(db, db_obj=submission, obj_in=ExamSubmissionUpdate(is_editable=is_editable))
        logger.info(f"Submission {submission.id} for exam {exam.id} {'reopened' if is_editable else 'locked'}")
        return submission

    def reopen_submission(self, db: Session, exam_id: int, student_id: int) -> ExamSubmissionModel:
        return self._set_editable(db, exam_id, student_id, True)

    def lock_submission(self, db: Session, exam_id: int, student_id: int) -> ExamSubmissionModel:
        return self._set_editable(db, exam_id, student_id, False)

    def get_course_results(self, db: Session, course_id: int, student_id: int) -> CourseResults:
        submissions = crud_exam_submission.get_by_student_and_course(db, student_id=student_id, course_id=course_id)
        return CourseResults(
            results=[ExamResultItem.model_validate(s) for s in submissions],
            total_exams=len(submissions),
            passed_exams=sum(1 for s in submissions if s.passed),
            average_score=_average_percentage(submissions),
        )

    def get_student_performance(self, db: Session, student_id: int) -> StudentPerformance:
        submissions = crud_exam_submission.get_all_by_student(db, student_id=student_id)
        total = len(submissions)
        passed = sum(1 for s in submissions if s.passed)

        distribution = {grade: 0 for grade in self.grade_scale.grades}
        distribution.update(Counter(s.grade for s in submissions))

        by_course: Dict[int, List[ExamSubmissionModel]] = {}
        for s in submissions:
            by_course.setdefault(s.course_id, []).append(s)

        return StudentPerformance(
            overview=PerformanceOverview(
                total_exams=total,
                passed_exams=passed,
                failed_exams=total - passed,
                pass_rate=round_half_up(passed / total * 100) if total else 0,
                average_score=_average_percentage(submissions),
            ),
            grade_distribution=distribution,
            recent_results=[ExamResultItem.model_validate(s) for s in submissions[:RECENT_RESULTS_LIMIT]],
            course_performance=[
                CoursePerformance(
                    course_id=course_id,
                    total_exams=len(items),
                    passed_exams=sum(1 for s in items if s.passed),
                    average_score=_average_percentage(items),
                )
                for course_id, items in by_course.items()
            ],
        )


exam_submission_service = ExamSubmissionService()
