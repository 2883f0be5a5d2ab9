import logging
from typing import Dict, List
from sqlalchemy.orm import Session
from fastapi import HTTPException, status

from gradebook.core.config import settings
from gradebook.core.constants import QuestionTypeEnum
from gradebook.crud.exam import exam as crud_exam
from gradebook.crud.exam_submission import exam_submission as crud_exam_submission
from gradebook.engine.grader import question_key, question_marks, question_type
from gradebook.engine.normalizer import annotate_options
from gradebook.models.exam import Exam
from gradebook.schemas.exam import ExamCreate, ExamUpdate, ExamForTaking, CourseExamSummary
from gradebook.schemas.question import Option, QuestionPublic
from gradebook.schemas.submission import ResultSummary

logger = logging.getLogger(__name__)


class ExamService:

    def passing_score(self, exam: Exam) -> int:
        if exam.passing_score is None:
            return settings.DEFAULT_PASSING_SCORE
        return exam.passing_score

    def allows_resubmission(self, exam: Exam) -> bool:
        if exam.allow_resubmission is None:
            return settings.ALLOW_RESUBMISSION_DEFAULT
        return exam.allow_resubmission

    def get_exam(self, db: Session, exam_id: int) -> Exam:
        exam = crud_exam.get(db, id=exam_id)
        if not exam:
            raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Exam not found.")
        return exam

    def get_published_exam(self, db: Session, exam_id: int) -> Exam:
        exam = crud_exam.get(db, id=exam_id)
        if not exam or not exam.is_published:
            raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Exam not found or not published.")
        return exam

    def create_exam(self, db: Session, exam_in: ExamCreate) -> Exam:
        new_exam = crud_exam.create(db, obj_in=exam_in)
        logger.info(f"Exam {new_exam.id} created for course {new_exam.course_id} with {new_exam.total_questions} questions")
        return new_exam

    def update_exam(self, db: Session, exam_id: int, exam_in: ExamUpdate) -> Exam:
        exam = self.get_exam(db, exam_id)
        update_data = exam_in.model_dump(exclude_unset=True)
        if exam_in.questions is not None:
            # Replaced as a whole; nested defaults must be stored too.
            update_data["questions"] = [q.model_dump() for q in exam_in.questions]
        return crud_exam.update(db, db_obj=exam, obj_in=update_data)

    def delete_exam(self, db: Session, exam_id: int) -> Exam:
        exam = self.get_exam(db, exam_id)
        crud_exam.delete(db, id=exam.id)
        logger.info(f"Exam {exam_id} deleted")
        return exam

    def public_questions(self, exam: Exam) -> List[QuestionPublic]:
        """Questions as a student sees them: stable option ids, no answer key."""
        questions = []
        for index, question in enumerate(exam.questions or []):
            q_id = question_key(question, index)
            options = None
            if question_type(question) == QuestionTypeEnum.MCQ.value:
                options = [Option(id=str(o["id"]), text=o["text"]) for o in annotate_options(question.get("options"), q_id)]
            questions.append(QuestionPublic(
                id=q_id,
                type=question_type(question),
                question_text=question.get("question_text", question.get("questionText")),
                options=options,
                marks=question_marks(question),
                order=question.get("order") or index + 1,
            ))
        return questions

    def get_exam_for_taking(self, db: Session, exam_id: int, student_id: int) -> ExamForTaking:
        exam = self.get_published_exam(db, exam_id)
        existing = crud_exam_submission.get_by_student_and_exam(
            db, student_id=student_id, course_id=exam.course_id, exam_id=exam.id
        )

        return ExamForTaking(
            id=exam.id,
            course_id=exam.course_id,
            title=exam.title,
            description=exam.description,
            duration_minutes=exam.duration_minutes,
            passing_score=self.passing_score(exam),
            total_marks=exam.total_marks,
            total_questions=exam.total_questions,
            questions=self.public_questions(exam),
            is_completed=existing is not None,
            is_editable=existing.is_editable if existing else False,
            previous_result=ResultSummary.model_validate(existing) if existing else None,
        )

    def get_course_exams(self, db: Session, course_id: int, student_id: int) -> List[CourseExamSummary]:
        exams = crud_exam.get_by_course(db, course_id=course_id, published_only=True)
        submissions: Dict[int, object] = {
            s.exam_id: s for s in crud_exam_submission.get_by_student_and_course(db, student_id=student_id, course_id=course_id)
        }

        summaries = []
        for exam in exams:
            submission = submissions.get(exam.id)
            summaries.append(CourseExamSummary(
                id=exam.id,
                title=exam.title,
                description=exam.description,
                duration_minutes=exam.duration_minutes,
                passing_score=self.passing_score(exam),
                total_marks=exam.total_marks,
                total_questions=exam.total_questions,
                is_completed=submission is not None,
                result=ResultSummary.model_validate(submission) if submission else None,
            ))
        return summaries


exam_service = ExamService()
