from typing import List, Optional
from sqlalchemy.orm import Session

from gradebook.crud.base import CRUDBase
from gradebook.models.exam_submission import ExamSubmission
from gradebook.schemas.submission import ExamSubmissionCreate, ExamSubmissionUpdate

class CRUDExamSubmission(CRUDBase[ExamSubmission, ExamSubmissionCreate, ExamSubmissionUpdate]):

    def get_by_student_and_exam(self, db: Session, *, student_id: int, course_id: int, exam_id: int) -> Optional[ExamSubmission]:
        return (
            db.query(ExamSubmission)
            .filter(ExamSubmission.student_id == student_id)
            .filter(ExamSubmission.course_id == course_id)
            .filter(ExamSubmission.exam_id == exam_id)
            .first()
        )

    def get_by_student_and_course(self, db: Session, *, student_id: int, course_id: int) -> List[ExamSubmission]:
        return (
            db.query(ExamSubmission)
            .filter(ExamSubmission.student_id == student_id)
            .filter(ExamSubmission.course_id == course_id)
            .order_by(ExamSubmission.submitted_at.desc(), ExamSubmission.id.desc())
            .all()
        )

    def get_all_by_student(self, db: Session, *, student_id: int) -> List[ExamSubmission]:
        return (
            db.query(ExamSubmission)
            .filter(ExamSubmission.student_id == student_id)
            .order_by(ExamSubmission.submitted_at.desc(), ExamSubmission.id.desc())
            .all()
        )


exam_submission = CRUDExamSubmission(ExamSubmission)
