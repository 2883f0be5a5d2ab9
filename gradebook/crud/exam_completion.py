from typing import List, Optional
from sqlalchemy.orm import Session

from gradebook.crud.base import CRUDBase
from gradebook.models.exam_completion import ExamCompletion
from gradebook.schemas.progress import ExamCompletionCreate

class CRUDExamCompletion(CRUDBase[ExamCompletion, ExamCompletionCreate, ExamCompletionCreate]):

    def get_by_student_and_exam(self, db: Session, *, student_id: int, course_id: int, exam_id: int) -> Optional[ExamCompletion]:
        return (
            db.query(ExamCompletion)
            .filter(ExamCompletion.student_id == student_id)
            .filter(ExamCompletion.course_id == course_id)
            .filter(ExamCompletion.exam_id == exam_id)
            .first()
        )

    def get_by_student_and_course(self, db: Session, *, student_id: int, course_id: int) -> List[ExamCompletion]:
        return (
            db.query(ExamCompletion)
            .filter(ExamCompletion.student_id == student_id)
            .filter(ExamCompletion.course_id == course_id)
            .order_by(ExamCompletion.exam_id)
            .all()
        )


exam_completion = CRUDExamCompletion(ExamCompletion)
