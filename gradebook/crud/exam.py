from typing import List
from sqlalchemy.orm import Session

from gradebook.crud.base import CRUDBase
from gradebook.models.exam import Exam
from gradebook.schemas.exam import ExamCreate, ExamUpdate

class CRUDExam(CRUDBase[Exam, ExamCreate, ExamUpdate]):

    def get_by_course(self, db: Session, course_id: int, published_only: bool = False) -> List[Exam]:
        query = db.query(Exam).filter(Exam.course_id == course_id)
        if published_only:
            query = query.filter(Exam.is_published.is_(True))
        return query.order_by(Exam.id).all()


exam = CRUDExam(Exam)
