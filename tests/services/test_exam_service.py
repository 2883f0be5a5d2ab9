import pytest
from pydantic import ValidationError
from sqlalchemy.orm import Session

from gradebook.core.config import settings
from gradebook.schemas.exam import ExamCreate, ExamUpdate
from gradebook.schemas.question import QuestionCreate
from gradebook.schemas.submission import ExamSubmissionCreate
from gradebook.services.exam import exam_service
from gradebook.services.exam_submission import exam_submission_service


def exam_payload(**overrides):
    payload = {
        "title": "Unit 1",
        "course_id": 3,
        "questions": [
            {"id": "q1", "type": "multiple_choice", "question_text": "2 + 2?", "options": [{"text": "3"}, {"text": "4"}], "correct_answer": 1, "marks": 5},
            {"type": "true_false", "question_text": "Water is wet.", "correct_answer": "صحيح"},
            {"type": "essay", "question_text": "Explain.", "correct_answer": "ignored"},
        ],
    }
    payload.update(overrides)
    return payload


class TestQuestionAuthoring:
    def test_mcq_options_get_ids_and_answer_becomes_an_id(self):
        exam_in = ExamCreate(**exam_payload())
        mcq = exam_in.questions[0]
        assert mcq.type == "mcq"
        assert [o.id for o in mcq.options] == ["opt_q1_0", "opt_q1_1"]
        assert mcq.correct_answer == "opt_q1_1"

    def test_answer_by_text_resolves_to_id(self):
        question = QuestionCreate(id="q9", type="mcq", question_text="?", options=[{"id": "x", "text": "Yes"}, {"id": "y", "text": "No"}], correct_answer="no")
        assert question.correct_answer == "y"

    def test_missing_question_ids_are_generated(self):
        exam_in = ExamCreate(**exam_payload())
        ids = [q.id for q in exam_in.questions]
        assert ids[0] == "q1"
        assert all(ids) and len(set(ids)) == 3

    def test_true_false_answer_is_stored_as_boolean(self):
        exam_in = ExamCreate(**exam_payload())
        assert exam_in.questions[1].correct_answer is True
        assert exam_in.questions[1].options is None

    @pytest.mark.parametrize("token,expected", [
        (True, True), (False, False), ("true", True), ("false", False), ("صحيح", True), (0, True), (1, False),
    ])
    def test_true_false_accepted_encodings(self, token, expected):
        question = QuestionCreate(type="true_false", question_text="?", correct_answer=token)
        assert question.correct_answer is expected

    @pytest.mark.parametrize("token", ["True", "yes", "1", "FALSE", 2])
    def test_true_false_rejects_unknown_tokens(self, token):
        with pytest.raises(ValidationError):
            QuestionCreate(type="true_false", question_text="?", correct_answer=token)

    def test_essay_has_no_answer_key(self):
        exam_in = ExamCreate(**exam_payload())
        assert exam_in.questions[2].correct_answer is None

    def test_legacy_correct_answers_list_keeps_first(self):
        question = QuestionCreate(id="q1", type="mcq", question_text="?", options=[{"id": "a", "text": "A"}, {"id": "b", "text": "B"}], correct_answers=["b", "a"])
        assert question.correct_answer == "b"
        assert "correct_answers" not in question.model_dump()

    def test_mcq_requires_a_correct_answer(self):
        with pytest.raises(ValidationError):
            QuestionCreate(id="q1", type="mcq", question_text="?", options=[{"id": "a", "text": "A"}])

    def test_mcq_answer_must_match_an_option(self):
        with pytest.raises(ValidationError):
            QuestionCreate(id="q1", type="mcq", question_text="?", options=[{"id": "a", "text": "A"}], correct_answer="zz")

    def test_duplicate_question_ids(self):
        payload = exam_payload()
        payload["questions"][1]["id"] = "q1"
        with pytest.raises(ValidationError):
            ExamCreate(**payload)

    def test_unknown_question_type(self):
        with pytest.raises(ValidationError):
            QuestionCreate(type="matching", question_text="?")

    def test_update_rejects_empty_question_list(self):
        with pytest.raises(ValidationError):
            ExamUpdate(questions=[])

    def test_update_rejects_null_title(self):
        with pytest.raises(ValidationError):
            ExamUpdate(title=None)
        assert ExamUpdate(description=None).model_dump(exclude_unset=True) == {"description": None}

    def test_legacy_answer_list_payload(self):
        submission = ExamSubmissionCreate(answers=[{"questionId": "q1", "answer": "a"}, {"question_id": 2, "answer": True}])
        assert submission.answers == {"q1": "a", "2": True}


class TestExamService:
    def test_create_and_read_exam(self, db_session: Session):
        exam = exam_service.create_exam(db_session, ExamCreate(**exam_payload()))
        assert exam.total_questions == 3
        assert exam.total_marks == 7
        assert exam_service.passing_score(exam) == settings.DEFAULT_PASSING_SCORE
        assert exam_service.get_exam(db_session, exam.id).id == exam.id

    def test_update_exam_questions(self, db_session: Session):
        exam = exam_service.create_exam(db_session, ExamCreate(**exam_payload()))
        updated = exam_service.update_exam(db_session, exam.id, ExamUpdate(
            title="Unit 1 (revised)",
            questions=[{"id": "n1", "type": "essay", "question_text": "New?"}],
        ))
        assert updated.title == "Unit 1 (revised)"
        assert updated.total_questions == 1
        assert updated.course_id == 3

    def test_public_view_hides_answer_key(self, db_session: Session):
        exam = exam_service.create_exam(db_session, ExamCreate(**exam_payload()))
        taking = exam_service.get_exam_for_taking(db_session, exam.id, student_id=1)
        dumped = taking.model_dump()

        assert taking.is_completed is False
        assert taking.previous_result is None
        for question in dumped["questions"]:
            assert "correct_answer" not in question
            assert "correct_answers" not in question
        assert [q["order"] for q in dumped["questions"]] == [1, 2, 3]
        assert [o["id"] for o in dumped["questions"][0]["options"]] == ["opt_q1_0", "opt_q1_1"]

    def test_public_view_synthesizes_ids_for_legacy_questions(self, exam_factory):
        exam = exam_factory(questions=[{"type": "mcq", "question_text": "?", "options": ["Red", "Blue"], "correct_answer": 0}])
        questions = exam_service.public_questions(exam)
        assert questions[0].id == "q_0"
        assert [o.id for o in questions[0].options] == ["opt_q_0_0", "opt_q_0_1"]

    @pytest.mark.asyncio
    async def test_taking_view_after_submit(self, db_session: Session, exam_factory):
        exam = exam_factory(passing_score=90)
        await exam_submission_service.submit_exam(
            db_session, exam_id=exam.id, student_id=5,
            submission_in=ExamSubmissionCreate(answers={"q1": "a", "q2": False})
        )
        taking = exam_service.get_exam_for_taking(db_session, exam.id, student_id=5)
        assert taking.is_completed is True
        assert taking.is_editable is False
        assert taking.previous_result.score == 2
        assert taking.previous_result.passed is False

        summaries = exam_service.get_course_exams(db_session, course_id=exam.course_id, student_id=5)
        assert len(summaries) == 1
        assert summaries[0].is_completed is True
        assert summaries[0].result.grade == "F"

    def test_delete_exam(self, db_session: Session, exam_factory):
        exam = exam_factory()
        exam_service.delete_exam(db_session, exam.id)
        assert exam_service.get_course_exams(db_session, course_id=exam.course_id, student_id=1) == []
