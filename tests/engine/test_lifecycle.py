from datetime import datetime, timezone
from types import SimpleNamespace

import pytest

from gradebook.core.constants import SubmissionStateEnum
from gradebook.core.exceptions import AlreadyCompletedError
from gradebook.engine.grader import grade_exam
from gradebook.engine.lifecycle import apply_grading, ensure_can_submit, result_summary, submission_state


def stored_submission(is_editable):
    return SimpleNamespace(
        score=8, max_score=10, percentage=80, grade="B", level="Very Good",
        passed=True, submitted_at=datetime(2024, 1, 1, tzinfo=timezone.utc), is_editable=is_editable,
    )


def test_states():
    assert submission_state(None) == SubmissionStateEnum.NOT_STARTED
    assert submission_state(stored_submission(True)) == SubmissionStateEnum.EDITABLE
    assert submission_state(stored_submission(False)) == SubmissionStateEnum.LOCKED


def test_first_and_editable_submits_are_allowed():
    assert ensure_can_submit(None) == SubmissionStateEnum.NOT_STARTED
    assert ensure_can_submit(stored_submission(True)) == SubmissionStateEnum.EDITABLE


def test_locked_submission_raises_with_previous_result():
    submission = stored_submission(False)
    with pytest.raises(AlreadyCompletedError) as exc_info:
        ensure_can_submit(submission)

    error = exc_info.value
    assert error.code == "ALREADY_COMPLETED"
    assert error.status_code == 409
    assert error.previous_result == result_summary(submission)
    assert error.details["previous_result"]["score"] == 8
    assert submission.score == 8


def test_apply_grading_overwrites_in_place():
    question = {"id": "q1", "type": "mcq", "options": [{"id": "a", "text": "A"}], "correct_answer": "a", "marks": 10}
    graded = grade_exam([question], {"q1": "a"})
    submission = stored_submission(True)
    now = datetime.now(timezone.utc)

    returned = apply_grading(submission, graded, answers={"q1": "a"}, passing_score=60, is_editable=False, submitted_at=now)

    assert returned is submission
    assert submission.score == 10
    assert submission.percentage == 100
    assert submission.grade == "A+"
    assert submission.passed is True
    assert submission.is_editable is False
    assert submission.submitted_at == now
    assert submission.graded_answers == graded["results"]


def test_passing_threshold_is_inclusive():
    graded = {"results": [], "total_score": 6, "max_score": 10, "percentage": 60, "grade": "F", "level": "Below Average",
              "correct_count": 0, "skipped_count": 0}
    submission = apply_grading(SimpleNamespace(), graded, answers={}, passing_score=60, is_editable=True, submitted_at=None)
    assert submission.passed is True
    submission = apply_grading(SimpleNamespace(), graded, answers={}, passing_score=61, is_editable=True, submitted_at=None)
    assert submission.passed is False
