from typing import Any, Dict, Optional

from gradebook.core.constants import SubmissionStateEnum
from gradebook.core.exceptions import AlreadyCompletedError

RESULT_SUMMARY_FIELDS = ("score", "max_score", "percentage", "grade", "level", "passed", "submitted_at")


def submission_state(submission: Optional[Any]) -> SubmissionStateEnum:
    if submission is None:
        return SubmissionStateEnum.NOT_STARTED
    if submission.is_editable:
        return SubmissionStateEnum.EDITABLE
    return SubmissionStateEnum.LOCKED


def result_summary(submission: Any) -> Dict[str, Any]:
    return {field: getattr(submission, field, None) for field in RESULT_SUMMARY_FIELDS}


def ensure_can_submit(submission: Optional[Any]) -> SubmissionStateEnum:
    """
    Gate a grading call on the stored submission.

    Returns the current state when a submit is allowed; a locked submission
    raises AlreadyCompletedError with its stored result attached.
    """
    state = submission_state(submission)
    if state == SubmissionStateEnum.LOCKED:
        raise AlreadyCompletedError(previous_result=result_summary(submission))
    return state


def apply_grading(submission: Any, graded: Dict[str, Any], *, answers: Dict[str, Any],
                  passing_score: float, is_editable: bool, submitted_at: Any) -> Any:
    """Overwrite a submission's answers and score fields in place with a grading result."""
    submission.answers = answers
    submission.graded_answers = graded["results"]
    submission.score = graded["total_score"]
    submission.max_score = graded["max_score"]
    submission.percentage = graded["percentage"]
    submission.grade = graded["grade"]
    submission.level = graded["level"]
    submission.passed = graded["percentage"] >= passing_score
    submission.correct_count = graded["correct_count"]
    submission.skipped_count = graded["skipped_count"]
    submission.is_editable = is_editable
    submission.submitted_at = submitted_at
    return submission
