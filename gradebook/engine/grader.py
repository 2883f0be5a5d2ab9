import logging
import math
from typing import Any, Dict, List, Mapping, Optional, Sequence

from gradebook.core.constants import (
    DEFAULT_QUESTION_MARKS,
    QUESTION_TYPE_ALIASES,
    GradeDetailEnum,
    QuestionTypeEnum,
)
from gradebook.engine.grade_scale import GradeScale, default_grade_scale
from gradebook.engine.normalizer import (
    AnswerValue,
    answer_text,
    coerce_answer,
    is_positive_boolean,
    is_skipped,
)

logger = logging.getLogger(__name__)


def question_type(question: Mapping[str, Any]) -> str:
    raw_type = str(question.get("type") or "").strip().lower()
    return QUESTION_TYPE_ALIASES.get(raw_type, raw_type)


def question_marks(question: Mapping[str, Any]) -> float:
    for key in ("marks", "points"):
        value = question.get(key)
        if value is not None:
            return value
    return DEFAULT_QUESTION_MARKS


def question_key(question: Mapping[str, Any], index: int) -> str:
    """Declared question id, or `q_<index>` when the question has none."""
    for key in ("id", "_id"):
        value = question.get(key)
        if value not in (None, ""):
            return str(value)
    return f"q_{index}"


def correct_option_id(question: Mapping[str, Any]) -> Any:
    """
    The single correct answer of a question.

    Older exams stored a `correct_answers` list from a multi-select design;
    only its first element is honoured.
    """
    legacy = question.get("correct_answers", question.get("correctAnswers"))
    if legacy:
        logger.warning(f"Question {question.get('id')}: correct_answers list detected, using first value")
        if isinstance(legacy, (list, tuple)):
            return legacy[0]
        return legacy
    return question.get("correct_answer")


def _graded(is_correct: bool, max_marks: float, detail: GradeDetailEnum) -> Dict[str, Any]:
    return {
        "is_correct": is_correct,
        "earned_marks": max_marks if is_correct else 0,
        "max_marks": max_marks,
        "detail": detail.value,
        "skipped": detail == GradeDetailEnum.SKIPPED,
    }


def grade_question(question: Mapping[str, Any], raw_answer: Any) -> Dict[str, Any]:
    """
    Score one question against one answer. Full marks or nothing.

    Never raises for a badly authored question or an odd answer shape: the
    question is scored zero with a `detail` explaining why.
    """
    max_marks = question_marks(question)
    q_type = question_type(question)
    answer = coerce_answer(raw_answer)

    if q_type not in {t.value for t in QuestionTypeEnum}:
        return _graded(False, max_marks, GradeDetailEnum.UNKNOWN_TYPE)

    if q_type == QuestionTypeEnum.MCQ.value:
        correct = correct_option_id(question)
        if is_skipped(correct):
            return _graded(False, max_marks, GradeDetailEnum.NO_CORRECT_DEFINED)

    if is_skipped(answer):
        return _graded(False, max_marks, GradeDetailEnum.SKIPPED)

    if q_type == QuestionTypeEnum.TRUE_FALSE.value:
        is_correct = is_positive_boolean(question.get("correct_answer")) == is_positive_boolean(answer)
        return _graded(is_correct, max_marks, GradeDetailEnum.CORRECT if is_correct else GradeDetailEnum.INCORRECT)

    if q_type == QuestionTypeEnum.ESSAY.value:
        return _graded(True, max_marks, GradeDetailEnum.ESSAY)

    is_correct = answer_text(correct) == answer_text(answer)
    logger.debug(f"Graded mcq {question.get('id')}: correct={answer_text(correct)!r} student={answer_text(answer)!r} -> {is_correct}")
    return _graded(is_correct, max_marks, GradeDetailEnum.CORRECT if is_correct else GradeDetailEnum.INCORRECT)


def _lookup_answer(answers: Mapping[str, Any], question: Mapping[str, Any], index: int) -> AnswerValue:
    candidates = []
    declared = question.get("id", question.get("_id"))
    if declared not in (None, ""):
        candidates.extend([declared, str(declared)])
    candidates.append(f"q_{index}")

    for key in candidates:
        if key in answers:
            return coerce_answer(answers[key])
    return None


def round_half_up(value: float) -> int:
    return math.floor(value + 0.5)


def calculate_percentage(total_score: float, max_score: float) -> int:
    """Whole percentage, halves rounded up, clamped to 0..100."""
    if not max_score or max_score <= 0:
        return 0
    percentage = round_half_up(total_score / max_score * 100)
    return min(100, max(0, percentage))


def grade_exam(
    questions: Sequence[Mapping[str, Any]],
    answers: Optional[Mapping[str, Any]],
    scale: Optional[GradeScale] = None,
) -> Dict[str, Any]:
    """
    Grade a whole submission in question order.

    `answers` maps question ids to raw values. A question with no entry counts
    as skipped and is reported with `detail="skipped"`, not as a wrong answer.
    """
    scale = scale or default_grade_scale
    answers = answers or {}

    total_score = 0
    max_score = 0
    correct_count = 0
    skipped_count = 0
    results: List[Dict[str, Any]] = []

    for index, question in enumerate(questions or []):
        user_answer = _lookup_answer(answers, question, index)
        answer_key = correct_option_id(question) if question_type(question) == QuestionTypeEnum.MCQ.value else question.get("correct_answer")
        graded = grade_question(question, user_answer)

        total_score += graded["earned_marks"]
        max_score += graded["max_marks"]
        if graded["skipped"]:
            skipped_count += 1
        elif graded["is_correct"] and graded["detail"] == GradeDetailEnum.CORRECT.value:
            correct_count += 1

        results.append({
            "question_id": question_key(question, index),
            "question_text": question.get("question_text", question.get("questionText")),
            "type": question.get("type"),
            "user_answer": user_answer,
            "correct_answer": answer_key,
            **graded,
        })

    percentage = calculate_percentage(total_score, max_score)
    grade, level = scale.classify(percentage)

    return {
        "total_score": total_score,
        "max_score": max_score,
        "percentage": percentage,
        "grade": grade,
        "level": level,
        "correct_count": correct_count,
        "skipped_count": skipped_count,
        "results": results,
    }
