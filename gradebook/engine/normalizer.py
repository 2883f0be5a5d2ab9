"""
Answer normalization.

Student answers reach the grader in several shapes: a legacy option index,
an option id, the option text, a native boolean or one of its string/locale
spellings. The helpers here turn them into comparable values without ever
mutating the question data they are given.
"""
import logging
import math
from typing import Any, Dict, List, Mapping, Optional, Sequence, Union

from gradebook.core.constants import (
    NEGATIVE_BOOLEAN_NUMBER,
    NEGATIVE_BOOLEAN_STRINGS,
    POSITIVE_BOOLEAN_NUMBER,
    POSITIVE_BOOLEAN_STRINGS,
)

logger = logging.getLogger(__name__)

AnswerValue = Union[None, bool, int, float, str]

_SELECTED_ANSWER_KEYS = ("selected_answers", "selectedAnswers")
_OPTION_TEXT_KEYS = ("text", "option_text", "optionText")


def _is_number(value: Any) -> bool:
    return isinstance(value, (int, float)) and not isinstance(value, bool)


def _number_text(value: Union[int, float]) -> str:
    if isinstance(value, float):
        if math.isnan(value):
            return "nan"
        if math.isinf(value):
            return "infinity" if value > 0 else "-infinity"
        if value.is_integer():
            return str(int(value))
        return repr(value)
    return str(value)


def normalize_key(value: Any) -> str:
    """
    Canonical, case-insensitive comparison key for an answer.

    `1`, `1.0` and `"1"` share a key, as do `"Paris"` and `" paris "`.
    """
    if value is None:
        return ""
    if isinstance(value, bool):
        return "true" if value else "false"
    if _is_number(value):
        return _number_text(value)
    return str(value).strip().lower()


def answer_text(value: Any) -> str:
    """Trimmed string form of a value, case preserved. Used for option id comparisons."""
    if value is None:
        return ""
    if isinstance(value, bool):
        return "true" if value else "false"
    if _is_number(value):
        return _number_text(value)
    return str(value).strip()


def is_skipped(value: Any) -> bool:
    return value is None or (isinstance(value, str) and not value.strip())


def is_positive_boolean(value: Any) -> bool:
    """
    True for every accepted spelling of a "true" answer: True, "true", "صحيح" and 0.

    Booleans are checked before numbers, so False never counts as the 0 sentinel.
    """
    if isinstance(value, bool):
        return value
    if isinstance(value, str):
        return value in POSITIVE_BOOLEAN_STRINGS
    if _is_number(value):
        return value == POSITIVE_BOOLEAN_NUMBER
    return False


def is_boolean_token(value: Any) -> bool:
    """Whether `value` is a recognised true/false spelling, positive or negative."""
    if isinstance(value, bool):
        return True
    if isinstance(value, str):
        return value in POSITIVE_BOOLEAN_STRINGS + NEGATIVE_BOOLEAN_STRINGS
    if _is_number(value):
        return value in (POSITIVE_BOOLEAN_NUMBER, NEGATIVE_BOOLEAN_NUMBER)
    return False


def coerce_answer(raw: Any) -> AnswerValue:
    """
    Map a raw submitted value onto AnswerValue.

    Arrays and legacy {"selectedAnswers": [...]} objects are reduced to their
    first element, since every question accepts a single choice. Any other
    structure is treated as no answer.
    """
    if raw is None or isinstance(raw, (bool, int, float, str)):
        return raw

    if isinstance(raw, (list, tuple)):
        logger.warning(f"Malformed answer shape: expected a single value, got a list of {len(raw)}")
        return coerce_answer(raw[0]) if raw else None

    if isinstance(raw, Mapping):
        for key in _SELECTED_ANSWER_KEYS:
            if key in raw:
                return coerce_answer(raw[key])

    logger.warning(f"Malformed answer shape: unsupported {type(raw).__name__} value ignored")
    return None


def option_text(option: Any) -> str:
    if isinstance(option, Mapping):
        for key in _OPTION_TEXT_KEYS:
            if option.get(key) is not None:
                return str(option[key])
        return ""
    return "" if option is None else str(option)


def annotate_options(options: Optional[Sequence[Any]], question_id: Any = "") -> List[Dict[str, Any]]:
    """
    Copy of `options` where every option is a dict with an `id` and a `text`.

    Options without an id get `opt_<question_id>_<index>`. The input list and
    its dicts are left untouched.
    """
    prefix = question_id if question_id not in (None, "") else "q"
    annotated = []
    for index, option in enumerate(options or []):
        entry = dict(option) if isinstance(option, Mapping) else {}
        entry["text"] = option_text(option)
        if entry.get("id") in (None, ""):
            entry["id"] = f"opt_{prefix}_{index}"
        annotated.append(entry)
    return annotated


def _as_index(value: Any) -> Optional[int]:
    if isinstance(value, bool):
        return None
    if isinstance(value, int):
        return value
    if isinstance(value, float) and value.is_integer():
        return int(value)
    return None


def resolve_option_id(answer_ref: Any, options: Optional[Sequence[Any]], question_id: Any = "") -> Optional[str]:
    """
    Resolve an answer reference to an option id.

    Tried in order: exact id (trimmed, case-sensitive), numeric index, option
    text (case-insensitive). When nothing matches, the trimmed reference itself
    is returned as the id. Only a missing reference resolves to None.
    """
    if answer_ref is None:
        return None

    annotated = annotate_options(options, question_id)
    ref_text = answer_text(answer_ref)

    for option in annotated:
        if answer_text(option["id"]) == ref_text:
            return option["id"]

    index = _as_index(answer_ref)
    if index is not None and 0 <= index < len(annotated):
        return annotated[index]["id"]

    ref_key = normalize_key(answer_ref)
    if ref_key:
        for option in annotated:
            if normalize_key(option["text"]) == ref_key:
                return option["id"]

    return ref_text
