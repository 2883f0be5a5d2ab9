from enum import Enum


DEFAULT_QUESTION_MARKS = 1
DEFAULT_EXAM_DURATION_MINUTES = 30
RECENT_RESULTS_LIMIT = 5

# Accepted spellings of a positive true/false answer: native boolean, its string
# serialization, the Arabic UI token for "correct", and the legacy 0 sentinel.
POSITIVE_BOOLEAN_STRINGS = ("true", "صحيح")
POSITIVE_BOOLEAN_NUMBER = 0
# Spellings an author may use for a "false" answer key.
NEGATIVE_BOOLEAN_STRINGS = ("false",)
NEGATIVE_BOOLEAN_NUMBER = 1

class QuestionTypeEnum(str, Enum):
    MCQ = "mcq"
    TRUE_FALSE = "true_false"
    ESSAY = "essay"

# Older exams were authored with "multiple_choice" before the type was renamed.
QUESTION_TYPE_ALIASES = {
    "multiple_choice": QuestionTypeEnum.MCQ.value,
}

class GradeDetailEnum(str, Enum):
    CORRECT = "correct"
    INCORRECT = "incorrect"
    SKIPPED = "skipped"
    ESSAY = "essay"
    NO_CORRECT_DEFINED = "no_correct_defined"
    UNKNOWN_TYPE = "unknown_type"

class SubmissionStateEnum(str, Enum):
    NOT_STARTED = "not_started"
    EDITABLE = "editable"
    LOCKED = "locked"
