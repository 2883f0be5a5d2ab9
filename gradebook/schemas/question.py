from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator
from typing import Optional, List, Any, Union

from gradebook.core.constants import DEFAULT_QUESTION_MARKS, QUESTION_TYPE_ALIASES, QuestionTypeEnum
from gradebook.engine.normalizer import annotate_options, is_boolean_token, is_positive_boolean, is_skipped, resolve_option_id

class Option(BaseModel):
    id: Optional[str] = None
    text: str

class QuestionBase(BaseModel):
    id: Optional[str] = None
    type: QuestionTypeEnum
    question_text: str = Field(..., min_length=1)
    options: Optional[List[Option]] = None
    marks: int = Field(default=DEFAULT_QUESTION_MARKS, gt=0)

    model_config = ConfigDict(use_enum_values=True)

    @field_validator("type", mode="before")
    @classmethod
    def _resolve_type_alias(cls, v):
        if isinstance(v, str):
            v = v.strip().lower()
            return QUESTION_TYPE_ALIASES.get(v, v)
        return v

class QuestionCreate(QuestionBase):
    correct_answer: Optional[Union[bool, int, str]] = None
    # Legacy multi-select key; folded into correct_answer when the question is saved.
    correct_answers: Optional[List[Union[bool, int, str]]] = Field(default=None, exclude=True)

    @model_validator(mode="after")
    def _check_answer_key(self):
        if self.correct_answer is None and self.correct_answers:
            self.correct_answer = self.correct_answers[0]

        if self.type == QuestionTypeEnum.MCQ.value:
            if not self.options:
                raise ValueError("Multiple choice questions need at least one option")
            if is_skipped(self.correct_answer):
                raise ValueError("Multiple choice questions need a correct answer")
            if self.id:
                self._assign_option_ids()
        elif self.type == QuestionTypeEnum.TRUE_FALSE.value:
            if self.correct_answer is None:
                raise ValueError("True/false questions need a correct answer")
            if not is_boolean_token(self.correct_answer):
                raise ValueError(f"True/false answer must be a boolean, \"true\", \"false\", \"صحيح\", 0 or 1; got {self.correct_answer!r}")
            self.options = None
            self.correct_answer = is_positive_boolean(self.correct_answer)
        else:
            self.options = None
            self.correct_answer = None
        return self

    def _assign_option_ids(self):
        """Give every option a stable id and store the correct answer as one of them."""
        options = [option.model_dump() for option in self.options]
        annotated = annotate_options(options, self.id)
        ids = [option["id"] for option in annotated]
        if len(ids) != len(set(ids)):
            raise ValueError(f"Question {self.id}: option ids must be unique")

        correct_id = resolve_option_id(self.correct_answer, annotated, self.id)
        if correct_id not in ids:
            raise ValueError(f"Question {self.id}: correct answer must match exactly one option")

        self.options = [Option(id=option["id"], text=option["text"]) for option in annotated]
        self.correct_answer = correct_id

    def with_id(self, question_id: str) -> "QuestionCreate":
        data = self.model_dump()
        data["id"] = question_id
        return QuestionCreate(**data)

class Question(BaseModel):
    """Stored question as authored, answer key included."""
    id: str
    type: str
    question_text: Optional[str] = None
    options: Optional[List[Option]] = None
    correct_answer: Optional[Any] = None
    marks: int = DEFAULT_QUESTION_MARKS

class QuestionPublic(BaseModel):
    # Student view: no correct_answer / correct_answers.
    id: str
    type: str
    question_text: Optional[str] = None
    options: Optional[List[Option]] = None
    marks: int
    order: int
