"""Question type predicates and answer-shape checks.

Helpers here are pure: they never touch the database and never raise for
a malformed answer, returning an `AnswerFormatCheck` instead so callers
can collect every problem in a submission before responding.
"""

from typing import Any, Literal, NamedTuple, Optional, Union

from ..schemas import MultipleChoiceData, QuestionType, ScoringMethod

QuestionTypeLike = Union[QuestionType, str]


class AnswerFormatCheck(NamedTuple):
    is_valid: bool
    error: Optional[str] = None


def _coerce(question_type: QuestionTypeLike) -> str:
    return question_type.value if isinstance(question_type, QuestionType) else str(question_type)


def is_multiple_choice(question_type: QuestionTypeLike) -> bool:
    return _coerce(question_type) == QuestionType.MULTIPLE_CHOICE.value


def is_single_choice(question_type: QuestionTypeLike) -> bool:
    return _coerce(question_type) == QuestionType.SINGLE_CHOICE.value


def get_answer_structure(question_type: QuestionTypeLike) -> Literal["string", "array"]:
    """Return `"array"` for multi-select types and `"string"` for everything else."""
    return "array" if is_multiple_choice(question_type) else "string"


def validate_answer_format(question_type: QuestionTypeLike, answer: Any) -> AnswerFormatCheck:
    """Check that `answer` has the shape expected for `question_type`.

    Single choice answers must be strings; multiple choice answers must be
    lists of strings. Other types are not checked here. Correctness is
    not considered.
    """
    if is_single_choice(question_type):
        if not isinstance(answer, str):
            return AnswerFormatCheck(False, "Single choice answers must be strings")
    elif is_multiple_choice(question_type):
        if not isinstance(answer, list):
            return AnswerFormatCheck(False, "Multiple choice answers must be arrays")
        if not all(isinstance(item, str) for item in answer):
            return AnswerFormatCheck(False, "Multiple choice answers must be arrays of strings")
    return AnswerFormatCheck(True)


def create_default_multiple_choice_data() -> MultipleChoiceData:
    """Default configuration for a newly authored multiple choice question."""
    return MultipleChoiceData(
        scoring_method=ScoringMethod.ALL_OR_NOTHING,
        min_selections=1,
        max_selections=None,
        partial_credit_rules=None,
    )
