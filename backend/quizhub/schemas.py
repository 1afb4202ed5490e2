"""Pydantic request/response schemas used by the API.

Schemas keep API input/output shapes stable and provide structural
validation for quiz authoring, submissions and grading results. Python
attributes are snake_case; the wire format uses the camelCase keys the
quiz editor sends (`questionType`, `isCorrect`, `imageUrl`), keeping
language suffixes intact (`text_sl`, `altText_hr`).
"""

from enum import Enum
from typing import Annotated, Dict, List, Literal, Optional, Union

from pydantic import BaseModel, ConfigDict, Field

LANGUAGE_SUFFIXES = ("_sl", "_hr")


def camel_alias(name: str) -> str:
    """Return the wire alias for `name`, preserving a trailing language suffix.

    `image_url` becomes `imageUrl`, `alt_text_sl` becomes `altText_sl` and
    names without underscores are returned unchanged.
    """
    suffix = ""
    for candidate in LANGUAGE_SUFFIXES:
        if name.endswith(candidate) and len(name) > len(candidate):
            name, suffix = name[: -len(candidate)], candidate
            break
    head, *rest = name.split("_")
    return head + "".join(word[:1].upper() + word[1:] for word in rest) + suffix


class WireModel(BaseModel):
    """Base model accepting both wire aliases and attribute names."""
    model_config = ConfigDict(alias_generator=camel_alias, populate_by_name=True)


class QuestionType(str, Enum):
    """Closed set of supported question types."""
    SINGLE_CHOICE = "SINGLE_CHOICE"
    MULTIPLE_CHOICE = "MULTIPLE_CHOICE"
    TEXT_INPUT = "TEXT_INPUT"
    DROPDOWN = "DROPDOWN"
    ORDERING = "ORDERING"
    MATCHING = "MATCHING"


class ScoringMethod(str, Enum):
    """How multiple-choice selections are turned into points."""
    ALL_OR_NOTHING = "ALL_OR_NOTHING"
    PARTIAL_CREDIT = "PARTIAL_CREDIT"


class Role(str, Enum):
    ADMIN = "ADMIN"
    TEACHER = "TEACHER"
    USER = "USER"


class RegisterIn(BaseModel):
    """Payload for user registration/login endpoints."""
    username: str
    password: str


class TokenOut(BaseModel):
    """Authentication response containing an access token."""
    access_token: str


class RoleIn(BaseModel):
    role: Role


class TeacherIn(BaseModel):
    name: str
    email: Optional[str] = None


# -- option content ---------------------------------------------------------

class OptionTextContent(WireModel):
    type: Literal["text"] = "text"
    text: Optional[str] = None
    text_sl: Optional[str] = None
    text_hr: Optional[str] = None


class OptionMixedContent(WireModel):
    """Text and image content; either part may be empty."""
    type: Literal["mixed"] = "mixed"
    text: Optional[str] = None
    text_sl: Optional[str] = None
    text_hr: Optional[str] = None
    image_url: Optional[str] = None


OptionContent = Annotated[Union[OptionTextContent, OptionMixedContent], Field(discriminator="type")]


class OptionIn(WireModel):
    """A selectable answer.

    Legacy options only carry the flat `text`/`text_sl`/`text_hr` fields;
    newer ones also carry a `content` union. Both shapes are accepted.
    """
    id: Optional[str] = None
    text: Optional[str] = None
    text_sl: Optional[str] = None
    text_hr: Optional[str] = None
    content: Optional[OptionContent] = None
    is_correct: bool = False


# -- per-type configuration -------------------------------------------------

class PartialCreditRules(WireModel):
    correct_selection_points: float = Field(default=1, ge=0)
    incorrect_selection_penalty: float = Field(default=0, le=0)
    min_score: float = Field(default=0, ge=0)


class MultipleChoiceData(WireModel):
    scoring_method: ScoringMethod = ScoringMethod.ALL_OR_NOTHING
    min_selections: int = Field(default=1, ge=1)
    max_selections: Optional[int] = Field(default=None, ge=1)
    partial_credit_rules: Optional[PartialCreditRules] = None


class TextInputData(WireModel):
    acceptable_answers: List[Annotated[str, Field(min_length=1)]] = Field(
        min_length=1, description="At least one acceptable answer is required"
    )
    case_sensitive: bool = False
    placeholder: Optional[str] = None
    placeholder_sl: Optional[str] = None
    placeholder_hr: Optional[str] = None


class DropdownOption(WireModel):
    id: str = Field(min_length=1)
    text: str = Field(min_length=1)
    text_sl: Optional[str] = None
    text_hr: Optional[str] = None
    is_correct: bool


class DropdownField(WireModel):
    id: str = Field(min_length=1)
    label: str = Field(min_length=1)
    label_sl: Optional[str] = None
    label_hr: Optional[str] = None
    options: List[DropdownOption] = Field(min_length=2)


class DropdownScoring(WireModel):
    points_per_dropdown: float = Field(default=1, gt=0)
    require_all_correct: bool = True
    penalize_incorrect: bool = False


class DropdownData(WireModel):
    template: str = Field(min_length=1)
    template_sl: Optional[str] = None
    template_hr: Optional[str] = None
    dropdowns: List[DropdownField] = Field(min_length=1, max_length=10)
    scoring: Optional[DropdownScoring] = None


class ItemTextContent(WireModel):
    type: Literal["text"] = "text"
    text: str = Field(min_length=1)
    text_sl: Optional[str] = None
    text_hr: Optional[str] = None


class ItemImageContent(WireModel):
    type: Literal["image"] = "image"
    image_url: str = Field(min_length=1)
    alt_text: str = Field(min_length=1)
    alt_text_sl: Optional[str] = None
    alt_text_hr: Optional[str] = None


class ItemMixedContent(WireModel):
    type: Literal["mixed"] = "mixed"
    text: Optional[str] = None
    text_sl: Optional[str] = None
    text_hr: Optional[str] = None
    image_url: Optional[str] = None
    suffix: Optional[str] = None
    suffix_sl: Optional[str] = None
    suffix_hr: Optional[str] = None


ItemContent = Annotated[
    Union[ItemTextContent, ItemImageContent, ItemMixedContent], Field(discriminator="type")
]


class OrderingItem(WireModel):
    id: str = Field(min_length=1)
    content: ItemContent
    correct_position: int = Field(gt=0)


class OrderingData(WireModel):
    instructions: str = Field(min_length=1)
    instructions_sl: Optional[str] = None
    instructions_hr: Optional[str] = None
    items: List[OrderingItem] = Field(min_length=2, max_length=10)
    allow_partial_credit: bool = False
    exact_order_required: bool = True


class MatchingItem(WireModel):
    id: str = Field(min_length=1)
    position: int = Field(gt=0)
    content: ItemContent


class CorrectMatch(WireModel):
    left_id: str
    right_id: str
    explanation: Optional[str] = None
    explanation_sl: Optional[str] = None
    explanation_hr: Optional[str] = None


class MatchingData(WireModel):
    instructions: Optional[str] = None
    instructions_sl: Optional[str] = None
    instructions_hr: Optional[str] = None
    matching_type: Literal["one-to-one"] = "one-to-one"
    left_items: List[MatchingItem] = Field(min_length=2, max_length=8)
    right_items: List[MatchingItem] = Field(min_length=2, max_length=10)
    correct_matches: List[CorrectMatch] = Field(min_length=1)
    distractors: Optional[List[str]] = None


# -- authoring payloads -----------------------------------------------------

class QuestionIn(WireModel):
    """A question in an authoring payload.

    Structural checks happen here; the cross-field rules that depend on
    `question_type` live in `utils.quiz_schema`.
    """
    id: Optional[str] = None
    text: str = ""
    text_sl: Optional[str] = None
    text_hr: Optional[str] = None
    question_type: QuestionType = QuestionType.SINGLE_CHOICE
    options: Optional[List[OptionIn]] = None
    multiple_choice_data: Optional[MultipleChoiceData] = None
    text_input_data: Optional[TextInputData] = None
    dropdown_data: Optional[DropdownData] = None
    ordering_data: Optional[OrderingData] = None
    matching_data: Optional[MatchingData] = None


class QuizIn(WireModel):
    """Request format for creating or replacing a quiz."""
    title: str = Field(min_length=2)
    title_sl: Optional[str] = None
    title_hr: Optional[str] = None
    description: Optional[str] = None
    description_sl: Optional[str] = None
    description_hr: Optional[str] = None
    teacher_id: str = Field(min_length=1)
    questions: List[QuestionIn] = Field(min_length=1)


class QuizSubmissionIn(BaseModel):
    """Submitted answers keyed by question id.

    Single choice and text input answers are strings, multiple choice
    answers are lists of option ids and dropdown answers map dropdown ids
    to selected option ids.
    """
    answers: Dict[str, Union[str, List[str], Dict[str, str]]]


# -- validation grouping ----------------------------------------------------

class ValidationIssue(BaseModel):
    """A single schema-validation failure."""
    path: List[Union[int, str]]
    message: str
    code: str


class GroupedValidationErrors(WireModel):
    """Issues split into quiz-level errors and per-question buckets (0-based)."""
    quiz_errors: List[ValidationIssue] = Field(default_factory=list)
    question_errors: Dict[int, List[ValidationIssue]] = Field(default_factory=dict)
    has_errors: bool = False
    total_error_count: int = 0


# -- scoring results --------------------------------------------------------

Answer = Union[str, List[str], Dict[str, str]]


class QuestionScore(WireModel):
    """Outcome of grading one question."""
    question_id: str
    selected_answers: Optional[Answer] = None
    correct_answers: Union[str, List[str]] = ""
    is_correct: bool = False
    score: float = 0
    max_score: float = 1
    explanation: Optional[str] = None


class QuizScore(WireModel):
    total_score: float
    max_total_score: float
    percentage: float
    correct_questions: int
    total_questions: int
    question_results: List[QuestionScore]


class SubmissionResultItem(WireModel):
    """Per-question entry of the submission response."""
    question_id: str
    selected_option_id: Optional[Answer] = None
    correct_option_id: Union[str, List[str], None] = None
    is_correct: bool
    score: float
    max_score: float
    explanation: Optional[str] = None


class SubmissionResult(WireModel):
    """Response returned to a student after submitting a quiz."""
    score: float
    total_questions: int
    correct_answers: int
    results: List[SubmissionResultItem]
    scoring: QuizScore
    submission_id: Optional[int] = None
