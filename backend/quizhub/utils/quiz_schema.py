"""Authoring-time validation of quiz definitions.

`validate_quiz_payload` runs the pydantic structural parse first and,
when the structure is sound, the rules that depend on the question
type. Both stages report `ValidationIssue`s whose paths point at the
offending field (`["questions", 2, "options"]`), ready for
`parse_validation_errors`.
"""

import re
from typing import Iterator, List, Mapping, Optional, Sequence, Tuple

from pydantic import ValidationError

from ..schemas import QuestionIn, QuestionType, QuizIn, ValidationIssue
from .option_content import is_valid_option
from .scoring import validate_multiple_choice_config
from .validation_errors import issues_from_pydantic

PLACEHOLDER_RE = re.compile(r"\{([^}]+)\}")


def _issue(path: list, message: str, code: str = "custom") -> ValidationIssue:
    return ValidationIssue(path=path, message=message, code=code)


def _has_text(*values: Optional[str]) -> bool:
    return any((v or "").strip() for v in values)


def first_position_gap(positions: Sequence[int]) -> Optional[int]:
    """Return the first 1-based slot missing from `positions`, or None if they run 1..n."""
    for expected, actual in enumerate(sorted(positions), start=1):
        if actual != expected:
            return expected
    return None


def _choice_rules(question: QuestionIn, base: list) -> Iterator[ValidationIssue]:
    options = question.options or []
    if len(options) < 2:
        yield _issue(base + ["options"], "At least 2 options are required", "too_small")
        return
    correct = [o for o in options if o.is_correct]
    if question.question_type == QuestionType.SINGLE_CHOICE:
        if len(correct) != 1:
            yield _issue(base + ["options"], "Exactly one option must be marked as correct for single choice questions")
        return
    report = validate_multiple_choice_config(options, question.multiple_choice_data)
    for error in report["errors"]:
        yield _issue(base + error["field"].split("."), error["message"])


def _dropdown_rules(question: QuestionIn, base: list) -> Iterator[ValidationIssue]:
    data = question.dropdown_data
    if data is None:
        yield _issue(base + ["dropdownData"], "Dropdown configuration is required", "invalid_type")
        return
    for k, dropdown in enumerate(data.dropdowns):
        if not any(o.is_correct for o in dropdown.options):
            yield _issue(
                base + ["dropdownData", "dropdowns", k, "options"],
                f"Dropdown {k + 1} needs at least one correct answer",
            )
    dropdown_ids = [d.id for d in data.dropdowns]
    for dropdown_id in dropdown_ids:
        if "{" + dropdown_id + "}" not in data.template:
            yield _issue(base + ["dropdownData", "template"], f"Template is missing placeholder {{{dropdown_id}}}")
    for placeholder in PLACEHOLDER_RE.findall(data.template):
        if placeholder not in dropdown_ids:
            yield _issue(
                base + ["dropdownData", "template"],
                f"Template placeholder {{{placeholder}}} has no matching dropdown",
            )


def _ordering_rules(question: QuestionIn, base: list) -> Iterator[ValidationIssue]:
    data = question.ordering_data
    if data is None:
        yield _issue(base + ["orderingData"], "Ordering configuration is required", "invalid_type")
        return
    gap = first_position_gap([item.correct_position for item in data.items])
    if gap is not None:
        yield _issue(
            base + ["orderingData", "items"],
            f"Positions must be sequential starting from 1. Found gap at position {gap}",
        )


def _matching_rules(question: QuestionIn, base: list) -> Iterator[ValidationIssue]:
    data = question.matching_data
    if data is None:
        yield _issue(base + ["matchingData"], "Matching configuration is required", "invalid_type")
        return
    for side, items in (("left", data.left_items), ("right", data.right_items)):
        gap = first_position_gap([item.position for item in items])
        if gap is not None:
            yield _issue(
                base + ["matchingData", f"{side}Items"],
                f"{side.capitalize()} item positions must be sequential starting from 1. Found gap at position {gap}",
            )


def check_question(question: QuestionIn, index: int) -> Iterator[ValidationIssue]:
    """Yield the type-dependent issues for the question at `index`."""
    base = ["questions", index]
    if not _has_text(question.text, question.text_sl, question.text_hr):
        yield _issue(base + ["text"], "Question must have text in at least one language")
    for j, option in enumerate(question.options or []):
        if not is_valid_option(option):
            yield _issue(base + ["options", j], "Option must have text in at least one language")

    qtype = question.question_type
    if qtype in (QuestionType.SINGLE_CHOICE, QuestionType.MULTIPLE_CHOICE):
        yield from _choice_rules(question, base)
    elif qtype == QuestionType.TEXT_INPUT:
        if question.text_input_data is None:
            yield _issue(base + ["textInputData"], "Text input configuration is required", "invalid_type")
    elif qtype == QuestionType.DROPDOWN:
        yield from _dropdown_rules(question, base)
    elif qtype == QuestionType.ORDERING:
        yield from _ordering_rules(question, base)
    elif qtype == QuestionType.MATCHING:
        yield from _matching_rules(question, base)


def check_quiz(quiz: QuizIn) -> List[ValidationIssue]:
    issues: List[ValidationIssue] = []
    for index, question in enumerate(quiz.questions):
        issues.extend(check_question(question, index))
    return issues


def validate_quiz_payload(payload: Mapping) -> Tuple[Optional[QuizIn], List[ValidationIssue]]:
    """Parse and check an authoring payload.

    Returns `(quiz, [])` on success and `(None, issues)` otherwise.
    """
    try:
        quiz = QuizIn.model_validate(payload)
    except ValidationError as exc:
        return None, issues_from_pydantic(exc)
    issues = check_quiz(quiz)
    if issues:
        return None, issues
    return quiz, []
