"""Completeness checks for questions being edited.

Unlike `quiz_schema`, which rejects invalid payloads, these checks work
on partially filled editor state (plain dicts using the wire keys) and
report how far along a question is: a status, a completion percentage,
field-level errors and a list of missing fields.
"""

from typing import Any, Dict, List, Mapping, Optional, Union

from pydantic import BaseModel, ValidationError

from ..schemas import OptionIn, QuestionIn
from .option_content import is_valid_option
from .quiz_schema import first_position_gap

STATUS_COMPLETE = "complete"
STATUS_PARTIAL = "partial"
STATUS_INCOMPLETE = "incomplete"
STATUS_ERROR = "error"

QuestionLike = Union[QuestionIn, Mapping[str, Any]]


def _blank(value: Any) -> bool:
    return not isinstance(value, str) or not value.strip()


def _is_number(value: Any) -> bool:
    return isinstance(value, (int, float)) and not isinstance(value, bool)


def _list(value: Any) -> list:
    return value if isinstance(value, list) else []


def _get(value: Any, key: str) -> Any:
    return value.get(key) if isinstance(value, Mapping) else None


class _Checklist:
    """Accumulates requirement counts, errors and missing fields."""

    def __init__(self):
        self.total = 0
        self.met = 0
        self.errors: List[Dict[str, str]] = []
        self.missing: List[str] = []

    def expect(self, count: int = 1):
        self.total += count

    def ok(self):
        self.met += 1

    def fail(self, field: str, message: str, missing: Optional[str] = None):
        self.errors.append({"field": field, "message": message})
        if missing:
            self.missing.append(missing)

    def result(self) -> dict:
        percentage = round(self.met / self.total * 100) if self.total > 0 else 0
        if self.errors:
            status = STATUS_ERROR
        elif percentage == 100:
            status = STATUS_COMPLETE
        elif percentage > 0:
            status = STATUS_PARTIAL
        else:
            status = STATUS_INCOMPLETE
        return {
            "is_complete": status == STATUS_COMPLETE,
            "status": status,
            "errors": self.errors,
            "missing_fields": self.missing,
            "completion_percentage": percentage,
        }


def _option_filled(option: Any) -> bool:
    if not isinstance(option, Mapping):
        return False
    try:
        parsed = OptionIn.model_validate(option)
    except ValidationError:
        return False
    return is_valid_option(parsed)


def _check_choice(q: Mapping, c: _Checklist):
    c.expect(2)
    options = _list(q.get("options"))
    if len(options) < 2:
        c.fail("options", "At least 2 options are required", "Answer options")
        return
    c.ok()
    all_valid = True
    for index, option in enumerate(options):
        if not _option_filled(option):
            c.fail(f"options.{index}.text", f"Option {index + 1} text is required", f"Option {index + 1} text")
            all_valid = False
    if all_valid:
        c.ok()


def _correct_count(q: Mapping) -> int:
    return sum(1 for o in _list(q.get("options")) if isinstance(o, Mapping) and o.get("isCorrect"))


def _check_single_choice(q: Mapping, c: _Checklist):
    _check_choice(q, c)
    c.expect()
    if _correct_count(q) != 1:
        c.fail(
            "options",
            "Exactly one option must be marked as correct for single choice questions",
            "Correct answer selection",
        )
    else:
        c.ok()


def _check_multiple_choice(q: Mapping, c: _Checklist):
    _check_choice(q, c)
    c.expect()
    if _correct_count(q) == 0:
        c.fail(
            "options",
            "At least one option must be marked as correct for multiple choice questions",
            "Correct answer selections",
        )
    else:
        c.ok()
    data = q.get("multipleChoiceData")
    if not isinstance(data, Mapping):
        return
    min_sel = data.get("minSelections", 1)
    max_sel = data.get("maxSelections")
    for key, value in (("minSelections", min_sel), ("maxSelections", max_sel)):
        if value is not None and not _is_number(value):
            c.fail(f"multipleChoiceData.{key}", f"{key} must be a number")
    if not _is_number(min_sel):
        min_sel = None
    if not _is_number(max_sel):
        max_sel = None
    if min_sel is not None and min_sel < 1:
        c.fail("multipleChoiceData.minSelections", "Minimum selections must be at least 1")
    if max_sel and max_sel > len(_list(q.get("options"))):
        c.fail("multipleChoiceData.maxSelections", "Maximum selections cannot exceed number of options")
    if max_sel and min_sel is not None and min_sel > max_sel:
        c.fail("multipleChoiceData.minSelections", "Minimum selections cannot exceed maximum selections")


def _check_text_input(q: Mapping, c: _Checklist):
    c.expect(2)
    data = q.get("textInputData")
    if not isinstance(data, Mapping):
        c.fail("textInputData", "Text input configuration is required", "Text input configuration")
        return
    c.ok()
    answers = _list(data.get("acceptableAnswers"))
    if not answers:
        c.fail("textInputData.acceptableAnswers", "At least one acceptable answer is required", "Acceptable answers")
    elif any(_blank(a) for a in answers):
        c.fail("textInputData.acceptableAnswers", "Acceptable answers cannot be empty")
    else:
        c.ok()


def _check_dropdown(q: Mapping, c: _Checklist):
    c.expect(3)
    data = q.get("dropdownData")
    if not isinstance(data, Mapping):
        c.fail("dropdownData", "Dropdown configuration is required", "Dropdown configuration")
        return
    c.ok()
    if _blank(data.get("template")):
        c.fail("dropdownData.template", "Template text is required", "Template text")
    else:
        c.ok()
    dropdowns = _list(data.get("dropdowns"))
    if not dropdowns:
        c.fail("dropdownData.dropdowns", "At least one dropdown field is required", "Dropdown fields")
        return
    all_valid = True
    for index, dropdown in enumerate(dropdowns):
        c.expect(3)
        field = f"dropdownData.dropdowns.{index}"
        label = f"Dropdown {index + 1}"
        if not isinstance(dropdown, Mapping):
            c.fail(field, f"{label} is invalid")
            all_valid = False
            continue
        if _blank(dropdown.get("label")):
            c.fail(f"{field}.label", f"{label} label is required", f"{label} label")
            all_valid = False
        else:
            c.ok()
        options = _list(dropdown.get("options"))
        if len(options) < 2:
            c.fail(f"{field}.options", f"{label} needs at least 2 options", f"{label} options")
            all_valid = False
            continue
        if not all(isinstance(o, Mapping) for o in options):
            c.fail(f"{field}.options", f"{label} has invalid options")
            all_valid = False
            continue
        if any(_blank(o.get("text")) for o in options):
            c.fail(f"{field}.options", f"{label} has empty option texts")
            all_valid = False
        else:
            c.ok()
        if not any(o.get("isCorrect") for o in options):
            c.fail(f"{field}.options", f"{label} needs at least one correct answer", f"{label} correct answer")
            all_valid = False
        else:
            c.ok()
    if all_valid:
        c.ok()


def _check_item_content(content: Any, field: str, label: str, c: _Checklist) -> bool:
    if not isinstance(content, Mapping) or not content.get("type"):
        c.fail(f"{field}.content.type", f"{label} content type is required", f"{label} content type")
        return False
    kind = content["type"]
    if kind == "text":
        if _blank(content.get("text")):
            c.fail(f"{field}.content.text", f"{label} text is required")
            return False
    elif kind == "image":
        if _blank(content.get("imageUrl")):
            c.fail(f"{field}.content.imageUrl", f"{label} image URL is required")
            return False
        if _blank(content.get("altText")):
            c.fail(f"{field}.content.altText", f"{label} alt text is required for images")
            return False
    elif kind == "mixed":
        if _blank(content.get("text")) and _blank(content.get("imageUrl")):
            c.fail(f"{field}.content", f"{label} must have text or image")
            return False
    else:
        c.fail(f"{field}.content.type", f"{label} has invalid content type")
        return False
    c.ok()
    return True


def _check_positive(value: Any, field: str, message: str, missing: str, c: _Checklist) -> bool:
    if isinstance(value, bool) or not isinstance(value, int) or value < 1:
        c.fail(field, message, missing)
        return False
    c.ok()
    return True


def _check_item_id(item: Mapping, field: str, label: str, c: _Checklist) -> bool:
    if _blank(item.get("id")):
        c.fail(f"{field}.id", f"{label} ID is required", f"{label} ID")
        return False
    c.ok()
    return True


def _position_gap(values: List[Any]) -> Optional[int]:
    numbers = [v for v in values if isinstance(v, int) and not isinstance(v, bool)]
    if len(numbers) != len(values):
        return None
    return first_position_gap(numbers)


def _check_ordering(q: Mapping, c: _Checklist):
    c.expect(3)
    data = q.get("orderingData")
    if not isinstance(data, Mapping):
        c.fail("orderingData", "Ordering configuration is required", "Ordering configuration")
        return
    c.ok()
    if _blank(data.get("instructions")):
        c.fail("orderingData.instructions", "Instructions are required", "Instructions")
    else:
        c.ok()
    items = _list(data.get("items"))
    if len(items) < 2:
        c.fail("orderingData.items", "At least 2 items are required", "Ordering items")
        return
    if len(items) > 10:
        c.fail("orderingData.items", "Maximum 10 items allowed")
        return
    all_valid = True
    for index, item in enumerate(items):
        c.expect(3)
        field = f"orderingData.items.{index}"
        label = f"Item {index + 1}"
        if not isinstance(item, Mapping):
            c.fail(field, f"{label} is invalid")
            all_valid = False
            continue
        all_valid &= _check_item_id(item, field, label, c)
        all_valid &= _check_item_content(item.get("content"), field, label, c)
        all_valid &= _check_positive(
            item.get("correctPosition"),
            f"{field}.correctPosition",
            f"{label} must have a positive correctPosition",
            f"{label} correctPosition",
            c,
        )
    gap = _position_gap([_get(item, "correctPosition") for item in items])
    if gap is not None:
        c.fail("orderingData.items", f"Positions must be sequential starting from 1. Found gap at position {gap}")
        all_valid = False
    if all_valid:
        c.ok()


def _check_matching_side(data: Mapping, key: str, title: str, maximum: int, c: _Checklist):
    items = _list(data.get(key))
    if len(items) < 2:
        c.fail(f"matchingData.{key}", f"At least 2 {title.lower()} items are required", f"{title} items")
        return
    if len(items) > maximum:
        c.fail(f"matchingData.{key}", f"Maximum {maximum} {title.lower()} items allowed")
        return
    all_valid = True
    for index, item in enumerate(items):
        c.expect(3)
        field = f"matchingData.{key}.{index}"
        label = f"{title} item {index + 1}"
        if not isinstance(item, Mapping):
            c.fail(field, f"{label} is invalid")
            all_valid = False
            continue
        all_valid &= _check_item_id(item, field, label, c)
        all_valid &= _check_positive(
            item.get("position"), f"{field}.position", f"{label} must have a positive position", f"{label} position", c
        )
        all_valid &= _check_item_content(item.get("content"), field, label, c)
    if all_valid:
        c.ok()
    gap = _position_gap([_get(item, "position") for item in items])
    if gap is not None:
        c.fail(
            f"matchingData.{key}",
            f"{title} item positions must be sequential starting from 1. Found gap at position {gap}",
        )


def _check_matching(q: Mapping, c: _Checklist):
    c.expect(5)
    data = q.get("matchingData")
    if not isinstance(data, Mapping):
        c.fail("matchingData", "Matching configuration is required", "Matching configuration")
        return
    c.ok()
    if _blank(data.get("instructions")):
        c.fail("matchingData.instructions", "Instructions are required", "Instructions")
    else:
        c.ok()
    _check_matching_side(data, "leftItems", "Left", 8, c)
    _check_matching_side(data, "rightItems", "Right", 10, c)
    if not data.get("correctMatches"):
        c.fail("matchingData.correctMatches", "At least 1 correct match is required", "Correct matches")
    else:
        c.ok()


_CHECKS = {
    "SINGLE_CHOICE": _check_single_choice,
    "MULTIPLE_CHOICE": _check_multiple_choice,
    "TEXT_INPUT": _check_text_input,
    "DROPDOWN": _check_dropdown,
    "ORDERING": _check_ordering,
    "MATCHING": _check_matching,
}


def _as_mapping(question: QuestionLike) -> Mapping[str, Any]:
    if isinstance(question, BaseModel):
        return question.model_dump(by_alias=True, mode="json")
    return question


def validate_question(question: QuestionLike) -> dict:
    """Report how complete `question` is.

    Returns a dict with `is_complete`, `status` (complete, partial,
    incomplete or error), `errors` (`{field, message}`), `missing_fields`
    and `completion_percentage`. Unknown question types are checked as
    plain choice questions.
    """
    q = _as_mapping(question)
    c = _Checklist()
    c.expect()
    if _blank(q.get("text")):
        c.fail("text", "Question text is required", "Question text")
    else:
        c.ok()
    check = _CHECKS.get(str(q.get("questionType") or "SINGLE_CHOICE"), _check_choice)
    check(q, c)
    return c.result()


def get_question_completion_status(question: QuestionLike, validation_errors: Optional[list] = None) -> str:
    """Status for UI indicators; externally supplied errors force `error`."""
    if validation_errors:
        return STATUS_ERROR
    return validate_question(question)["status"]


def is_question_complete(question: QuestionLike) -> bool:
    return validate_question(question)["is_complete"]


def get_question_validation_summary(question: QuestionLike) -> str:
    """Human-readable summary of what a question still needs."""
    result = validate_question(question)
    if result["is_complete"]:
        return "Question is complete"
    if result["errors"]:
        return f"Has errors: {result['errors'][0]['message']}"
    if result["missing_fields"]:
        return f"Missing: {', '.join(result['missing_fields'])}"
    return "Question is incomplete"
