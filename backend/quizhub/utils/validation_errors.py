"""Grouping and formatting of quiz validation issues.

The functions here post-process issues that were already produced by
schema validation; they do not validate anything themselves. Issues
whose path starts with `["questions", <index>, ...]` are bucketed under
that (0-based) question index, everything else is a quiz-level error.
"""

from typing import Iterable, List, Mapping, Optional, Sequence, Union

from pydantic import ValidationError

from ..schemas import GroupedValidationErrors, ValidationIssue, camel_alias

IssueLike = Union[ValidationIssue, Mapping]

# collections whose numeric index follows them in a path
INDEXED_SEGMENTS = {
    "questions": "Question",
    "options": "Option",
    "dropdowns": "Dropdown",
    "items": "Item",
    "leftItems": "Left Item",
    "rightItems": "Right Item",
}

# Discriminator tags pydantic inserts after `content` in union error locations.
CONTENT_TAGS = frozenset({"text", "image", "mixed"})

SEGMENT_LABELS = {
    "dropdownData": "Dropdown Configuration",
    "orderingData": "Ordering Configuration",
    "matchingData": "Matching Configuration",
    "content": "Content",
    "imageUrl": "Image URL",
    "text": "Text",
    "template": "Template",
    "label": "Label",
    "isCorrect": "Correct Answer",
}


def issues_from_pydantic(exc: ValidationError) -> List[ValidationIssue]:
    """Convert a pydantic `ValidationError` into `{path, message, code}` issues."""
    return [
        ValidationIssue(path=list(err.get("loc", ())), message=err.get("msg", ""), code=err.get("type", "custom"))
        for err in exc.errors()
    ]


def _as_issue(issue: IssueLike) -> ValidationIssue:
    if isinstance(issue, ValidationIssue):
        return issue
    return ValidationIssue(
        path=list(issue.get("path") or []),
        message=str(issue.get("message", "")),
        code=str(issue.get("code", "custom")),
    )


def parse_validation_errors(issues: Union[ValidationError, Iterable[IssueLike]]) -> GroupedValidationErrors:
    """Split issues into quiz-level errors and per-question buckets.

    Every issue lands in exactly one place, so `total_error_count` always
    equals the number of issues given.
    """
    if isinstance(issues, ValidationError):
        issues = issues_from_pydantic(issues)
    quiz_errors: List[ValidationIssue] = []
    question_errors: dict = {}
    for raw in issues:
        issue = _as_issue(raw)
        path = issue.path
        is_question_issue = (
            len(path) > 1
            and path[0] == "questions"
            and isinstance(path[1], int)
            and not isinstance(path[1], bool)
        )
        if is_question_issue:
            question_errors.setdefault(path[1], []).append(issue)
        else:
            quiz_errors.append(issue)
    total = len(quiz_errors) + sum(len(v) for v in question_errors.values())
    return GroupedValidationErrors(
        quiz_errors=quiz_errors,
        question_errors=question_errors,
        has_errors=total > 0,
        total_error_count=total,
    )


def _is_index(value) -> bool:
    return isinstance(value, int) and not isinstance(value, bool)


def format_error_path(path: Sequence[Union[int, str]]) -> str:
    """Render an issue path as a breadcrumb such as `Question 3 - Option 2 - Text`.

    Indices after known collections become 1-based labels, known field
    names get display labels and any other string segment is capitalized
    as-is. Unrecognized paths never raise.
    """
    if not path:
        return "General"
    parts: List[str] = []
    i = 0
    while i < len(path):
        segment = path[i]
        nxt = path[i + 1] if i + 1 < len(path) else None
        if isinstance(segment, str):
            key = camel_alias(segment)
            if key in INDEXED_SEGMENTS and _is_index(nxt):
                parts.append(f"{INDEXED_SEGMENTS[key]} {nxt + 1}")
                i += 2
                continue
            if key == "content" and nxt in CONTENT_TAGS and i + 2 < len(path):
                parts.append(SEGMENT_LABELS[key])
                i += 2
                continue
            if key in SEGMENT_LABELS:
                parts.append(SEGMENT_LABELS[key])
            elif segment:
                parts.append(segment[0].upper() + segment[1:])
        i += 1
    return " - ".join(parts)


def get_validation_summary(errors: GroupedValidationErrors) -> str:
    """One-line summary like `2 quiz errors, 3 questions with errors`."""
    if not errors.has_errors:
        return "No validation errors"
    parts = []
    quiz_count = len(errors.quiz_errors)
    if quiz_count > 0:
        parts.append(f"{quiz_count} quiz error{'s' if quiz_count > 1 else ''}")
    question_count = len(errors.question_errors)
    if question_count > 0:
        parts.append(f"{question_count} question{'s' if question_count > 1 else ''} with errors")
    return ", ".join(parts)


def question_has_errors(errors: Optional[GroupedValidationErrors], question_index: int) -> bool:
    if errors is None:
        return False
    return question_index in errors.question_errors


def get_question_errors(errors: Optional[GroupedValidationErrors], question_index: int) -> List[ValidationIssue]:
    if errors is None:
        return []
    return list(errors.question_errors.get(question_index, []))
