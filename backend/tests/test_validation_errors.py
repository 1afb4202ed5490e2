import pytest
from pydantic import ValidationError

from quizhub.schemas import QuizIn, ValidationIssue
from quizhub.utils.validation_errors import (
    format_error_path,
    get_question_errors,
    get_validation_summary,
    parse_validation_errors,
    question_has_errors,
)


def _issue(path, message="bad", code="custom"):
    return {"path": path, "message": message, "code": code}


def test_grouping_counts_every_issue_once():
    issues = [
        _issue(["title"]),
        _issue(["questions", 0, "text"]),
        _issue(["questions", 0, "options"]),
        _issue(["questions", 2, "options", 1, "content", "imageUrl"]),
        _issue([]),
        _issue(["questions", "x"]),
    ]
    grouped = parse_validation_errors(issues)
    assert grouped.has_errors
    assert grouped.total_error_count == len(issues)
    assert len(grouped.quiz_errors) == 3
    assert sorted(grouped.question_errors) == [0, 2]
    assert len(grouped.question_errors[0]) == 2


def test_empty_issue_list():
    grouped = parse_validation_errors([])
    assert not grouped.has_errors
    assert grouped.total_error_count == 0
    assert get_validation_summary(grouped) == "No validation errors"


def test_pydantic_errors_are_grouped():
    with pytest.raises(ValidationError) as exc_info:
        QuizIn.model_validate({"title": "A", "teacherId": "1", "questions": [{"text": "q", "questionType": "NOPE"}]})
    grouped = parse_validation_errors(exc_info.value)
    assert grouped.total_error_count == len(exc_info.value.errors())
    assert [i.path for i in grouped.quiz_errors] == [["title"]]
    assert question_has_errors(grouped, 0)
    assert get_question_errors(grouped, 0)[0].path == ["questions", 0, "questionType"]


@pytest.mark.parametrize("path, expected", [
    (["questions", 2, "options", 1, "content", "imageUrl"], "Question 3 - Option 2 - Content - Image URL"),
    (["questions", 2, "options", 1, "content", "mixed", "imageUrl"], "Question 3 - Option 2 - Content - Image URL"),
    (["questions", 0, "options", 0, "content", "text", "text"], "Question 1 - Option 1 - Content - Text"),
    (["questions", 0, "options", 0, "content", "text"], "Question 1 - Option 1 - Content - Text"),
    (["questions", 0, "dropdownData", "dropdowns", 1, "label"], "Question 1 - Dropdown Configuration - Dropdown 2 - Label"),
    (["questions", 4, "matchingData", "leftItems", 0], "Question 5 - Matching Configuration - Left Item 1"),
    (["questions", 1, "options", 0, "is_correct"], "Question 2 - Option 1 - Correct Answer"),
    (["title"], "Title"),
    ([], "General"),
])
def test_format_error_path(path, expected):
    assert format_error_path(path) == expected


def test_summary_wording():
    one = parse_validation_errors([_issue(["title"]), _issue(["questions", 0, "text"])])
    assert get_validation_summary(one) == "1 quiz error, 1 question with errors"
    many = parse_validation_errors([
        _issue(["title"]),
        _issue(["description"]),
        _issue(["questions", 0, "text"]),
        _issue(["questions", 1, "text"]),
        _issue(["questions", 1, "options"]),
    ])
    assert get_validation_summary(many) == "2 quiz errors, 2 questions with errors"


def test_question_helpers_are_null_safe():
    assert question_has_errors(None, 0) is False
    assert get_question_errors(None, 3) == []
    grouped = parse_validation_errors([ValidationIssue(path=["questions", 1, "text"], message="m", code="c")])
    assert not question_has_errors(grouped, 0)
    assert get_question_errors(grouped, 1)[0].message == "m"
