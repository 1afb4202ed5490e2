import pytest

from quizhub.schemas import QuestionType, ScoringMethod
from quizhub.utils.question_types import (
    create_default_multiple_choice_data,
    get_answer_structure,
    is_multiple_choice,
    is_single_choice,
    validate_answer_format,
)


def test_predicates_accept_enum_and_string():
    assert is_multiple_choice(QuestionType.MULTIPLE_CHOICE)
    assert is_multiple_choice("MULTIPLE_CHOICE")
    assert not is_multiple_choice("SINGLE_CHOICE")
    assert is_single_choice(QuestionType.SINGLE_CHOICE)
    assert not is_single_choice("DROPDOWN")


@pytest.mark.parametrize("qtype, expected", [
    ("MULTIPLE_CHOICE", "array"),
    ("SINGLE_CHOICE", "string"),
    ("TEXT_INPUT", "string"),
    ("MATCHING", "string"),
])
def test_answer_structure(qtype, expected):
    assert get_answer_structure(qtype) == expected


def test_single_choice_answer_must_be_string():
    assert validate_answer_format("SINGLE_CHOICE", "12").is_valid
    check = validate_answer_format("SINGLE_CHOICE", ["12"])
    assert not check.is_valid
    assert check.error == "Single choice answers must be strings"


def test_multiple_choice_answer_must_be_list_of_strings():
    assert validate_answer_format("MULTIPLE_CHOICE", ["1", "2"]).is_valid
    assert validate_answer_format("MULTIPLE_CHOICE", []).is_valid
    not_list = validate_answer_format("MULTIPLE_CHOICE", "1")
    assert not_list.error == "Multiple choice answers must be arrays"
    mixed = validate_answer_format("MULTIPLE_CHOICE", ["1", 2])
    assert mixed.error == "Multiple choice answers must be arrays of strings"


def test_other_types_are_not_checked():
    assert validate_answer_format("DROPDOWN", {"d1": "a"}).is_valid
    assert validate_answer_format("ORDERING", 42).is_valid


def test_default_multiple_choice_data():
    data = create_default_multiple_choice_data()
    assert data.scoring_method == ScoringMethod.ALL_OR_NOTHING
    assert data.min_selections == 1
    assert data.max_selections is None
    assert data.partial_credit_rules is None
