from quizhub.schemas import QuestionIn
from quizhub.utils.question_validation import (
    get_question_completion_status,
    get_question_validation_summary,
    is_question_complete,
    validate_question,
)


def _single():
    return {
        "text": "Capital of Slovenia?",
        "questionType": "SINGLE_CHOICE",
        "options": [
            {"text": "Ljubljana", "isCorrect": True},
            {"content": {"type": "mixed", "imageUrl": "/zagreb.png"}, "isCorrect": False},
        ],
    }


def test_complete_single_choice():
    result = validate_question(_single())
    assert result["is_complete"]
    assert result["status"] == "complete"
    assert result["completion_percentage"] == 100
    assert result["errors"] == []
    assert get_question_validation_summary(_single()) == "Question is complete"


def test_accepts_question_model():
    assert is_question_complete(QuestionIn.model_validate(_single()))


def test_blank_question_reports_missing_fields():
    result = validate_question({"text": "", "questionType": "SINGLE_CHOICE", "options": []})
    assert result["status"] == "error"
    assert "Question text" in result["missing_fields"]
    assert "Answer options" in result["missing_fields"]
    assert result["completion_percentage"] == 0
    assert get_question_validation_summary({"text": ""}).startswith("Has errors: Question text is required")


def test_empty_option_text_is_flagged_per_index():
    question = _single()
    question["options"].append({"text": "  "})
    result = validate_question(question)
    assert {"field": "options.2.text", "message": "Option 3 text is required"} in result["errors"]
    assert 0 < result["completion_percentage"] < 100


def test_multiple_choice_selection_bounds():
    question = {
        "text": "Pick",
        "questionType": "MULTIPLE_CHOICE",
        "options": [{"text": "a", "isCorrect": True}, {"text": "b"}],
        "multipleChoiceData": {"minSelections": 2, "maxSelections": 1},
    }
    fields = [e["field"] for e in validate_question(question)["errors"]]
    assert fields == ["multipleChoiceData.minSelections"]


def test_text_input_answers():
    question = {"text": "Spell cat", "questionType": "TEXT_INPUT", "textInputData": {"acceptableAnswers": ["cat", " "]}}
    result = validate_question(question)
    assert result["errors"] == [
        {"field": "textInputData.acceptableAnswers", "message": "Acceptable answers cannot be empty"}
    ]


def test_ordering_gap_and_complete_matching():
    ordering = {
        "text": "Order",
        "questionType": "ORDERING",
        "orderingData": {
            "instructions": "Sort",
            "items": [
                {"id": "a", "content": {"type": "text", "text": "x"}, "correctPosition": 1},
                {"id": "b", "content": {"type": "image", "imageUrl": "/y.png", "altText": "y"}, "correctPosition": 4},
            ],
        },
    }
    messages = [e["message"] for e in validate_question(ordering)["errors"]]
    assert messages == ["Positions must be sequential starting from 1. Found gap at position 2"]

    def item(i, pos):
        return {"id": f"i{i}", "position": pos, "content": {"type": "mixed", "text": f"t{i}"}}

    matching = {
        "text": "Match",
        "questionType": "MATCHING",
        "matchingData": {
            "instructions": "Match them",
            "leftItems": [item(1, 1), item(2, 2)],
            "rightItems": [item(3, 1), item(4, 2)],
            "correctMatches": [{"leftId": "i1", "rightId": "i3"}],
        },
    }
    assert is_question_complete(matching)


def test_external_errors_force_error_status():
    assert get_question_completion_status(_single()) == "complete"
    assert get_question_completion_status(_single(), [{"path": ["text"]}]) == "error"


def test_non_numeric_selection_bounds_are_reported():
    question = {
        "text": "Pick",
        "questionType": "MULTIPLE_CHOICE",
        "options": [{"text": "a", "isCorrect": True}, {"text": "b"}],
        "multipleChoiceData": {"minSelections": 1, "maxSelections": "3"},
    }
    result = validate_question(question)
    assert result["status"] == "error"
    assert [e["field"] for e in result["errors"]] == ["multipleChoiceData.maxSelections"]


def test_malformed_nested_entries_are_reported():
    dropdown = {
        "text": "Fill",
        "questionType": "DROPDOWN",
        "dropdownData": {"template": "A {{0}}", "dropdowns": ["a"]},
    }
    assert validate_question(dropdown)["errors"] == [
        {"field": "dropdownData.dropdowns.0", "message": "Dropdown 1 is invalid"}
    ]

    dropdown["dropdownData"]["dropdowns"] = [{"label": "Animal", "options": ["cat", "dog"]}]
    assert validate_question(dropdown)["errors"] == [
        {"field": "dropdownData.dropdowns.0.options", "message": "Dropdown 1 has invalid options"}
    ]

    ordering = {
        "text": "Order",
        "questionType": "ORDERING",
        "orderingData": {"instructions": "Sort", "items": ["a", "b"]},
    }
    fields = [e["field"] for e in validate_question(ordering)["errors"]]
    assert fields == ["orderingData.items.0", "orderingData.items.1"]

    matching = {
        "text": "Match",
        "questionType": "MATCHING",
        "matchingData": {
            "instructions": "Match them",
            "leftItems": ["x", "y"],
            "rightItems": [
                {"id": "r1", "position": 1, "content": {"type": "text", "text": "one"}},
                {"id": "r2", "position": 2, "content": {"type": "text", "text": "two"}},
            ],
            "correctMatches": [{"leftId": "x", "rightId": "r1"}],
        },
    }
    result = validate_question(matching)
    assert result["status"] == "error"
    assert [e["field"] for e in result["errors"]] == ["matchingData.leftItems.0", "matchingData.leftItems.1"]
