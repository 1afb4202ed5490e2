import logging

from quizhub.schemas import MultipleChoiceData, OptionIn, PartialCreditRules, ScoringMethod
from quizhub.utils.scoring import (
    ScorableOption,
    ScorableQuestion,
    score_question,
    score_quiz,
    to_submission_result,
    validate_multiple_choice_config,
)


def _single(qid="q1", correct="a"):
    return ScorableQuestion(
        id=qid,
        question_type="SINGLE_CHOICE",
        options=[ScorableOption(id="a", correct=correct == "a"), ScorableOption(id="b", correct=correct == "b")],
        correct_option_id=correct,
    )


def _multiple(qid="q2", data=None):
    return ScorableQuestion(
        id=qid,
        question_type="MULTIPLE_CHOICE",
        answers_data=data if data is not None else {"scoringMethod": "ALL_OR_NOTHING", "minSelections": 1},
        options=[
            ScorableOption(id="x", correct=True),
            ScorableOption(id="y", correct=True),
            ScorableOption(id="z", correct=False),
        ],
    )


def test_single_choice_scores_one_or_zero():
    assert score_question(_single(), "a").score == 1
    wrong = score_question(_single(), "b")
    assert wrong.score == 0
    assert not wrong.is_correct
    assert wrong.correct_answers == "a"


def test_multiple_choice_all_or_nothing_ignores_order():
    result = score_question(_multiple(), ["y", "x"])
    assert result.is_correct
    assert result.score == 1
    assert result.explanation == "All correct answers selected"
    partial = score_question(_multiple(), ["x"])
    assert partial.score == 0
    assert partial.explanation == "Must select all correct answers and no incorrect ones"
    assert partial.correct_answers == ["x", "y"]


def test_partial_credit_strategy():
    data = {
        "scoringMethod": "PARTIAL_CREDIT",
        "partialCreditRules": {"correctSelectionPoints": 2, "incorrectSelectionPenalty": -1, "minScore": 0},
    }
    question = _multiple(data=data)
    one_hit = score_question(question, ["x"])
    assert (one_hit.score, one_hit.max_score, one_hit.is_correct) == (2, 4, False)
    hit_and_miss = score_question(question, ["x", "z"])
    assert hit_and_miss.score == 1
    only_miss = score_question(question, ["z"])
    assert only_miss.score == 0
    full = score_question(question, ["x", "y"])
    assert full.is_correct and full.score == 4


def test_partial_credit_without_rules_uses_defaults():
    question = _multiple(data={"scoringMethod": "PARTIAL_CREDIT"})
    result = score_question(question, ["x"])
    assert (result.score, result.max_score) == (1, 2)


def test_quiz_percentage_and_missing_answers():
    questions = [_single("q1"), _multiple("q2")]
    score = score_quiz(questions, {"q1": "a"})
    assert score.total_score == 1
    assert score.max_total_score == 2
    assert score.percentage == 50
    assert score.correct_questions == 1
    assert score.total_questions == 2
    missing = score.question_results[1]
    assert missing.selected_answers is None
    assert missing.explanation == "No answer provided"
    assert missing.correct_answers == ["x", "y"]


def test_empty_quiz_scores_zero():
    score = score_quiz([], {"q1": "a"})
    assert score.percentage == 0
    assert score.total_questions == 0
    assert score.question_results == []


def test_answer_for_unknown_question_is_ignored():
    score = score_quiz([_single("q1")], {"q1": "a", "nope": "b"})
    assert score.percentage == 100
    assert len(score.question_results) == 1


def test_unscorable_questions_do_not_fail_the_quiz(caplog):
    questions = [
        _single("q1"),
        _multiple("q2", data={}),
        ScorableQuestion(id="q3", question_type="ORDERING"),
        _single("q4"),
    ]
    answers = {"q1": "a", "q2": ["x", "y"], "q3": "anything", "q4": ["a"]}
    with caplog.at_level(logging.WARNING, logger="quizhub.grading"):
        score = score_quiz(questions, answers)
    by_id = {r.question_id: r for r in score.question_results}
    for qid in ("q2", "q3", "q4"):
        assert by_id[qid].explanation == "Error processing answer"
        assert by_id[qid].score == 0
    assert by_id["q1"].is_correct
    assert score.percentage == 25
    assert "scoring_failed" in caplog.text


def test_submission_result_keeps_legacy_fields():
    score = score_quiz([_single("q1"), _single("q2", correct="b")], {"q1": "a", "q2": "a"})
    result = to_submission_result(score, submission_id=9)
    assert result.score == 50
    assert result.correct_answers == 1
    assert result.total_questions == 2
    assert result.submission_id == 9
    first = result.results[0]
    assert (first.selected_option_id, first.correct_option_id, first.is_correct) == ("a", "a", True)
    wire = result.model_dump(by_alias=True)
    assert "totalQuestions" in wire
    assert "questionResults" in wire["scoring"]


def test_validate_multiple_choice_config():
    options = [OptionIn(text="a"), OptionIn(text="b")]
    report = validate_multiple_choice_config(options, MultipleChoiceData(max_selections=3))
    assert not report["is_valid"]
    assert [e["field"] for e in report["errors"]] == ["options", "multipleChoiceData.maxSelections"]

    options[0] = OptionIn(text="a", is_correct=True)
    data = MultipleChoiceData(
        scoring_method=ScoringMethod.PARTIAL_CREDIT,
        min_selections=1,
        max_selections=2,
        partial_credit_rules=PartialCreditRules(),
    )
    assert validate_multiple_choice_config(options, data) == {"is_valid": True, "errors": []}
    assert validate_multiple_choice_config(options)["is_valid"]


def test_unanswered_partial_credit_question_weighs_one_point():
    data = {"scoringMethod": "PARTIAL_CREDIT", "partialCreditRules": {"correctSelectionPoints": 2}}
    questions = [_single("q1"), _multiple("q2", data=data)]
    skipped = score_quiz(questions, {"q1": "a"})
    assert skipped.question_results[1].max_score == 1
    assert (skipped.total_score, skipped.max_total_score) == (1, 2)
    assert skipped.percentage == 50
    wrong = score_quiz(questions, {"q1": "a", "q2": ["z"]})
    assert wrong.question_results[1].max_score == 4
    assert wrong.percentage == 20
