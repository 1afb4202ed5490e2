"""Quiz scoring.

Scoring is a pure computation over the authoritative question data and
the submitted answers. Single choice questions compare the selected
option id with `correct_option_id`. Multiple choice questions use the
strategy named by their `scoring_method`: all-or-nothing (default) or
partial credit. Other question types cannot be graded yet and score 0.

A question that cannot be scored never fails the whole submission: the
problem is logged and the question is recorded as incorrect.
"""

import logging
from typing import Dict, List, Optional, Sequence, Union

from pydantic import BaseModel, Field

from ..schemas import (
    Answer,
    MultipleChoiceData,
    OptionIn,
    PartialCreditRules,
    QuestionScore,
    QuestionType,
    QuizScore,
    ScoringMethod,
    SubmissionResult,
    SubmissionResultItem,
)
from .question_types import is_multiple_choice, is_single_choice

logger = logging.getLogger("quizhub.grading")


class ScorableOption(BaseModel):
    id: str
    correct: bool = False


class ScorableQuestion(BaseModel):
    """Answer-key view of a question.

    `answers_data` holds the stored type configuration; for multiple
    choice questions it must parse as `MultipleChoiceData`.
    """
    id: str
    question_type: Union[QuestionType, str] = QuestionType.SINGLE_CHOICE
    answers_data: Optional[dict] = None
    options: List[ScorableOption] = Field(default_factory=list)
    correct_option_id: Optional[str] = None

    def correct_option_ids(self) -> List[str]:
        return [o.id for o in self.options if o.correct]


class AllOrNothing:
    """Full point only when the selection equals the set of correct options."""

    def score(self, question: ScorableQuestion, selected: List[str]) -> QuestionScore:
        correct = question.correct_option_ids()
        is_correct = set(selected) == set(correct)
        return QuestionScore(
            question_id=question.id,
            selected_answers=selected,
            correct_answers=correct,
            is_correct=is_correct,
            score=1 if is_correct else 0,
            max_score=1,
            explanation="All correct answers selected"
            if is_correct
            else "Must select all correct answers and no incorrect ones",
        )


class PartialCredit:
    """Points per correct selection, a penalty per wrong one, floored at `min_score`."""

    def __init__(self, rules: PartialCreditRules):
        self.rules = rules

    def score(self, question: ScorableQuestion, selected: List[str]) -> QuestionScore:
        correct = question.correct_option_ids()
        correct_set = set(correct)
        selected_set = set(selected)
        hits = len(selected_set & correct_set)
        misses = len(selected_set - correct_set)
        raw = hits * self.rules.correct_selection_points + misses * self.rules.incorrect_selection_penalty
        return QuestionScore(
            question_id=question.id,
            selected_answers=selected,
            correct_answers=correct,
            is_correct=selected_set == correct_set,
            score=max(raw, self.rules.min_score),
            max_score=len(correct) * self.rules.correct_selection_points,
            explanation=f"{hits} correct, {misses} incorrect",
        )


def scoring_strategy(data: MultipleChoiceData):
    """Pick the strategy configured by `data.scoring_method`."""
    if data.scoring_method == ScoringMethod.PARTIAL_CREDIT:
        return PartialCredit(data.partial_credit_rules or PartialCreditRules())
    return AllOrNothing()


def _score_single_choice(question: ScorableQuestion, selected: str) -> QuestionScore:
    is_correct = selected == question.correct_option_id
    return QuestionScore(
        question_id=question.id,
        selected_answers=selected,
        correct_answers=question.correct_option_id or "",
        is_correct=is_correct,
        score=1 if is_correct else 0,
        max_score=1,
    )


def _score_multiple_choice(question: ScorableQuestion, selected: List[str]) -> QuestionScore:
    if not question.answers_data:
        raise ValueError(f"Multiple choice question {question.id} missing configuration data")
    data = MultipleChoiceData.model_validate(question.answers_data)
    return scoring_strategy(data).score(question, selected)


def score_question(question: ScorableQuestion, answer: Answer) -> QuestionScore:
    """Score one answered question.

    Raises ValueError when the answer shape does not fit the question
    type, the configuration is missing or the type cannot be graded.
    """
    if is_single_choice(question.question_type):
        if not isinstance(answer, str):
            raise ValueError(f"Single choice question {question.id} received non-string answer")
        return _score_single_choice(question, answer)
    if is_multiple_choice(question.question_type):
        if not isinstance(answer, list):
            raise ValueError(f"Multiple choice question {question.id} received non-array answer")
        return _score_multiple_choice(question, answer)
    raise ValueError(f"Unsupported question type: {question.question_type}")


def _unanswered(question: ScorableQuestion) -> QuestionScore:
    # Skipped and unscorable questions weigh one point whatever their scoring method.
    if is_single_choice(question.question_type):
        correct: Union[str, List[str]] = question.correct_option_id or ""
    else:
        correct = question.correct_option_ids()
    return QuestionScore(
        question_id=question.id,
        selected_answers=None,
        correct_answers=correct,
        is_correct=False,
        score=0,
        max_score=1,
        explanation="No answer provided",
    )


def score_quiz(questions: Sequence[ScorableQuestion], answers: Dict[str, Answer]) -> QuizScore:
    """Score every question and aggregate the result.

    `percentage` is total points over maximum points times 100, and 0 for
    a quiz without questions.
    """
    results: List[QuestionScore] = []
    total = 0.0
    maximum = 0.0
    correct_questions = 0
    for question in questions:
        answer = answers.get(question.id)
        if answer is None:
            result = _unanswered(question)
        else:
            try:
                result = score_question(question, answer)
            except ValueError as exc:
                logger.warning("scoring_failed question=%s: %s", question.id, exc)
                result = QuestionScore(
                    question_id=question.id,
                    selected_answers=answer,
                    correct_answers=[],
                    is_correct=False,
                    score=0,
                    max_score=1,
                    explanation="Error processing answer",
                )
        results.append(result)
        total += result.score
        maximum += result.max_score
        if result.is_correct:
            correct_questions += 1
    percentage = (total / maximum) * 100 if maximum > 0 else 0.0
    return QuizScore(
        total_score=total,
        max_total_score=maximum,
        percentage=percentage,
        correct_questions=correct_questions,
        total_questions=len(questions),
        question_results=results,
    )


def to_submission_result(score: QuizScore, submission_id: Optional[int] = None) -> SubmissionResult:
    """Build the submit response: legacy summary fields plus the detailed score."""
    items = [
        SubmissionResultItem(
            question_id=r.question_id,
            selected_option_id=r.selected_answers,
            correct_option_id=r.correct_answers,
            is_correct=r.is_correct,
            score=r.score,
            max_score=r.max_score,
            explanation=r.explanation,
        )
        for r in score.question_results
    ]
    return SubmissionResult(
        score=score.percentage,
        total_questions=score.total_questions,
        correct_answers=score.correct_questions,
        results=items,
        scoring=score,
        submission_id=submission_id,
    )


def validate_multiple_choice_config(
    options: Sequence[OptionIn], data: Optional[MultipleChoiceData] = None
) -> dict:
    """Check a multiple choice configuration against its options.

    Returns `{"is_valid": bool, "errors": [{"field", "message"}]}`;
    `field` is a dotted wire path relative to the question.
    """
    errors = []
    if not any(o.is_correct for o in options):
        errors.append({"field": "options", "message": "At least one option must be marked as correct"})
    if data is not None:
        if data.max_selections and data.max_selections > len(options):
            errors.append({
                "field": "multipleChoiceData.maxSelections",
                "message": "Maximum selections cannot exceed number of options",
            })
        if data.min_selections < 1:
            errors.append({
                "field": "multipleChoiceData.minSelections",
                "message": "Minimum selections must be at least 1",
            })
        if data.max_selections and data.min_selections > data.max_selections:
            errors.append({
                "field": "multipleChoiceData.minSelections",
                "message": "Minimum selections cannot exceed maximum selections",
            })
        rules = data.partial_credit_rules
        if data.scoring_method == ScoringMethod.PARTIAL_CREDIT and rules is not None:
            prefix = "multipleChoiceData.partialCreditRules"
            if rules.correct_selection_points < 0:
                errors.append({
                    "field": f"{prefix}.correctSelectionPoints",
                    "message": "Correct selection points must be non-negative",
                })
            if rules.incorrect_selection_penalty > 0:
                errors.append({
                    "field": f"{prefix}.incorrectSelectionPenalty",
                    "message": "Incorrect selection penalty must be non-positive",
                })
            if rules.min_score < 0:
                errors.append({"field": f"{prefix}.minScore", "message": "Minimum score must be non-negative"})
    return {"is_valid": not errors, "errors": errors}
