"""
Marks-weighted scoring of a submitted answer set.

Scoring is lenient by policy: an unknown question id is ignored, an option
id that does not belong to the question scores as incorrect, and missing
marks count as 1. Nothing in here raises for malformed data.
"""
import math
from typing import Iterable, NamedTuple, Optional


class SubmittedAnswer(NamedTuple):
    question_id: int
    selected_option_id: Optional[int]


class AnswerRecord(NamedTuple):
    question_id: int
    selected_option_id: int
    is_correct: bool


class ScoreResult(NamedTuple):
    earned_marks: int
    total_marks: int
    total_questions: int
    answer_records: list

    @property
    def percentage(self) -> float:
        return calculate_percentage(self.earned_marks, self.total_marks)

    @property
    def rounded_score(self) -> int:
        return round_half_up(self.percentage)


def question_marks(question) -> int:
    # Legacy rows may carry no marks
    return question.marks or 1


def calculate_percentage(earned_marks: int, total_marks: int) -> float:
    if total_marks <= 0:
        return 0.0
    return (earned_marks / total_marks) * 100


def round_half_up(value: float) -> int:
    return int(math.floor(value + 0.5))


def index_answers(answers: Iterable[SubmittedAnswer]) -> dict:
    """
    Map question id to the selected option id.

    The first answer for a question wins; answers without a selected
    option count as unanswered.
    """
    selected = {}
    for answer in answers:
        if answer.selected_option_id is None:
            continue
        selected.setdefault(answer.question_id, answer.selected_option_id)
    return selected


def score_answers(questions, answers: Iterable[SubmittedAnswer]) -> ScoreResult:
    """
    Score answers against the quiz questions.

    Every question adds its marks to the total, answered or not. Only
    answered questions produce an answer record.

    Args:
        questions: Quiz questions, each with ``id``, ``marks`` and ``options``
            (each option with ``id`` and ``is_correct``)
        answers: Submitted answers

    Returns:
        ScoreResult with earned marks, total marks and answer records
    """
    selected_by_question = index_answers(answers)
    earned_marks = 0
    total_marks = 0
    records = []
    question_count = 0

    for question in questions:
        question_count += 1
        marks = question_marks(question)
        total_marks += marks

        if question.id not in selected_by_question:
            continue

        selected_option_id = selected_by_question[question.id]
        selected_option = next(
            (opt for opt in question.options if opt.id == selected_option_id), None
        )
        is_correct = bool(selected_option is not None and selected_option.is_correct)
        if is_correct:
            earned_marks += marks

        records.append(AnswerRecord(question.id, selected_option_id, is_correct))

    return ScoreResult(earned_marks, total_marks, question_count, records)


def find_misconfigured_questions(questions) -> list:
    """Ids of questions that do not have exactly one correct option."""
    return [
        question.id for question in questions
        if sum(1 for opt in question.options if opt.is_correct) != 1
    ]
