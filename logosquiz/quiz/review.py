"""
Per-question review payloads.

The participant review hides the answer key while a quiz's
show_answers_after instant is still in the future. The right/wrong verdict
per question stays visible either way.
"""
from datetime import datetime
from typing import Iterable, Optional

from logosquiz.quiz.scoring import SubmittedAnswer, index_answers, question_marks


def answers_hidden(show_answers_after: Optional[datetime], now: datetime) -> bool:
    """True while the answer key must not be revealed."""
    return show_answers_after is not None and show_answers_after > now


def correct_option_of(question):
    """The designated correct option, or None when the question has none."""
    return next((opt for opt in question.options if opt.is_correct), None)


def build_review(questions, answers: Iterable[SubmittedAnswer], hide_correct_answers: bool) -> list:
    """
    Build the review shown to a participant right after submitting.

    Questions are reported in quiz order. A question only counts as correct
    when a correct option exists and it is the selected one.

    Args:
        questions: Quiz questions with their options
        answers: The submitted answers
        hide_correct_answers: Result of the answer-reveal gate

    Returns:
        List of per-question dicts
    """
    selected_by_question = index_answers(answers)
    review = []

    for question in questions:
        selected_option_id = selected_by_question.get(question.id)
        correct_option = correct_option_of(question)
        correct_option_id = correct_option.id if correct_option is not None else None
        is_correct = (
            selected_option_id is not None
            and correct_option_id is not None
            and selected_option_id == correct_option_id
        )

        review.append({
            'question_id': question.id,
            'question_text': question.question_text,
            'marks': question_marks(question),
            'options': [
                {
                    'id': opt.id,
                    'option_text': opt.option_text,
                    'is_correct': False if hide_correct_answers else bool(opt.is_correct),
                }
                for opt in question.options
            ],
            'selected_option_id': selected_option_id,
            'correct_option_id': None if hide_correct_answers else correct_option_id,
            'is_correct': is_correct,
        })

    return review


def build_submission_detail(questions, stored_answers) -> list:
    """
    Build the creator's view of one stored submission.

    The verdict comes from each Answer's is_correct snapshot, so editing the
    quiz afterwards does not change how a past submission is graded.
    """
    answer_by_question = {}
    for answer in stored_answers:
        if answer.question_id is not None:
            answer_by_question.setdefault(answer.question_id, answer)

    detail = []
    for question in questions:
        answer = answer_by_question.get(question.id)
        correct_option = correct_option_of(question)
        selected_option_id = answer.selected_option_id if answer is not None else None

        detail.append({
            'question_id': question.id,
            'question_text': question.question_text,
            'marks': question_marks(question),
            'options': [
                {
                    'id': opt.id,
                    'option_text': opt.option_text,
                    'is_correct': bool(opt.is_correct),
                    'is_selected': opt.id == selected_option_id,
                }
                for opt in question.options
            ],
            'answered': answer is not None,
            'selected_option_id': selected_option_id,
            'correct_option_id': correct_option.id if correct_option is not None else None,
            'is_correct': bool(answer.is_correct) if answer is not None else False,
            'marks_earned': question_marks(question) if answer is not None and answer.is_correct else 0,
        })

    return detail
