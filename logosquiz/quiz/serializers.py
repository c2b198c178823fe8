"""
JSON shapes for quizzes.

Participants never receive is_correct flags; creators get the full answer key.
"""
from datetime import datetime
from typing import Optional

from logosquiz.config import get_config
from logosquiz.quiz.participants import parse_participant_fields


def to_iso(value: Optional[datetime]) -> Optional[str]:
    """Render a naive UTC datetime as an ISO-8601 string with a Z suffix."""
    if value is None:
        return None
    return value.isoformat() + "Z"


def share_url_for(quiz) -> Optional[str]:
    if quiz.is_published and quiz.share_id:
        return get_config().share_url(quiz.share_id)
    return None


def _quiz_settings(quiz) -> dict:
    return {
        'id': quiz.id,
        'title': quiz.title,
        'description': quiz.description,
        'time_limit_seconds': quiz.time_limit_seconds,
        'available_from': to_iso(quiz.available_from),
        'available_until': to_iso(quiz.available_until),
        'is_published': quiz.is_published,
        'share_id': quiz.share_id if quiz.is_published else None,
        'share_url': share_url_for(quiz),
        'randomize_questions': quiz.randomize_questions,
        'randomize_options': quiz.randomize_options,
        'max_attempts_per_ip': quiz.max_attempts_per_ip,
        'show_answers_after': to_iso(quiz.show_answers_after),
        'participant_fields': [f.to_dict() for f in parse_participant_fields(quiz.participant_fields)],
    }


def serialize_quiz_summary(quiz, submission_count: int) -> dict:
    """Dashboard row for a creator's quiz list."""
    data = _quiz_settings(quiz)
    data.update({
        'question_count': quiz.get_question_count(),
        'submission_count': submission_count,
        'total_marks': quiz.get_total_marks(),
        'created_at': to_iso(quiz.created_at),
        'updated_at': to_iso(quiz.updated_at),
    })
    return data


def serialize_question(question) -> dict:
    return {
        'id': question.id,
        'question_text': question.question_text,
        'marks': question.effective_marks,
        'order_index': question.order_index,
        'options': [
            {
                'id': opt.id,
                'option_text': opt.option_text,
                'is_correct': opt.is_correct,
                'order_index': opt.order_index,
            }
            for opt in question.options
        ],
    }


def serialize_quiz_detail(quiz) -> dict:
    """Full quiz for its owner, answer key included."""
    data = _quiz_settings(quiz)
    data.update({
        'question_count': quiz.get_question_count(),
        'total_marks': quiz.get_total_marks(),
        'created_at': to_iso(quiz.created_at),
        'updated_at': to_iso(quiz.updated_at),
        'questions': [serialize_question(q) for q in quiz.questions],
    })
    return data


def serialize_quiz_for_taking(quiz, presented_questions: list) -> dict:
    """
    Quiz as served to a participant.

    Args:
        presented_questions: (question, options) pairs in presentation order
    """
    return {
        'id': quiz.id,
        'title': quiz.title,
        'description': quiz.description,
        'time_limit_seconds': quiz.time_limit_seconds,
        'participant_fields': [f.to_dict() for f in parse_participant_fields(quiz.participant_fields)],
        'questions': [
            {
                'id': question.id,
                'question_text': question.question_text,
                'marks': question.effective_marks,
                'options': [
                    {'id': opt.id, 'option_text': opt.option_text}
                    for opt in options
                ],
            }
            for question, options in presented_questions
        ],
    }
