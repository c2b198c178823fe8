"""
Quiz module for sharing quizzes through public links.

Creators author quizzes and read analytics through the creator routes;
anonymous participants take and submit them through the participant routes.
"""
from flask import Blueprint, current_app, jsonify
from logosquiz.config import get_config
from logosquiz.quiz.errors import InternalError, QuizServiceError

quiz_bp = Blueprint('quiz', __name__, url_prefix=get_config().API_PREFIX)


@quiz_bp.errorhandler(QuizServiceError)
def handle_quiz_error(error):
    """Render domain errors as the usual JSON failure body."""
    if error.status_code >= 500:
        current_app.logger.error(f"Quiz service error: {error.message}")
    return jsonify(error.to_dict()), error.status_code


def internal_error_response():
    error = InternalError()
    return jsonify(error.to_dict()), error.status_code


from logosquiz.quiz import creator_routes  # noqa: E402,F401
from logosquiz.quiz import participant_routes  # noqa: E402,F401
