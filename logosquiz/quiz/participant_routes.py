"""
Participant routes for taking shared quizzes.

Participants are anonymous. They can:
- Open a published quiz through its share link
- Submit answers and get their score with a review
"""
from flask import jsonify, request, current_app
from sqlalchemy.exc import SQLAlchemyError
from logosquiz import db
from logosquiz.quiz import quiz_bp, internal_error_response
from logosquiz.quiz.gates import resolve_visitor_ip
from logosquiz.quiz.service import QuizService
from logosquiz.quiz.validation import validate_submission_payload


@quiz_bp.route('/take/<share_id>', methods=['GET'])
def take_quiz(share_id):
    """
    Serve a published quiz for taking.
    Question and option order is reshuffled on every request when enabled.
    """
    visitor_ip = resolve_visitor_ip(request.headers)
    try:
        quiz_data = QuizService.serve_quiz(share_id, visitor_ip)
        return jsonify({'success': True, 'quiz': quiz_data}), 200
    except SQLAlchemyError:
        db.session.rollback()
        current_app.logger.exception(f"Database error serving quiz {share_id}")
        return internal_error_response()


@quiz_bp.route('/submissions', methods=['POST'])
def submit_quiz():
    """
    Submit answers for a quiz.

    Request body:
    {
        "quiz_id": 1,
        "participant_data": {"Name": "Ada"},
        "time_spent_seconds": 95,  // Optional
        "answers": [{"question_id": 10, "selected_option_id": 31}, ...]
    }
    """
    visitor_ip = resolve_visitor_ip(request.headers)
    submission = validate_submission_payload(request.get_json(silent=True))

    try:
        result = QuizService.submit_answers(submission, visitor_ip)
        return jsonify({
            'success': True,
            'message': 'Quiz submitted successfully',
            **result
        }), 201
    except SQLAlchemyError:
        db.session.rollback()
        current_app.logger.exception(f"Database error submitting quiz {submission.quiz_id}")
        return internal_error_response()
