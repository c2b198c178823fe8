"""
Creator routes for quiz management.

Creators can:
- Create, edit, publish and delete their quizzes
- Import questions from their other quizzes
- View analytics and individual submissions
- Reset the attempts of one IP address
"""
from flask import jsonify, request, current_app
from flask_login import login_required, current_user
from sqlalchemy.exc import SQLAlchemyError
from logosquiz import db
from logosquiz.quiz import quiz_bp, internal_error_response
from logosquiz.quiz import repository
from logosquiz.quiz.models import Quiz, Question, QuestionOption
from logosquiz.quiz.serializers import serialize_quiz_detail, serialize_quiz_summary, serialize_question
from logosquiz.quiz.service import QuizService
from logosquiz.quiz.validation import validate_quiz_payload
from logosquiz.security import SecurityLogger

QUIZ_SETTINGS = (
    'title', 'description', 'time_limit_seconds', 'available_from', 'available_until',
    'is_published', 'randomize_questions', 'randomize_options', 'max_attempts_per_ip',
    'show_answers_after', 'participant_fields',
)


def _build_questions(questions_data):
    questions = []
    for q_data in questions_data:
        question = Question(
            question_text=q_data['question_text'],
            marks=q_data['marks'],
            order_index=q_data['order_index'],
        )
        for opt_data in q_data['options']:
            question.options.append(QuestionOption(
                option_text=opt_data['option_text'],
                is_correct=opt_data['is_correct'],
                order_index=opt_data['order_index'],
            ))
        questions.append(question)
    return questions


@quiz_bp.route('/quizzes', methods=['GET'])
@login_required
def list_quizzes():
    """
    List the current creator's quizzes, newest first.
    """
    try:
        quizzes = repository.list_creator_quizzes(current_user.id)
        quizzes_data = [
            serialize_quiz_summary(quiz, repository.count_quiz_submissions(quiz.id))
            for quiz in quizzes
        ]
        return jsonify({'success': True, 'quizzes': quizzes_data}), 200
    except SQLAlchemyError:
        db.session.rollback()
        current_app.logger.exception(f"Database error listing quizzes for user {current_user.id}")
        return internal_error_response()


@quiz_bp.route('/quizzes', methods=['POST'])
@login_required
def create_quiz():
    """
    Create a quiz with its questions.

    Request body:
    {
        "title": "Quiz Title",
        "description": "Optional description",
        "time_limit_seconds": 600,  // Optional
        "available_from": "2025-01-01T09:00:00Z",  // Optional
        "available_until": null,  // Optional
        "is_published": true,
        "randomize_questions": false,
        "randomize_options": false,
        "max_attempts_per_ip": 3,  // Optional, 0 or null means unlimited
        "show_answers_after": null,  // Optional
        "participant_fields": [{"label": "Name", "required": true}],
        "questions": [
            {"question_text": "...", "marks": 1,
             "options": [{"option_text": "...", "is_correct": true}, ...]}
        ]
    }
    """
    data = validate_quiz_payload(request.get_json(silent=True))

    try:
        quiz = Quiz(creator_id=current_user.id)
        for name in QUIZ_SETTINGS:
            setattr(quiz, name, data[name])
        quiz.questions = _build_questions(data['questions'])
        QuizService.publish_if_needed(quiz)

        db.session.add(quiz)
        db.session.commit()

        current_app.logger.info(f"Quiz {quiz.id} created by user {current_user.id}")
        return jsonify({
            'success': True,
            'message': 'Quiz created successfully',
            'quiz': serialize_quiz_detail(quiz)
        }), 201
    except SQLAlchemyError:
        db.session.rollback()
        current_app.logger.exception(f"Database error creating quiz for user {current_user.id}")
        return internal_error_response()


@quiz_bp.route('/quizzes/questions', methods=['GET'])
@login_required
def list_importable_questions():
    """
    The creator's quizzes with their questions, for importing into another quiz.
    Pass ?exclude=<quiz_id> to leave out the quiz being edited.
    """
    exclude_id = request.args.get('exclude', type=int)
    try:
        quizzes = repository.list_creator_quizzes(current_user.id, exclude_id=exclude_id)
        quizzes_data = [
            {
                'id': quiz.id,
                'title': quiz.title,
                'questions': [serialize_question(q) for q in quiz.questions],
            }
            for quiz in quizzes
            if quiz.questions
        ]
        return jsonify({'success': True, 'quizzes': quizzes_data}), 200
    except SQLAlchemyError:
        db.session.rollback()
        current_app.logger.exception(f"Database error listing questions for user {current_user.id}")
        return internal_error_response()


@quiz_bp.route('/quizzes/<int:quiz_id>', methods=['GET'])
@login_required
def get_quiz(quiz_id):
    """
    Get quiz details including questions and the answer key.
    """
    try:
        quiz = QuizService.get_owned_quiz(quiz_id, current_user.id)
        return jsonify({'success': True, 'quiz': serialize_quiz_detail(quiz)}), 200
    except SQLAlchemyError:
        db.session.rollback()
        current_app.logger.exception(f"Database error loading quiz {quiz_id}")
        return internal_error_response()


@quiz_bp.route('/quizzes/<int:quiz_id>', methods=['PUT', 'PATCH'])
@login_required
def update_quiz(quiz_id):
    """
    Update quiz settings. A supplied questions list replaces all questions;
    answers already stored keep their recorded result.
    """
    quiz = QuizService.get_owned_quiz(quiz_id, current_user.id)
    data = validate_quiz_payload(request.get_json(silent=True), partial=True)

    try:
        for name in QUIZ_SETTINGS:
            if name in data:
                setattr(quiz, name, data[name])
        if 'questions' in data:
            quiz.questions = _build_questions(data['questions'])
        QuizService.publish_if_needed(quiz)

        db.session.commit()

        current_app.logger.info(f"Quiz {quiz.id} updated by user {current_user.id}")
        return jsonify({
            'success': True,
            'message': 'Quiz updated successfully',
            'quiz': serialize_quiz_detail(quiz)
        }), 200
    except SQLAlchemyError:
        db.session.rollback()
        current_app.logger.exception(f"Database error updating quiz {quiz_id}")
        return internal_error_response()


@quiz_bp.route('/quizzes/<int:quiz_id>', methods=['DELETE'])
@login_required
def delete_quiz(quiz_id):
    """
    Delete a quiz with its questions and submissions. Irreversible.
    """
    quiz = QuizService.get_owned_quiz(quiz_id, current_user.id)
    try:
        db.session.delete(quiz)
        db.session.commit()
        SecurityLogger.log_quiz_deleted(quiz_id, current_user.id)
        return jsonify({'success': True, 'message': 'Quiz deleted successfully'}), 200
    except SQLAlchemyError:
        db.session.rollback()
        current_app.logger.exception(f"Database error deleting quiz {quiz_id}")
        return internal_error_response()


@quiz_bp.route('/quizzes/<int:quiz_id>/analytics', methods=['GET'])
@login_required
def quiz_analytics(quiz_id):
    """
    Ranked submissions, averages and attempts per IP address.
    """
    try:
        quiz = QuizService.get_owned_quiz(quiz_id, current_user.id)
        return jsonify({'success': True, 'analytics': QuizService.get_analytics(quiz)}), 200
    except SQLAlchemyError:
        db.session.rollback()
        current_app.logger.exception(f"Database error building analytics for quiz {quiz_id}")
        return internal_error_response()


@quiz_bp.route('/quizzes/<int:quiz_id>/submissions/<int:submission_id>', methods=['GET'])
@login_required
def submission_detail(quiz_id, submission_id):
    """
    Per-question detail of one submission, as recorded when it was submitted.
    """
    try:
        quiz = QuizService.get_owned_quiz(quiz_id, current_user.id)
        detail = QuizService.get_submission_detail(quiz, submission_id)
        return jsonify({'success': True, 'submission': detail}), 200
    except SQLAlchemyError:
        db.session.rollback()
        current_app.logger.exception(f"Database error loading submission {submission_id}")
        return internal_error_response()


@quiz_bp.route('/quizzes/<int:quiz_id>/reset-ip', methods=['POST'])
@login_required
def reset_ip_attempts(quiz_id):
    """
    Delete every submission from one IP address so it can take the quiz again.

    Request body:
    {
        "ip_address": "1.2.3.4"
    }
    """
    quiz = QuizService.get_owned_quiz(quiz_id, current_user.id)

    data = request.get_json(silent=True) or {}
    ip_address = data.get('ip_address')
    if not isinstance(ip_address, str) or not ip_address.strip():
        return jsonify({'success': False, 'error': 'IP address is required', 'kind': 'VALIDATION_FAILED'}), 400

    try:
        deleted_count = QuizService.reset_ip_attempts(quiz, ip_address.strip(), current_user.id)
        return jsonify({'success': True, 'deleted_count': deleted_count}), 200
    except SQLAlchemyError:
        db.session.rollback()
        current_app.logger.exception(f"Database error resetting attempts for quiz {quiz_id}")
        return internal_error_response()
