"""
Pytest configuration and fixtures for testing.
Runs the app against an in-memory SQLite database.
"""
import os

# Set test environment variables BEFORE the app package is imported,
# the blueprint reads API_PREFIX at import time
os.environ['FLASK_ENV'] = 'testing'
os.environ['SECRET_KEY'] = 'sfndsfojoriwew09rjfjndsknfkj'
os.environ['DATABASE_URL'] = 'sqlite:///:memory:'
os.environ['API_PREFIX'] = '/api'
os.environ['APP_BASE_URL'] = 'http://quiz.test'

import pytest
from flask_login import FlaskLoginClient

from logosquiz import create_app, db
from logosquiz.auth.models import User
from logosquiz.quiz.models import Quiz, Question, QuestionOption
from logosquiz.quiz.service import QuizService

DEFAULT_QUESTIONS = [
    ('What is the capital of France?', 1, [('Paris', True), ('Lyon', False), ('Nice', False)]),
    ('What is the capital of Japan?', 2, [('Osaka', False), ('Tokyo', True), ('Kyoto', False)]),
]


@pytest.fixture
def app():
    """Create application for testing with a fresh database."""
    app = create_app()
    app.config['TESTING'] = True
    app.test_client_class = FlaskLoginClient

    # Tests and requests share one app context, and with it one db.session
    ctx = app.app_context()
    ctx.push()

    yield app

    db.session.remove()
    db.drop_all()
    ctx.pop()


@pytest.fixture
def client(app):
    """Anonymous test client."""
    return app.test_client()


@pytest.fixture
def creator(app):
    """Create a quiz creator."""
    user = User(email='creator@example.com', full_name='Quiz Creator')
    db.session.add(user)
    db.session.commit()
    return user


@pytest.fixture
def other_creator(app):
    """Create a second creator who owns nothing of the first one's."""
    user = User(email='other@example.com', full_name='Other Creator')
    db.session.add(user)
    db.session.commit()
    return user


@pytest.fixture
def creator_client(app, creator):
    """Test client logged in as the creator."""
    return app.test_client(user=creator)


@pytest.fixture
def other_creator_client(app, other_creator):
    """Test client logged in as the other creator."""
    return app.test_client(user=other_creator)


@pytest.fixture
def make_quiz(creator):
    """
    Factory for quizzes owned by the creator.

    questions is a list of (text, marks, [(option_text, is_correct), ...]).
    """
    def _make_quiz(questions=None, **settings):
        settings.setdefault('title', 'Capitals')
        settings.setdefault('is_published', True)
        settings.setdefault('participant_fields', [])
        quiz = Quiz(creator_id=creator.id, **settings)

        for q_idx, (text, marks, options) in enumerate(DEFAULT_QUESTIONS if questions is None else questions):
            question = Question(question_text=text, marks=marks, order_index=q_idx)
            for o_idx, (option_text, is_correct) in enumerate(options):
                question.options.append(QuestionOption(
                    option_text=option_text, is_correct=is_correct, order_index=o_idx
                ))
            quiz.questions.append(question)

        QuizService.publish_if_needed(quiz)
        db.session.add(quiz)
        db.session.commit()
        return quiz

    return _make_quiz


@pytest.fixture
def quiz(make_quiz):
    """Published two-question quiz worth 3 marks."""
    return make_quiz()


def option_id(question, text):
    """Id of the option of ``question`` with the given text."""
    return next(opt.id for opt in question.options if opt.option_text == text)


def submission_body(quiz, choices, **extra):
    """
    Submission body choosing option texts per question, in quiz order.
    A None choice leaves the question unanswered.
    """
    answers = [
        {'question_id': question.id, 'selected_option_id': option_id(question, choice)}
        for question, choice in zip(quiz.questions, choices)
        if choice is not None
    ]
    body = {'quiz_id': quiz.id, 'participant_data': {}, 'answers': answers}
    body.update(extra)
    return body
