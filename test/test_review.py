"""
Test cases for participant reviews and stored submission details.
"""
from datetime import datetime, timedelta
from types import SimpleNamespace

from logosquiz.quiz.review import answers_hidden, build_review, build_submission_detail
from logosquiz.quiz.scoring import SubmittedAnswer

NOW = datetime(2025, 3, 1, 12, 0, 0)


def make_question(question_id, correct_flags, marks=1):
    options = [
        SimpleNamespace(id=question_id * 10 + n, option_text=f"Option {n}", is_correct=flag)
        for n, flag in enumerate(correct_flags, start=1)
    ]
    return SimpleNamespace(id=question_id, question_text=f"Question {question_id}", marks=marks, options=options)


QUESTIONS = [make_question(1, [True, False, False]), make_question(2, [False, True], marks=2)]


class TestAnswersHidden:
    """Test cases for the answer-reveal gate."""

    def test_no_reveal_time_shows_answers(self):
        """Test answers are shown when no reveal time is set."""
        assert answers_hidden(None, NOW) is False

    def test_future_reveal_time_hides_answers(self):
        """Test answers stay hidden before the reveal time."""
        assert answers_hidden(NOW + timedelta(hours=1), NOW) is True

    def test_reveal_time_reached_shows_answers(self):
        """Test answers are shown at and after the reveal time."""
        assert answers_hidden(NOW, NOW) is False
        assert answers_hidden(NOW - timedelta(seconds=1), NOW) is False


class TestBuildReview:
    """Test cases for build_review."""

    def test_review_reveals_answer_key(self):
        """Test the review shows selected and correct options."""
        review = build_review(QUESTIONS, [SubmittedAnswer(1, 11), SubmittedAnswer(2, 21)], False)

        assert [item['question_id'] for item in review] == [1, 2]
        assert review[0]['is_correct'] is True
        assert review[0]['correct_option_id'] == 11
        assert review[1]['is_correct'] is False
        assert review[1]['selected_option_id'] == 21
        assert review[1]['correct_option_id'] == 22
        assert review[1]['marks'] == 2
        assert [opt['is_correct'] for opt in review[1]['options']] == [False, True]

    def test_hidden_review_masks_every_option(self):
        """Test hidden reviews mark no option correct and give no correct id."""
        review = build_review(QUESTIONS, [SubmittedAnswer(1, 11)], True)

        for item in review:
            assert item['correct_option_id'] is None
            assert all(opt['is_correct'] is False for opt in item['options'])
        # The verdict itself stays visible
        assert review[0]['is_correct'] is True

    def test_unanswered_question(self):
        """Test unanswered questions have no selection and are incorrect."""
        review = build_review(QUESTIONS, [], False)
        assert review[0]['selected_option_id'] is None
        assert review[0]['is_correct'] is False

    def test_question_without_correct_option(self):
        """Test a question with no correct option is never marked correct."""
        question = make_question(3, [False, False])
        review = build_review([question], [SubmittedAnswer(3, 31)], False)
        assert review[0]['correct_option_id'] is None
        assert review[0]['is_correct'] is False


class TestBuildSubmissionDetail:
    """Test cases for build_submission_detail."""

    def test_uses_stored_verdict(self):
        """Test the stored is_correct snapshot is reported, not a re-grade."""
        stored = [
            SimpleNamespace(question_id=1, selected_option_id=12, is_correct=True),
            SimpleNamespace(question_id=None, selected_option_id=None, is_correct=True),
        ]
        detail = build_submission_detail(QUESTIONS, stored)

        assert detail[0]['is_correct'] is True
        assert detail[0]['marks_earned'] == 1
        assert [opt['is_selected'] for opt in detail[0]['options']] == [False, True, False]
        assert detail[0]['correct_option_id'] == 11
        assert detail[1]['answered'] is False
        assert detail[1]['marks_earned'] == 0
