"""Quiz service: serving, submitting, analytics and attempt resets."""
import random
import secrets
from datetime import datetime
from typing import Optional

from flask import current_app

from logosquiz.config import get_config
from logosquiz.common.time_formatter import format_duration, format_time, format_time_minutes_seconds
from logosquiz.quiz import repository
from logosquiz.quiz.analytics import (
    aggregate_ip_attempts, calculate_average_score, calculate_average_time, rank_submissions,
)
from logosquiz.quiz.errors import (
    AttemptLimitReached, Forbidden, NotAvailable, NotFound, QuizNotFound, QuizNotPublished,
)
from logosquiz.quiz.gates import check_attempt_limit, check_availability
from logosquiz.quiz.models import Quiz
from logosquiz.quiz.participants import format_participant_display, parse_participant_fields
from logosquiz.quiz.review import answers_hidden, build_review, build_submission_detail
from logosquiz.quiz.scoring import find_misconfigured_questions, score_answers
from logosquiz.quiz.serializers import serialize_quiz_for_taking, to_iso
from logosquiz.quiz.shuffler import shuffle
from logosquiz.quiz.validation import SubmissionInput, validate_participant_values
from logosquiz.security import SecurityLogger


class QuizService:
    """Service class for the participant and creator quiz flows."""

    @staticmethod
    def generate_share_id() -> str:
        """Generate a share id not used by any other quiz."""
        while True:
            share_id = secrets.token_urlsafe(get_config().SHARE_ID_BYTES)
            if repository.find_quiz_by_share_id(share_id, must_be_published=False) is None:
                return share_id

    @staticmethod
    def publish_if_needed(quiz: Quiz) -> None:
        """Give a published quiz a share id; an existing one is kept."""
        if quiz.is_published and not quiz.share_id:
            quiz.share_id = QuizService.generate_share_id()

    @staticmethod
    def _enforce_attempt_limit(quiz: Quiz, visitor_ip: str) -> None:
        decision = check_attempt_limit(
            quiz.max_attempts_per_ip,
            lambda: repository.count_submissions(quiz.id, visitor_ip),
        )
        if not decision.allowed:
            SecurityLogger.log_attempt_limit_reached(
                quiz.id, visitor_ip, decision.attempt_count, decision.max_attempts_per_ip
            )
            raise AttemptLimitReached(decision.attempt_count, decision.max_attempts_per_ip)

    @staticmethod
    def serve_quiz(share_id: str, visitor_ip: str, now: Optional[datetime] = None,
                   rng: Optional[random.Random] = None) -> dict:
        """
        Serve a published quiz for taking.

        Checks the attempt cap first, then the availability window, then
        shuffles questions and options as configured. A new order is drawn
        on every call.

        Args:
            share_id: Public share id of the quiz
            visitor_ip: Resolved visitor IP
            now: Current time (naive UTC), injectable for tests
            rng: Random source, injectable for tests

        Raises:
            NotFound, AttemptLimitReached, NotAvailable
        """
        now = now or datetime.utcnow()
        rng = rng or random.Random()

        quiz = repository.find_quiz_by_share_id(share_id, must_be_published=True)
        if quiz is None or not quiz.questions:
            raise NotFound("Quiz not found")

        QuizService._enforce_attempt_limit(quiz, visitor_ip)

        availability = check_availability(quiz.available_from, quiz.available_until, now)
        if not availability.is_available:
            raise NotAvailable(availability.reason, to_iso(availability.boundary))

        questions = list(quiz.questions)
        if quiz.randomize_questions:
            questions = shuffle(questions, rng)

        presented = []
        for question in questions:
            options = list(question.options)
            if quiz.randomize_options:
                options = shuffle(options, rng)
            presented.append((question, options))

        return serialize_quiz_for_taking(quiz, presented)

    @staticmethod
    def submit_answers(submission: SubmissionInput, visitor_ip: str, now: Optional[datetime] = None) -> dict:
        """
        Score and store a participant's answers.

        Raises:
            QuizNotFound, QuizNotPublished, AttemptLimitReached, ValidationFailed
        """
        now = now or datetime.utcnow()

        quiz = repository.find_quiz_by_id(submission.quiz_id)
        if quiz is None:
            raise QuizNotFound()
        if not quiz.is_published:
            raise QuizNotPublished()

        QuizService._enforce_attempt_limit(quiz, visitor_ip)

        fields = parse_participant_fields(quiz.participant_fields)
        validate_participant_values(fields, submission.participant_data)

        questions = list(quiz.questions)
        misconfigured = find_misconfigured_questions(questions)
        if misconfigured:
            current_app.logger.warning(
                f"Quiz {quiz.id} has questions without exactly one correct option: {misconfigured}"
            )

        result = score_answers(questions, submission.answers)
        hide = answers_hidden(quiz.show_answers_after, now)
        review = build_review(questions, submission.answers, hide)

        # Option ids from outside the question score as incorrect but are not stored
        option_ids = {q.id: {opt.id for opt in q.options} for q in questions}
        answer_rows = [
            {
                'question_id': record.question_id,
                'selected_option_id': (
                    record.selected_option_id
                    if record.selected_option_id in option_ids[record.question_id] else None
                ),
                'is_correct': record.is_correct,
            }
            for record in result.answer_records
        ]

        created = repository.create_submission(
            quiz_id=quiz.id,
            participant_data=submission.participant_data,
            score=result.earned_marks,
            total_marks=result.total_marks,
            total_questions=result.total_questions,
            percentage=result.percentage,
            time_spent_seconds=submission.time_spent_seconds,
            ip_address=visitor_ip,
            answers=answer_rows,
            submitted_at=now,
        )

        current_app.logger.info(
            f"Submission {created.id} stored for quiz {quiz.id}: "
            f"{result.earned_marks}/{result.total_marks} marks"
        )

        return {
            'submission_id': created.id,
            'score': result.rounded_score,
            'total': result.total_questions,
            'earned_marks': result.earned_marks,
            'total_marks': result.total_marks,
            'percentage': result.percentage,
            'review': review,
            'answers_hidden': hide,
            'show_answers_after': to_iso(quiz.show_answers_after) if hide else None,
        }

    @staticmethod
    def get_owned_quiz(quiz_id: int, user_id: int) -> Quiz:
        """
        Load a quiz and check that ``user_id`` created it.

        Raises:
            NotFound: no such quiz
            Forbidden: the quiz belongs to someone else
        """
        quiz = repository.find_quiz_by_id(quiz_id)
        if quiz is None:
            raise NotFound("Quiz not found")
        if quiz.creator_id != user_id:
            SecurityLogger.log_unauthorized_access(f"quiz:{quiz_id}", user_id)
            raise Forbidden()
        return quiz

    @staticmethod
    def get_analytics(quiz: Quiz) -> dict:
        """Ranked submissions, score and time averages, and the per-IP attempt table."""
        submissions = repository.list_submissions(quiz.id)
        ranked = rank_submissions(submissions)
        average_time = calculate_average_time(submissions)

        return {
            'quiz_id': quiz.id,
            'quiz_title': quiz.title,
            'question_count': quiz.get_question_count(),
            'summary': {
                'total_submissions': len(submissions),
                'average_score': calculate_average_score(submissions),
                'average_time': average_time,
                'average_time_display': format_duration(average_time) if average_time > 0 else None,
            },
            'submissions': [
                {
                    'rank': index + 1,
                    'id': sub.id,
                    'participant': format_participant_display(sub.participant_data),
                    'participant_data': sub.participant_data or {},
                    'percentage': sub.percentage,
                    'score': sub.score,
                    'total_marks': sub.total_marks,
                    'total_questions': sub.total_questions,
                    'time_spent_seconds': sub.time_spent_seconds,
                    'time_spent_display': (
                        format_time_minutes_seconds(sub.time_spent_seconds)
                        if sub.time_spent_seconds is not None else None
                    ),
                    'ip_address': sub.ip_address,
                    'submitted_at': to_iso(sub.submitted_at),
                }
                for index, sub in enumerate(ranked)
            ],
            'ip_attempts': aggregate_ip_attempts(submissions),
        }

    @staticmethod
    def get_submission_detail(quiz: Quiz, submission_id: int) -> dict:
        """
        One stored submission with the full answer key.

        Raises:
            NotFound: the submission does not belong to this quiz
        """
        submission = repository.find_submission(quiz.id, submission_id)
        if submission is None:
            raise NotFound("Submission not found")

        return {
            'id': submission.id,
            'quiz_id': quiz.id,
            'participant': format_participant_display(submission.participant_data),
            'participant_data': submission.participant_data or {},
            'score': submission.score,
            'total_marks': submission.total_marks,
            'total_questions': submission.total_questions,
            'percentage': submission.percentage,
            'time_spent_seconds': submission.time_spent_seconds,
            'time_spent_display': (
                format_time(submission.time_spent_seconds)
                if submission.time_spent_seconds is not None else None
            ),
            'submitted_at': to_iso(submission.submitted_at),
            'questions': build_submission_detail(quiz.questions, submission.answers),
        }

    @staticmethod
    def reset_ip_attempts(quiz: Quiz, ip_address: str, user_id: int) -> int:
        """Delete all submissions from ``ip_address`` for the quiz. Irreversible."""
        deleted = repository.delete_submissions(quiz.id, ip_address)
        SecurityLogger.log_ip_attempts_reset(quiz.id, ip_address, deleted, user_id)
        return deleted
