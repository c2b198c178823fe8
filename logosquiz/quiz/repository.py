"""
Data store operations used by the quiz service.

Each write commits its own transaction; callers roll back on
SQLAlchemyError.
"""
from datetime import datetime
from typing import Optional

from logosquiz import db
from logosquiz.quiz.models import Quiz, Submission, Answer


def find_quiz_by_share_id(share_id: str, must_be_published: bool = True) -> Optional[Quiz]:
    query = Quiz.query.filter_by(share_id=share_id)
    if must_be_published:
        query = query.filter_by(is_published=True)
    return query.first()


def find_quiz_by_id(quiz_id: int) -> Optional[Quiz]:
    return db.session.get(Quiz, quiz_id)


def list_creator_quizzes(creator_id: int, exclude_id: Optional[int] = None) -> list:
    query = Quiz.query.filter_by(creator_id=creator_id)
    if exclude_id is not None:
        query = query.filter(Quiz.id != exclude_id)
    return query.order_by(Quiz.created_at.desc(), Quiz.id.desc()).all()


def count_submissions(quiz_id: int, ip_address: str) -> int:
    return Submission.query.filter_by(quiz_id=quiz_id, ip_address=ip_address).count()


def count_quiz_submissions(quiz_id: int) -> int:
    return Submission.query.filter_by(quiz_id=quiz_id).count()


def create_submission(quiz_id: int, participant_data: dict, score: int, total_marks: int,
                      total_questions: int, percentage: float, time_spent_seconds: Optional[int],
                      ip_address: Optional[str], answers: list,
                      submitted_at: Optional[datetime] = None) -> Submission:
    """
    Store a submission together with its answers in one transaction.

    Args:
        answers: dicts with question_id, selected_option_id and is_correct
    """
    submission = Submission(
        quiz_id=quiz_id,
        participant_data=participant_data,
        score=score,
        total_marks=total_marks,
        total_questions=total_questions,
        percentage=percentage,
        time_spent_seconds=time_spent_seconds,
        ip_address=ip_address,
        submitted_at=submitted_at or datetime.utcnow(),
    )
    for answer in answers:
        submission.answers.append(Answer(
            question_id=answer['question_id'],
            selected_option_id=answer['selected_option_id'],
            is_correct=answer['is_correct'],
        ))

    db.session.add(submission)
    db.session.commit()
    return submission


def delete_submissions(quiz_id: int, ip_address: str) -> int:
    """Delete every submission (and its answers) from one IP for one quiz."""
    submissions = Submission.query.filter_by(quiz_id=quiz_id, ip_address=ip_address).all()
    for submission in submissions:
        db.session.delete(submission)
    db.session.commit()
    return len(submissions)


def list_submissions(quiz_id: int) -> list:
    return Submission.query.filter_by(quiz_id=quiz_id).order_by(Submission.submitted_at.desc()).all()


def find_submission(quiz_id: int, submission_id: int) -> Optional[Submission]:
    submission = db.session.get(Submission, submission_id)
    if submission is None or submission.quiz_id != quiz_id:
        return None
    return submission
