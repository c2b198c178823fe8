"""
Database models for quiz functionality.

A creator owns quizzes; each quiz holds ordered multiple-choice questions
with exactly one correct option. Anonymous participants reach a published
quiz through its share id and leave one submission per attempt.
"""
from datetime import datetime
from logosquiz import db
from logosquiz.quiz.scoring import question_marks


class Quiz(db.Model):
    """
    Model for quizzes.

    participant_fields is a list of {"label": str, "required": bool}
    describing what participants fill in before they start.
    """
    __tablename__ = "quizzes"

    id = db.Column(db.Integer, primary_key=True)
    creator_id = db.Column(db.Integer, db.ForeignKey("users.id", ondelete='CASCADE'), nullable=False, index=True)
    title = db.Column(db.String(255), nullable=False)
    description = db.Column(db.Text, nullable=True)
    time_limit_seconds = db.Column(db.Integer, nullable=True)
    available_from = db.Column(db.DateTime, nullable=True)
    available_until = db.Column(db.DateTime, nullable=True)
    is_published = db.Column(db.Boolean, default=False, nullable=False, index=True)
    share_id = db.Column(db.String(64), unique=True, nullable=True, index=True)
    randomize_questions = db.Column(db.Boolean, default=False, nullable=False)
    randomize_options = db.Column(db.Boolean, default=False, nullable=False)
    max_attempts_per_ip = db.Column(db.Integer, nullable=True)  # None or 0 means unlimited
    show_answers_after = db.Column(db.DateTime, nullable=True)
    participant_fields = db.Column(db.JSON, nullable=False, default=list)
    created_at = db.Column(db.DateTime, default=datetime.utcnow, nullable=False, index=True)
    updated_at = db.Column(db.DateTime, default=datetime.utcnow, onupdate=datetime.utcnow, nullable=False)

    # Relationships
    questions = db.relationship(
        "Question", backref="quiz", cascade="all, delete-orphan",
        order_by="Question.order_index"
    )
    submissions = db.relationship(
        "Submission", backref="quiz", lazy="dynamic", cascade="all, delete-orphan"
    )

    def __repr__(self) -> str:
        return f"<Quiz {self.id}: {self.title}>"

    def get_total_marks(self) -> int:
        """Calculate total marks for all questions."""
        return sum(q.effective_marks for q in self.questions)

    def get_question_count(self) -> int:
        return len(self.questions)


class Question(db.Model):
    """Model for multiple-choice quiz questions."""
    __tablename__ = "quiz_questions"

    id = db.Column(db.Integer, primary_key=True)
    quiz_id = db.Column(db.Integer, db.ForeignKey("quizzes.id", ondelete='CASCADE'), nullable=False, index=True)
    question_text = db.Column(db.Text, nullable=False)
    marks = db.Column(db.Integer, nullable=False, default=1)
    order_index = db.Column(db.Integer, nullable=False, default=0, index=True)
    created_at = db.Column(db.DateTime, default=datetime.utcnow, nullable=False)

    options = db.relationship(
        "QuestionOption", backref="question", cascade="all, delete-orphan",
        order_by="QuestionOption.order_index"
    )

    __table_args__ = (
        db.Index('ix_quiz_questions_quiz_order', 'quiz_id', 'order_index'),
    )

    def __repr__(self) -> str:
        return f"<Question {self.id}: {self.question_text[:50]}>"

    @property
    def effective_marks(self) -> int:
        return question_marks(self)


class QuestionOption(db.Model):
    """Model for the options of a question."""
    __tablename__ = "quiz_question_options"

    id = db.Column(db.Integer, primary_key=True)
    question_id = db.Column(db.Integer, db.ForeignKey("quiz_questions.id", ondelete='CASCADE'), nullable=False, index=True)
    option_text = db.Column(db.Text, nullable=False)
    is_correct = db.Column(db.Boolean, default=False, nullable=False)
    order_index = db.Column(db.Integer, nullable=False, default=0)

    __table_args__ = (
        db.Index('ix_question_options_question_order', 'question_id', 'order_index'),
    )

    def __repr__(self) -> str:
        return f"<QuestionOption {self.id}: {self.option_text[:50]}>"


class Submission(db.Model):
    """
    One participant attempt at a quiz.

    Written once together with its answers and never updated afterwards;
    resetting attempts for an IP deletes rows instead.
    """
    __tablename__ = "quiz_submissions"

    id = db.Column(db.Integer, primary_key=True)
    quiz_id = db.Column(db.Integer, db.ForeignKey("quizzes.id", ondelete='CASCADE'), nullable=False, index=True)
    participant_data = db.Column(db.JSON, nullable=False, default=dict)
    score = db.Column(db.Integer, nullable=False, default=0)  # Earned marks
    total_marks = db.Column(db.Integer, nullable=False, default=0)
    total_questions = db.Column(db.Integer, nullable=False, default=0)
    percentage = db.Column(db.Float, nullable=False, default=0.0)
    time_spent_seconds = db.Column(db.Integer, nullable=True)
    ip_address = db.Column(db.String(64), nullable=True)
    submitted_at = db.Column(db.DateTime, default=datetime.utcnow, nullable=False, index=True)

    answers = db.relationship(
        "Answer", backref="submission", cascade="all, delete-orphan",
        order_by="Answer.id"
    )

    __table_args__ = (
        db.Index('ix_quiz_submissions_quiz_ip', 'quiz_id', 'ip_address'),
    )

    def __repr__(self) -> str:
        return f"<Submission {self.id}: Quiz {self.quiz_id}>"


class Answer(db.Model):
    """
    A participant's answer to one question.

    is_correct is a snapshot taken at submission time. It is never
    recomputed, so later edits to the quiz do not change past results.
    question_id and selected_option_id are cleared when the question they
    point at is replaced.
    """
    __tablename__ = "quiz_answers"

    id = db.Column(db.Integer, primary_key=True)
    submission_id = db.Column(db.Integer, db.ForeignKey("quiz_submissions.id", ondelete='CASCADE'), nullable=False, index=True)
    question_id = db.Column(db.Integer, db.ForeignKey("quiz_questions.id", ondelete='SET NULL'), nullable=True, index=True)
    selected_option_id = db.Column(db.Integer, db.ForeignKey("quiz_question_options.id", ondelete='SET NULL'), nullable=True)
    is_correct = db.Column(db.Boolean, nullable=False, default=False)

    question = db.relationship("Question", backref=db.backref("answers"))
    selected_option = db.relationship("QuestionOption", foreign_keys=[selected_option_id], backref="selected_in_answers")

    def __repr__(self) -> str:
        return f"<Answer {self.id}: Question {self.question_id}>"
