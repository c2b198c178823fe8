"""
Domain errors raised by the quiz service layer.

Every error carries a machine-readable kind, the HTTP status the API
answers with and extra context that is merged into the JSON body.
"""
from typing import Optional

from logosquiz.quiz.gates import NOT_STARTED


class QuizServiceError(Exception):
    kind = "INTERNAL_ERROR"
    status_code = 500
    default_message = "Internal server error"

    def __init__(self, message: Optional[str] = None, **context):
        self.message = message or self.default_message
        self.context = context
        super().__init__(self.message)

    def to_dict(self) -> dict:
        body = {'success': False, 'error': self.message, 'kind': self.kind}
        body.update(self.context)
        return body


class NotFound(QuizServiceError):
    kind = "NOT_FOUND"
    status_code = 404
    default_message = "Quiz not found"


class QuizNotFound(QuizServiceError):
    kind = "QUIZ_NOT_FOUND"
    status_code = 404
    default_message = "Quiz not found"


class QuizNotPublished(QuizServiceError):
    kind = "QUIZ_NOT_PUBLISHED"
    status_code = 403
    default_message = "This quiz is not published"


class Forbidden(QuizServiceError):
    kind = "FORBIDDEN"
    status_code = 403
    default_message = "Forbidden"


class ValidationFailed(QuizServiceError):
    kind = "VALIDATION_FAILED"
    status_code = 400
    default_message = "Validation failed"

    def __init__(self, details: list, message: Optional[str] = None):
        super().__init__(message, details=details)
        self.details = details


class AttemptLimitReached(QuizServiceError):
    kind = "ATTEMPT_LIMIT_REACHED"
    status_code = 403

    def __init__(self, attempt_count: int, max_attempts_per_ip: int):
        plural = "" if attempt_count == 1 else "s"
        message = (
            f"You have already submitted this quiz {attempt_count} time{plural}. "
            f"The maximum allowed attempts from your location is {max_attempts_per_ip}."
        )
        super().__init__(message, attempt_count=attempt_count, max_attempts_per_ip=max_attempts_per_ip)


class NotAvailable(QuizServiceError):
    kind = "NOT_AVAILABLE"
    status_code = 403

    def __init__(self, reason: str, boundary_timestamp: str):
        if reason == NOT_STARTED:
            message = f"This quiz opens at {boundary_timestamp}"
        else:
            message = f"This quiz closed at {boundary_timestamp}"
        super().__init__(message, reason=reason, boundary_timestamp=boundary_timestamp)


class InternalError(QuizServiceError):
    pass
