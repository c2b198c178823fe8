"""
Security logging module.

This module provides specialized logging for security events
such as access to another creator's quiz and attempt-limit refusals.
"""

from flask import current_app
from datetime import datetime


class SecurityLogger:
    """
    Security event logger.

    Logs security-related events for monitoring and auditing.
    """

    @staticmethod
    def log_unauthorized_access(resource: str, user_id: int = None):
        """
        Log an attempt to act on a quiz the caller does not own.

        Args:
            resource: Resource that was accessed
            user_id: User ID if authenticated
        """
        user_info = f"User ID: {user_id}" if user_id else "Unauthenticated"
        current_app.logger.warning(
            f"SECURITY: Unauthorized access - {user_info}, "
            f"Resource: {resource}, Time: {datetime.utcnow().isoformat()}"
        )

    @staticmethod
    def log_attempt_limit_reached(quiz_id: int, ip_address: str, attempt_count: int, max_attempts: int):
        """
        Log a participant refused by the per-IP attempt cap.

        Args:
            quiz_id: Quiz ID
            ip_address: Resolved visitor IP
            attempt_count: Stored submissions from that IP
            max_attempts: The quiz's cap
        """
        current_app.logger.info(
            f"SECURITY: Attempt limit reached - Quiz ID: {quiz_id}, IP: {ip_address}, "
            f"Attempts: {attempt_count}/{max_attempts}, Time: {datetime.utcnow().isoformat()}"
        )

    @staticmethod
    def log_ip_attempts_reset(quiz_id: int, ip_address: str, deleted_count: int, user_id: int):
        """
        Log a creator deleting the submissions of one IP.

        Args:
            quiz_id: Quiz ID
            ip_address: IP whose attempts were reset
            deleted_count: Number of submissions deleted
            user_id: Creator who triggered the reset
        """
        current_app.logger.warning(
            f"SECURITY: IP attempts reset - Quiz ID: {quiz_id}, IP: {ip_address}, "
            f"Deleted: {deleted_count}, User ID: {user_id}, Time: {datetime.utcnow().isoformat()}"
        )

    @staticmethod
    def log_quiz_deleted(quiz_id: int, user_id: int):
        """
        Log a quiz deletion.

        Args:
            quiz_id: Quiz ID
            user_id: Creator who deleted it
        """
        current_app.logger.warning(
            f"SECURITY: Quiz deleted - Quiz ID: {quiz_id}, User ID: {user_id}, "
            f"Time: {datetime.utcnow().isoformat()}"
        )
