"""
Security headers module.

Adds security headers to every response. The application only serves JSON,
so the content security policy denies everything by default.
"""

from flask import current_app


class SecurityHeaders:
    """Security headers middleware."""

    @staticmethod
    def init_app(app):
        """
        Initialize security headers for the Flask app.

        Args:
            app: Flask application instance
        """
        @app.after_request
        def add_security_headers(response):
            """Add security headers to all responses."""
            response.headers['Content-Security-Policy'] = "default-src 'none'; frame-ancestors 'none'"
            response.headers['X-Content-Type-Options'] = 'nosniff'
            response.headers['X-Frame-Options'] = 'DENY'
            response.headers['Referrer-Policy'] = 'strict-origin-when-cross-origin'

            # Participant-facing responses depend on IP and time, never cache them
            if response.mimetype == 'application/json':
                response.cache_control.no_store = True

            # Strict-Transport-Security: Force HTTPS (only in production)
            if current_app.config.get('SESSION_COOKIE_SECURE', False):
                response.headers['Strict-Transport-Security'] = (
                    'max-age=31536000; includeSubDomains'
                )

            return response
