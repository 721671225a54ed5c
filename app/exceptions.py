"""
Application error taxonomy.

Services raise these; the handlers registered in ``app.main`` turn them into
``{"status": ..., "message": ...}`` responses. Route handlers never build error
responses themselves.
"""


class AppError(Exception):
    """Base class for errors that map to an HTTP response."""

    status_code: int = 500

    def __init__(self, message: str = "Something went wrong.", status_code: int | None = None):
        super().__init__(message)
        self.message = message
        if status_code is not None:
            self.status_code = status_code

    @property
    def envelope_status(self) -> str:
        # 4xx are client mistakes ("fail"), 5xx are ours ("error")
        return "fail" if self.status_code < 500 else "error"


class ValidationError(AppError):
    """Missing or malformed input, or a violated schema constraint."""
    status_code = 400


class AuthenticationError(AppError):
    """Missing, invalid or expired token, or bad credentials."""
    status_code = 401


class PermissionDeniedError(AppError):
    """Authenticated, but the role is not allowed here."""
    status_code = 403


class NotFoundError(AppError):
    """Record missing, or not owned by the requesting user."""
    status_code = 404


class MailDeliveryError(AppError):
    """The outbound mail transport is unavailable or rejected the message."""
    status_code = 500
