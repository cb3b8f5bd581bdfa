"""
Error types raised by the check-in core.

Expected outcomes (unknown attendee, unknown token, item already claimed)
are returned as values, not raised. Only the cases below are exceptions.
"""


class CheckinError(Exception):
    """Base class for every error the check-in core raises on purpose."""

    error_code = "CHECKIN_ERROR"
    status_code = 500

    def __init__(self, message=None):
        super().__init__(message or self.__class__.__name__)
        self.message = message or self.__class__.__name__

    def to_dict(self):
        return {
            "success": False,
            "error_code": self.error_code,
            "message": self.message,
        }


class InvalidArgument(CheckinError):
    """Caller passed something the core can never act on."""

    status_code = 400

    def __init__(self, code, message):
        super().__init__(message)
        self.error_code = code


def require_identifier(identifier):
    """Reject a missing or blank attendee identifier before any store access."""
    if not isinstance(identifier, str) or not identifier.strip():
        raise InvalidArgument("VALIDATION_ERROR", "student_id is required")
    return identifier


class TokenGenerationExhausted(CheckinError):
    """No unique credential could be stored within the retry budget."""

    error_code = "TOKEN_GENERATION_FAILED"
    status_code = 503
