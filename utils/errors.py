"""
Application Errors

Exception taxonomy for the recipe API. Each error carries the HTTP status
it maps to at the request boundary; see the error handlers in app.py.
"""

from constants import INSUFFICIENT_CONTENT_PREFIX


class AppError(Exception):
    """Base class for errors that are reported to the client."""
    status_code = 500

    def __init__(self, message=None):
        super().__init__(message or self.default_message)
        self.message = message or self.default_message

    default_message = 'Internal server error'

    def to_dict(self):
        return {'error': self.message}


class AuthorizationError(AppError):
    """Missing or invalid session."""
    status_code = 401
    default_message = 'Unauthorized - please sign in'


class ForbiddenError(AppError):
    """Authenticated caller does not own the target row."""
    status_code = 403
    default_message = 'Forbidden'


class ValidationError(AppError):
    """Missing or malformed request fields."""
    status_code = 400
    default_message = 'Invalid request'


class NotFoundError(AppError):
    status_code = 404
    default_message = 'Not found'


class RateLimitError(AppError):
    status_code = 429
    default_message = 'Rate limit exceeded'


class InvalidURLError(AppError):
    """A submitted URL has no usable shape (e.g. no YouTube video id)."""
    status_code = 400
    default_message = 'Invalid URL'


class InsufficientContentError(AppError):
    """
    Fetched content is too short or says the recipe lives elsewhere.

    str(error) keeps the INSUFFICIENT_CONTENT prefix; the client-facing
    message drops it and reports it as a code instead.
    """
    status_code = 400

    def __init__(self, detail):
        super().__init__(INSUFFICIENT_CONTENT_PREFIX + detail)
        self.detail = detail

    def to_dict(self):
        return {'error': self.detail, 'code': INSUFFICIENT_CONTENT_PREFIX.rstrip(': ')}


class FetchError(AppError):
    """
    Upstream fetch or scrape failed.

    `user_message` is the friendlier text shown to the client; video
    platforms get a 400 because retrying the same link will not help.
    """
    status_code = 500

    def __init__(self, message, user_message=None, status_code=None):
        super().__init__(message)
        self.user_message = user_message or message
        if status_code is not None:
            self.status_code = status_code

    def to_dict(self):
        return {'error': self.user_message}


class ExtractionError(AppError):
    """The LLM call failed or returned an unusable recipe."""
    status_code = 500
    default_message = 'Failed to extract recipe information'
