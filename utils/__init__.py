# Utility modules for Recipe Box
from .url_validator import is_safe_url, safe_fetch, SSRFError
from .sanitizer import (
    sanitize_text, sanitize_url, sanitize_title, sanitize_safe_redirect, safe_int,
)
from .errors import (
    AppError, AuthorizationError, ForbiddenError, ValidationError,
    NotFoundError, RateLimitError, InvalidURLError,
    InsufficientContentError, FetchError, ExtractionError,
)
