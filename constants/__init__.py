"""
Constants Package

Shared lookup tables and whitelists for the recipe application.
"""

from .units import COMMON_FRACTIONS, UNICODE_FRACTIONS
from .sources import (
    SOURCE_WEBSITE, SOURCE_YOUTUBE, SOURCE_TIKTOK,
    BROWSER_USER_AGENT, MIN_DESCRIPTION_LENGTH, ELSEWHERE_PHRASES,
    INSUFFICIENT_CONTENT_PREFIX,
)
from .validation import (
    VISIBILITY_PUBLIC, VISIBILITY_PRIVATE, VISIBILITY_FRIENDS_ONLY,
    VALID_VISIBILITIES, VALID_DIFFICULTIES, VALID_SOURCE_TYPES,
    FRIENDSHIP_PENDING, FRIENDSHIP_ACCEPTED, VALID_FRIENDSHIP_STATUSES,
    TIME_FILTERS, MAX_LENGTHS,
)
