"""
Content Validation

Rejects video captions that are too short to hold a recipe, or that say
the recipe is somewhere else. Runs before any LLM call.
"""

from constants import (
    SOURCE_YOUTUBE, SOURCE_TIKTOK, MIN_DESCRIPTION_LENGTH, ELSEWHERE_PHRASES,
)
from utils.errors import InsufficientContentError

TOO_SHORT_MESSAGES = {
    SOURCE_YOUTUBE: (
        'YouTube video description is too short ({length} characters). '
        'The video may not contain a full recipe in the description. Please try a '
        'video with a complete recipe in the description, or use a website link instead.'
    ),
    SOURCE_TIKTOK: (
        'TikTok caption is too short ({length} characters). TikTok recipes often '
        'have the full recipe on a linked website. Please use the website link '
        'from the video bio instead.'
    ),
}

ELSEWHERE_MESSAGES = {
    SOURCE_YOUTUBE: (
        'The video description says the recipe is in the bio, comments, or a link. '
        'Please use that link instead.'
    ),
    SOURCE_TIKTOK: (
        'The TikTok caption indicates the recipe is in the bio or a link. '
        'Please use that link instead.'
    ),
}


def validate_video_content(source_type, description):
    """
    Raise InsufficientContentError if a video description cannot hold a recipe.

    Website content is not checked.
    """
    if source_type not in MIN_DESCRIPTION_LENGTH:
        return

    description = description or ''
    if len(description) < MIN_DESCRIPTION_LENGTH[source_type]:
        raise InsufficientContentError(
            TOO_SHORT_MESSAGES[source_type].format(length=len(description))
        )

    lower = description.lower()
    if any(phrase in lower for phrase in ELSEWHERE_PHRASES[source_type]):
        raise InsufficientContentError(ELSEWHERE_MESSAGES[source_type])
