"""
Validation Constants

Contains whitelist values for validating user input to prevent
injection attacks and ensure data integrity.
"""

from .sources import SOURCE_WEBSITE, SOURCE_YOUTUBE, SOURCE_TIKTOK

# Valid recipe visibilities (whitelist for security)
VISIBILITY_PUBLIC = 'public'
VISIBILITY_PRIVATE = 'private'
VISIBILITY_FRIENDS_ONLY = 'friends_only'
VALID_VISIBILITIES = {VISIBILITY_PUBLIC, VISIBILITY_PRIVATE, VISIBILITY_FRIENDS_ONLY}

# Valid difficulty levels
VALID_DIFFICULTIES = {'easy', 'medium', 'hard'}

# Valid recipe source types
VALID_SOURCE_TYPES = {SOURCE_WEBSITE, SOURCE_YOUTUBE, SOURCE_TIKTOK}

# Friendship workflow states
FRIENDSHIP_PENDING = 'pending'
FRIENDSHIP_ACCEPTED = 'accepted'
VALID_FRIENDSHIP_STATUSES = {FRIENDSHIP_PENDING, FRIENDSHIP_ACCEPTED}

# Explore page time filters: value -> (max minutes, or None for "over 120")
TIME_FILTERS = {
    '30': 30,
    '60': 60,
    '120': 120,
    '120+': None,
}

# Maximum field lengths for security
MAX_LENGTHS = {
    'title': 200,
    'description': 2000,
    'source_url': 2000,
    'image_url': 2000,
    'ingredient_name': 200,
    'ingredient_unit': 50,
    'ingredient_notes': 500,
    'instruction': 5000,
    'tag': 50,
}

MAX_INGREDIENTS = 200
MAX_INSTRUCTIONS = 200
MAX_TAGS = 30
MAX_SERVINGS = 100
MAX_MINUTES = 60 * 24 * 7
