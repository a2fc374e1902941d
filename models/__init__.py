"""
Models Package

Exports all database models and the db instance for use throughout the application.
"""

from .base import db, utcnow

from .recipe import Recipe, RecipeExtraction
from .social import Profile, Friendship

__all__ = [
    'db',
    'utcnow',
    'Recipe',
    'RecipeExtraction',
    'Profile',
    'Friendship',
]
