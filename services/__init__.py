"""
Services Package

Business logic modules for the recipe application.
"""

from .parsing import (
    float_to_fraction,
    format_time,
    parse_amount,
    scale_ingredients,
)

from .sources import detect_source_type

from .extraction import (
    ExtractionResult,
    RecipeExtractor,
    parse_extraction,
)

from .pipeline import (
    normalize_recipe,
    parse_recipe_from_url,
)

from .recipes import (
    save_recipe,
    delete_recipe,
    update_visibility,
    get_recipe_for_viewer,
    increment_view_count,
    check_extraction_quota,
    record_extraction,
    explore_recipes,
)

from .friends import (
    send_request,
    accept_request,
    reject_request,
    remove_friendship,
    list_friends,
    are_friends,
)

from .auth import (
    AuthProvider,
    SessionStore,
    current_user,
    current_user_id,
    login_required,
)

__all__ = [
    # Parsing
    'float_to_fraction',
    'format_time',
    'parse_amount',
    'scale_ingredients',
    # Pipeline
    'detect_source_type',
    'ExtractionResult',
    'RecipeExtractor',
    'parse_extraction',
    'normalize_recipe',
    'parse_recipe_from_url',
    # Recipes
    'save_recipe',
    'delete_recipe',
    'update_visibility',
    'get_recipe_for_viewer',
    'increment_view_count',
    'check_extraction_quota',
    'record_extraction',
    'explore_recipes',
    # Friends
    'send_request',
    'accept_request',
    'reject_request',
    'remove_friendship',
    'list_friends',
    'are_friends',
    # Auth
    'AuthProvider',
    'SessionStore',
    'current_user',
    'current_user_id',
    'login_required',
]
