"""
Recipe Service

Saving, deleting and reading recipes with ownership and visibility checks,
the per-user extraction quota and the explore listing.
"""

import logging
from datetime import timedelta

from constants import (
    VISIBILITY_PUBLIC, VISIBILITY_PRIVATE, VISIBILITY_FRIENDS_ONLY,
    VALID_VISIBILITIES, VALID_DIFFICULTIES, VALID_SOURCE_TYPES, TIME_FILTERS, MAX_LENGTHS,
)
from constants.validation import MAX_INGREDIENTS, MAX_INSTRUCTIONS, MAX_TAGS, MAX_SERVINGS, MAX_MINUTES
from models import db, utcnow, Recipe, RecipeExtraction
from utils.errors import ValidationError, NotFoundError, ForbiddenError, RateLimitError
from utils.sanitizer import sanitize_text, sanitize_url, sanitize_title, safe_int

from .friends import are_friends, friend_ids
from .parsing import parse_amount

logger = logging.getLogger(__name__)

REQUIRED_FIELDS = ('title', 'source_url', 'source_type', 'ingredients', 'instructions')
EXPLORE_LIMIT = 50
EXTRACTION_WINDOW = timedelta(hours=24)


# ============================================
# INPUT CLEANING
# ============================================

def _clean_ingredients(items):
    if not isinstance(items, list):
        raise ValidationError('ingredients must be a list')
    ingredients = []
    for item in items[:MAX_INGREDIENTS]:
        if isinstance(item, str):
            item = {'name': item}
        if not isinstance(item, dict):
            raise ValidationError('Each ingredient must be an object')
        name = sanitize_text(item.get('name'), MAX_LENGTHS['ingredient_name'], single_line=True)
        if not name:
            continue
        ingredient = {
            'name': name,
            'amount': parse_amount(item.get('amount')),
            'unit': sanitize_text(item.get('unit'), MAX_LENGTHS['ingredient_unit'], single_line=True),
        }
        notes = sanitize_text(item.get('notes'), MAX_LENGTHS['ingredient_notes'], single_line=True)
        if notes:
            ingredient['notes'] = notes
        ingredients.append(ingredient)
    if not ingredients:
        raise ValidationError('At least one ingredient is required')
    return ingredients


def _clean_instructions(items):
    if not isinstance(items, list):
        raise ValidationError('instructions must be a list')
    steps = []
    for item in items[:MAX_INSTRUCTIONS]:
        if isinstance(item, str):
            item = {'description': item}
        if not isinstance(item, dict):
            raise ValidationError('Each instruction must be an object')
        description = sanitize_text(item.get('description'), MAX_LENGTHS['instruction'])
        if not description:
            continue
        step = {'description': description}
        duration = safe_int(item.get('duration'), min_val=0, max_val=MAX_MINUTES)
        if duration is not None:
            step['duration'] = duration
        steps.append(step)
    if not steps:
        raise ValidationError('At least one instruction is required')
    # step_number is always contiguous from 1 in list order
    return [dict(step, step_number=i) for i, step in enumerate(steps, 1)]


def _clean_tags(items):
    if items is None:
        return []
    if not isinstance(items, list):
        raise ValidationError('tags must be a list')
    tags = []
    for item in items:
        tag = sanitize_text(item, MAX_LENGTHS['tag'], single_line=True).lower()
        if tag and tag not in tags:
            tags.append(tag)
    return tags[:MAX_TAGS]


def resolve_visibility(visibility=None, is_public=None, default=None):
    """
    Pick the visibility from the new field or the legacy boolean.

    visibility wins when both are given.
    """
    if visibility is not None:
        if not isinstance(visibility, str) or visibility not in VALID_VISIBILITIES:
            raise ValidationError(
                f"Invalid visibility. Must be one of: {', '.join(sorted(VALID_VISIBILITIES))}"
            )
        return visibility
    if is_public is not None:
        if not isinstance(is_public, bool):
            raise ValidationError('isPublic must be a boolean')
        return VISIBILITY_PUBLIC if is_public else VISIBILITY_PRIVATE
    if default is None:
        raise ValidationError('visibility or isPublic is required')
    return default


def clean_recipe_data(data):
    """Validate and clean a client-submitted recipe into model field values."""
    if not isinstance(data, dict):
        raise ValidationError('Request body must be a JSON object')

    missing = [f for f in REQUIRED_FIELDS if data.get(f) in (None, '', [])]
    if missing:
        raise ValidationError(f"Missing required fields: {', '.join(missing)}")

    source_type = data['source_type']
    if not isinstance(source_type, str) or source_type not in VALID_SOURCE_TYPES:
        raise ValidationError('Invalid source_type')

    source_url = sanitize_url(data['source_url'])
    if not source_url or len(source_url) > MAX_LENGTHS['source_url']:
        raise ValidationError('Invalid source_url')

    difficulty = data.get('difficulty') or None
    if difficulty is not None and (not isinstance(difficulty, str) or difficulty not in VALID_DIFFICULTIES):
        raise ValidationError('Invalid difficulty')

    return {
        'title': sanitize_title(data['title'], MAX_LENGTHS['title']),
        'description': sanitize_text(data.get('description'), MAX_LENGTHS['description']) or None,
        'image_url': sanitize_url(data.get('image_url'))[:MAX_LENGTHS['image_url']],
        'source_url': source_url,
        'source_type': source_type,
        'servings': safe_int(data.get('servings'), default=4, min_val=1, max_val=MAX_SERVINGS),
        'prep_time': safe_int(data.get('prep_time'), min_val=0, max_val=MAX_MINUTES),
        'cook_time': safe_int(data.get('cook_time'), min_val=0, max_val=MAX_MINUTES),
        'total_time': safe_int(data.get('total_time'), min_val=0, max_val=MAX_MINUTES),
        'difficulty': difficulty,
        'ingredients': _clean_ingredients(data['ingredients']),
        'instructions': _clean_instructions(data['instructions']),
        'tags': _clean_tags(data.get('tags')),
    }


# ============================================
# MUTATIONS
# ============================================

def save_recipe(user_id, data):
    """
    Store a reviewed recipe for user_id.

    Visibility comes from `visibility` or the legacy `isPublic`/`is_public`
    flag and defaults to private.

    Raises:
        ValidationError: Missing fields or invalid values
    """
    fields = clean_recipe_data(data)
    is_public = data.get('isPublic', data.get('is_public'))
    visibility = resolve_visibility(data.get('visibility'), is_public, default=VISIBILITY_PRIVATE)

    recipe = Recipe(created_by=user_id, **fields)
    recipe.set_visibility(visibility)
    db.session.add(recipe)
    db.session.commit()

    logger.info("User %s saved recipe %s (%s, %s)", user_id, recipe.id, recipe.source_type, visibility)
    return recipe


def get_owned_recipe(user_id, recipe_id):
    if not recipe_id:
        raise ValidationError('Recipe ID is required')
    recipe = db.session.get(Recipe, recipe_id)
    if recipe is None:
        raise NotFoundError('Recipe not found')
    if recipe.created_by != user_id:
        raise ForbiddenError('Forbidden - you can only modify your own recipes')
    return recipe


def delete_recipe(user_id, recipe_id):
    recipe = get_owned_recipe(user_id, recipe_id)
    db.session.delete(recipe)
    db.session.commit()
    logger.info("User %s deleted recipe %s", user_id, recipe_id)


def update_visibility(user_id, recipe_id, visibility=None, is_public=None):
    """
    Change a recipe's visibility; writes visibility and is_public together.

    Setting the current value again is a no-op that still succeeds.
    """
    visibility = resolve_visibility(visibility, is_public)
    recipe = get_owned_recipe(user_id, recipe_id)
    if recipe.visibility != visibility or recipe.is_public != (visibility == VISIBILITY_PUBLIC):
        recipe.set_visibility(visibility)
        db.session.commit()
        logger.info("User %s set recipe %s to %s", user_id, recipe_id, visibility)
    return recipe


# ============================================
# READS
# ============================================

def can_view(recipe, viewer_id):
    if recipe.visibility == VISIBILITY_PUBLIC:
        return True
    if viewer_id is None:
        return False
    if recipe.created_by == viewer_id:
        return True
    if recipe.visibility == VISIBILITY_FRIENDS_ONLY:
        return are_friends(recipe.created_by, viewer_id)
    return False


def increment_view_count(recipe):
    """Add one view in a single UPDATE so concurrent reads are all counted."""
    Recipe.query.filter_by(id=recipe.id).update(
        {Recipe.view_count: Recipe.view_count + 1}, synchronize_session=False
    )
    db.session.commit()
    db.session.refresh(recipe)
    return recipe.view_count


def get_recipe_for_viewer(recipe_id, viewer_id=None):
    """
    Return a recipe the viewer may read and count the view.

    Recipes the viewer may not see answer NotFoundError, same as missing ones.
    """
    recipe = db.session.get(Recipe, recipe_id)
    if recipe is None or not can_view(recipe, viewer_id):
        raise NotFoundError('Recipe not found')
    increment_view_count(recipe)
    return recipe


# ============================================
# EXTRACTION QUOTA
# ============================================

def count_recent_extractions(user_id, now=None):
    cutoff = (now or utcnow()) - EXTRACTION_WINDOW
    return RecipeExtraction.query.filter(
        RecipeExtraction.user_id == user_id,
        RecipeExtraction.created_at >= cutoff,
    ).count()


def check_extraction_quota(user_id, limit=10):
    """
    Raises:
        RateLimitError: If user_id already has `limit` extractions in the last 24h
    """
    count = count_recent_extractions(user_id)
    if count >= limit:
        logger.warning("User %s hit the extraction limit (%d/%d)", user_id, count, limit)
        raise RateLimitError(f'Rate limit exceeded. You can extract up to {limit} recipes per day.')
    return count


def record_extraction(user_id):
    db.session.add(RecipeExtraction(user_id=user_id))
    db.session.commit()


# ============================================
# EXPLORE
# ============================================

def _matches_query(recipe, query):
    haystack = ' '.join([recipe.title or '', recipe.description or ''] + list(recipe.tags or []))
    return query in haystack.lower()


def _matches_time(recipe, time_filter):
    max_minutes = TIME_FILTERS[time_filter]
    if recipe.total_time is None:
        return False
    if max_minutes is None:
        return recipe.total_time > 120
    return recipe.total_time <= max_minutes


def filter_recipes(recipes, query=None, time_filter=None, tags=None):
    query = (query or '').strip().lower()
    tags = [t.strip().lower() for t in tags or [] if t.strip()]
    result = []
    for recipe in recipes:
        if query and not _matches_query(recipe, query):
            continue
        if time_filter and not _matches_time(recipe, time_filter):
            continue
        if tags and not set(tags).issubset(recipe.tags or []):
            continue
        result.append(recipe)
    return result


def explore_recipes(viewer_id=None, query=None, time_filter=None, tags=None):
    """
    Build the explore listing.

    Returns {public, mine, friends, availableTags}: newest public recipes,
    the viewer's own non-public recipes, and friends_only recipes of
    accepted friends, each filtered by text, total time and tags.
    """
    if time_filter and time_filter not in TIME_FILTERS:
        raise ValidationError(f"Invalid time filter. Must be one of: {', '.join(TIME_FILTERS)}")

    newest = Recipe.created_at.desc()
    public = Recipe.query.filter_by(visibility=VISIBILITY_PUBLIC).order_by(newest).limit(EXPLORE_LIMIT).all()
    mine, friends = [], []
    if viewer_id:
        mine = Recipe.query.filter(
            Recipe.created_by == viewer_id,
            Recipe.visibility != VISIBILITY_PUBLIC,
        ).order_by(newest).all()
        ids = friend_ids(viewer_id)
        if ids:
            friends = Recipe.query.filter(
                Recipe.created_by.in_(list(ids)),
                Recipe.visibility == VISIBILITY_FRIENDS_ONLY,
            ).order_by(newest).all()

    available = sorted({tag for r in public + mine + friends for tag in r.tags or []})
    return {
        'public': [r.to_dict() for r in filter_recipes(public, query, time_filter, tags)],
        'mine': [r.to_dict() for r in filter_recipes(mine, query, time_filter, tags)],
        'friends': [r.to_dict() for r in filter_recipes(friends, query, time_filter, tags)],
        'availableTags': available,
    }
