"""
Recipe Models

Contains the Recipe model and the RecipeExtraction marker used for
rate limiting the extraction endpoint.
"""

from .base import db, utcnow, new_id, isoformat


class Recipe(db.Model):
    """
    A saved recipe.

    ingredients: list of {name, amount, unit, notes?}
    instructions: list of {step_number, description, duration?}, numbered from 1
    visibility: 'public' | 'private' | 'friends_only'; is_public mirrors
    visibility == 'public' for older clients and must be written together.
    """
    __tablename__ = 'recipes'

    id = db.Column(db.String(36), primary_key=True, default=new_id)
    created_by = db.Column(db.String(36), nullable=False, index=True)
    title = db.Column(db.String(200), nullable=False)
    description = db.Column(db.Text, nullable=True)
    image_url = db.Column(db.String(2000), nullable=False, default='')
    source_url = db.Column(db.String(2000), nullable=False)
    source_type = db.Column(db.String(20), nullable=False)
    servings = db.Column(db.Integer, nullable=False, default=4)
    prep_time = db.Column(db.Integer, nullable=True)
    cook_time = db.Column(db.Integer, nullable=True)
    total_time = db.Column(db.Integer, nullable=True)
    difficulty = db.Column(db.String(10), nullable=True)
    ingredients = db.Column(db.JSON, nullable=False, default=list)
    instructions = db.Column(db.JSON, nullable=False, default=list)
    tags = db.Column(db.JSON, nullable=True, default=list)
    visibility = db.Column(db.String(20), nullable=False, default='private', index=True)
    is_public = db.Column(db.Boolean, nullable=False, default=False, index=True)
    view_count = db.Column(db.Integer, nullable=False, default=0)
    created_at = db.Column(db.DateTime, nullable=False, default=utcnow, index=True)
    updated_at = db.Column(db.DateTime, nullable=False, default=utcnow, onupdate=utcnow)

    def set_visibility(self, visibility):
        self.visibility = visibility
        self.is_public = visibility == 'public'

    def to_dict(self):
        return {
            'id': self.id,
            'created_by': self.created_by,
            'title': self.title,
            'description': self.description,
            'image_url': self.image_url,
            'source_url': self.source_url,
            'source_type': self.source_type,
            'servings': self.servings,
            'prep_time': self.prep_time,
            'cook_time': self.cook_time,
            'total_time': self.total_time,
            'difficulty': self.difficulty,
            'ingredients': self.ingredients or [],
            'instructions': self.instructions or [],
            'tags': self.tags or [],
            'visibility': self.visibility,
            'is_public': self.is_public,
            'view_count': self.view_count,
            'created_at': isoformat(self.created_at),
            'updated_at': isoformat(self.updated_at),
        }


class RecipeExtraction(db.Model):
    """One successful extraction by a user; counted over a rolling 24h window."""
    __tablename__ = 'recipe_extractions'

    id = db.Column(db.Integer, primary_key=True)
    user_id = db.Column(db.String(36), nullable=False, index=True)
    created_at = db.Column(db.DateTime, nullable=False, default=utcnow, index=True)
