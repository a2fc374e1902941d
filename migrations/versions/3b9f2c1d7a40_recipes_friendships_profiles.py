"""Recipes, friendships, profiles and extraction records

Revision ID: 3b9f2c1d7a40
Revises:
Create Date: 2026-10-19 10:12:03.418227

"""
from alembic import op
import sqlalchemy as sa


# revision identifiers, used by Alembic.
revision = '3b9f2c1d7a40'
down_revision = None
branch_labels = None
depends_on = None


def upgrade():
    op.create_table(
        'recipes',
        sa.Column('id', sa.String(length=36), nullable=False),
        sa.Column('created_by', sa.String(length=36), nullable=False),
        sa.Column('title', sa.String(length=200), nullable=False),
        sa.Column('description', sa.Text(), nullable=True),
        sa.Column('image_url', sa.String(length=2000), nullable=False),
        sa.Column('source_url', sa.String(length=2000), nullable=False),
        sa.Column('source_type', sa.String(length=20), nullable=False),
        sa.Column('servings', sa.Integer(), nullable=False),
        sa.Column('prep_time', sa.Integer(), nullable=True),
        sa.Column('cook_time', sa.Integer(), nullable=True),
        sa.Column('total_time', sa.Integer(), nullable=True),
        sa.Column('difficulty', sa.String(length=10), nullable=True),
        sa.Column('ingredients', sa.JSON(), nullable=False),
        sa.Column('instructions', sa.JSON(), nullable=False),
        sa.Column('tags', sa.JSON(), nullable=True),
        sa.Column('visibility', sa.String(length=20), nullable=False, server_default='private'),
        sa.Column('is_public', sa.Boolean(), nullable=False, server_default=sa.false()),
        sa.Column('view_count', sa.Integer(), nullable=False, server_default='0'),
        sa.Column('created_at', sa.DateTime(), nullable=False),
        sa.Column('updated_at', sa.DateTime(), nullable=False),
        sa.PrimaryKeyConstraint('id')
    )
    with op.batch_alter_table('recipes', schema=None) as batch_op:
        batch_op.create_index(batch_op.f('ix_recipes_created_by'), ['created_by'], unique=False)
        batch_op.create_index(batch_op.f('ix_recipes_visibility'), ['visibility'], unique=False)
        batch_op.create_index(batch_op.f('ix_recipes_is_public'), ['is_public'], unique=False)
        batch_op.create_index(batch_op.f('ix_recipes_created_at'), ['created_at'], unique=False)

    op.create_table(
        'recipe_extractions',
        sa.Column('id', sa.Integer(), nullable=False),
        sa.Column('user_id', sa.String(length=36), nullable=False),
        sa.Column('created_at', sa.DateTime(), nullable=False),
        sa.PrimaryKeyConstraint('id')
    )
    with op.batch_alter_table('recipe_extractions', schema=None) as batch_op:
        batch_op.create_index(batch_op.f('ix_recipe_extractions_user_id'), ['user_id'], unique=False)
        batch_op.create_index(batch_op.f('ix_recipe_extractions_created_at'), ['created_at'], unique=False)

    op.create_table(
        'profiles',
        sa.Column('user_id', sa.String(length=36), nullable=False),
        sa.Column('email', sa.String(length=320), nullable=True),
        sa.Column('display_name', sa.String(length=100), nullable=True),
        sa.Column('avatar_url', sa.String(length=2000), nullable=True),
        sa.Column('created_at', sa.DateTime(), nullable=False),
        sa.Column('updated_at', sa.DateTime(), nullable=False),
        sa.PrimaryKeyConstraint('user_id')
    )
    with op.batch_alter_table('profiles', schema=None) as batch_op:
        batch_op.create_index(batch_op.f('ix_profiles_email'), ['email'], unique=True)

    op.create_table(
        'friendships',
        sa.Column('id', sa.String(length=36), nullable=False),
        sa.Column('user_id', sa.String(length=36), nullable=False),
        sa.Column('friend_id', sa.String(length=36), nullable=False),
        sa.Column('status', sa.String(length=20), nullable=False),
        sa.Column('pair_key', sa.String(length=80), nullable=False),
        sa.Column('created_at', sa.DateTime(), nullable=False),
        sa.Column('updated_at', sa.DateTime(), nullable=False),
        sa.PrimaryKeyConstraint('id'),
        sa.UniqueConstraint('pair_key')
    )
    with op.batch_alter_table('friendships', schema=None) as batch_op:
        batch_op.create_index(batch_op.f('ix_friendships_user_id'), ['user_id'], unique=False)
        batch_op.create_index(batch_op.f('ix_friendships_friend_id'), ['friend_id'], unique=False)


def downgrade():
    with op.batch_alter_table('friendships', schema=None) as batch_op:
        batch_op.drop_index(batch_op.f('ix_friendships_friend_id'))
        batch_op.drop_index(batch_op.f('ix_friendships_user_id'))
    op.drop_table('friendships')

    with op.batch_alter_table('profiles', schema=None) as batch_op:
        batch_op.drop_index(batch_op.f('ix_profiles_email'))
    op.drop_table('profiles')

    with op.batch_alter_table('recipe_extractions', schema=None) as batch_op:
        batch_op.drop_index(batch_op.f('ix_recipe_extractions_created_at'))
        batch_op.drop_index(batch_op.f('ix_recipe_extractions_user_id'))
    op.drop_table('recipe_extractions')

    with op.batch_alter_table('recipes', schema=None) as batch_op:
        batch_op.drop_index(batch_op.f('ix_recipes_created_at'))
        batch_op.drop_index(batch_op.f('ix_recipes_is_public'))
        batch_op.drop_index(batch_op.f('ix_recipes_visibility'))
        batch_op.drop_index(batch_op.f('ix_recipes_created_by'))
    op.drop_table('recipes')
