"""
Application Configuration

Centralizes all Flask and application configuration settings. Values come
from the environment; a local .env file is loaded first if present.
"""

import os
from datetime import timedelta

from dotenv import load_dotenv

# Base directory of the application
BASE_DIR = os.path.dirname(os.path.abspath(__file__))

load_dotenv(os.path.join(BASE_DIR, '.env'))


def _env_int(name, default):
    return int(os.environ.get(name, default))


def _env_float(name, default):
    return float(os.environ.get(name, default))


class Config:
    """Base configuration class."""

    # Flask settings
    SECRET_KEY = os.environ.get('SECRET_KEY', 'dev-only-change-in-production')
    MAX_CONTENT_LENGTH = 1 * 1024 * 1024  # JSON bodies only
    JSON_SORT_KEYS = False

    # Session cookie (holds the auth provider session)
    SESSION_COOKIE_HTTPONLY = True
    SESSION_COOKIE_SAMESITE = 'Lax'
    SESSION_COOKIE_SECURE = os.environ.get('SESSION_COOKIE_SECURE', 'false').lower() == 'true'
    PERMANENT_SESSION_LIFETIME = timedelta(days=30)
    SESSION_REFRESH_MARGIN = _env_int('SESSION_REFRESH_MARGIN', 60)

    # SQLAlchemy settings
    SQLALCHEMY_DATABASE_URI = os.environ.get('DATABASE_URL', 'sqlite:///recipes.db')
    SQLALCHEMY_TRACK_MODIFICATIONS = False

    # LLM extraction
    OPENAI_API_KEY = os.environ.get('OPENAI_API_KEY')
    OPENAI_MODEL = os.environ.get('OPENAI_MODEL', 'gpt-4o')
    OPENAI_TEMPERATURE = _env_float('OPENAI_TEMPERATURE', 0.3)
    OPENAI_MAX_TOKENS = _env_int('OPENAI_MAX_TOKENS', 2000)
    OPENAI_TIMEOUT = _env_int('OPENAI_TIMEOUT', 60)

    # Content sources
    YOUTUBE_API_KEY = os.environ.get('YOUTUBE_API_KEY')
    REQUEST_TIMEOUT = _env_int('REQUEST_TIMEOUT', 15)
    PLACEHOLDER_IMAGE = os.environ.get('PLACEHOLDER_IMAGE', '/placeholder-recipe.svg')
    EXTRACTION_DAILY_LIMIT = _env_int('EXTRACTION_DAILY_LIMIT', 10)

    # Auth provider
    SUPABASE_URL = os.environ.get('SUPABASE_URL', '')
    SUPABASE_ANON_KEY = os.environ.get('SUPABASE_ANON_KEY', '')
    SUPABASE_SERVICE_ROLE_KEY = os.environ.get('SUPABASE_SERVICE_ROLE_KEY')

    LOG_LEVEL = os.environ.get('LOG_LEVEL', 'INFO')


class DevelopmentConfig(Config):
    """Development configuration."""
    DEBUG = True
    LOG_LEVEL = os.environ.get('LOG_LEVEL', 'DEBUG')


class ProductionConfig(Config):
    """Production configuration."""
    DEBUG = False
    SESSION_COOKIE_SECURE = True


class TestingConfig(Config):
    """Testing configuration."""
    TESTING = True
    SECRET_KEY = 'testing'
    SQLALCHEMY_DATABASE_URI = 'sqlite:///:memory:'
    OPENAI_API_KEY = 'test-openai-key'
    YOUTUBE_API_KEY = None
    SUPABASE_URL = 'http://auth.test'
    SUPABASE_ANON_KEY = 'test-anon-key'
    SUPABASE_SERVICE_ROLE_KEY = None
    EXTRACTION_DAILY_LIMIT = 10
    LOG_LEVEL = 'WARNING'


# Configuration dictionary for easy access
config = {
    'development': DevelopmentConfig,
    'production': ProductionConfig,
    'testing': TestingConfig,
    'default': DevelopmentConfig
}


def get_config(env=None):
    """Get configuration based on environment."""
    if env is None:
        env = os.environ.get('FLASK_ENV', 'development')
    return config.get(env, config['default'])
