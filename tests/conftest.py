"""
Shared pytest fixtures: an in-memory database, a fake LLM extractor and a
fake auth provider so no test talks to the network.
"""

import os

os.environ['FLASK_ENV'] = 'testing'

import pytest
import requests

from app import app as flask_app
from models import db
from utils.errors import AuthorizationError


SAMPLE_RECIPE = {
    'title': 'Tomato Pasta',
    'description': 'Quick weeknight pasta.',
    'servings': 4,
    'prep_time': 10,
    'cook_time': 20,
    'total_time': 30,
    'difficulty': 'easy',
    'ingredients': [
        {'name': 'spaghetti', 'amount': 400, 'unit': 'g'},
        {'name': 'tomatoes', 'amount': 2, 'unit': 'cups', 'notes': 'chopped'},
    ],
    'instructions': [
        {'step_number': 1, 'description': 'Boil the pasta.'},
        {'step_number': 2, 'description': 'Toss with tomatoes.'},
    ],
    'tags': ['pasta', 'vegetarian'],
}


class FakeExtractor:
    """Stands in for RecipeExtractor; records every call."""

    def __init__(self, recipe=None):
        self.recipe = recipe or SAMPLE_RECIPE
        self.calls = []

    def extract(self, content, source_type):
        self.calls.append((content, source_type))
        return dict(self.recipe)


class FakeAuthProvider:
    """In-memory replacement for AuthProvider keyed by access token."""

    def __init__(self):
        self.users = {}
        self.refresh_calls = []
        self.refresh_fails = False

    def add_user(self, user_id, email, name=None):
        token = f'token-{user_id}'
        self.users[token] = {
            'id': user_id,
            'email': email,
            'user_metadata': {'full_name': name} if name else {},
        }
        return {'Authorization': f'Bearer {token}'}

    def get_user(self, access_token):
        return self.users.get(access_token)

    def _session_for(self, user_id):
        token = f'token-{user_id}'
        return {
            'access_token': token,
            'refresh_token': f'refresh-{user_id}',
            'expires_in': 3600,
            'user': self.users[token],
        }

    def exchange_code_for_session(self, code, code_verifier=None):
        if not code.startswith('code-'):
            raise AuthorizationError('Invalid or expired authorization')
        return self._session_for(code[len('code-'):])

    def refresh_session(self, refresh_token):
        self.refresh_calls.append(refresh_token)
        if self.refresh_fails:
            raise AuthorizationError('Invalid or expired authorization')
        return self._session_for(refresh_token[len('refresh-'):])

    def find_user_by_email(self, email):
        for user in self.users.values():
            if user['email'] == email:
                return user
        return None


class FakeResponse:
    """Just enough of requests.Response for the fetchers."""

    def __init__(self, text='', json_data=None, status_code=200):
        self.text = text
        self._json = json_data
        self.status_code = status_code

    def json(self):
        return self._json

    def raise_for_status(self):
        if self.status_code >= 400:
            raise requests.HTTPError(f'HTTP {self.status_code}')


@pytest.fixture
def app(monkeypatch):
    monkeypatch.setitem(flask_app.extensions, 'recipe_extractor', FakeExtractor())
    monkeypatch.setitem(flask_app.extensions, 'auth', FakeAuthProvider())
    with flask_app.app_context():
        db.create_all()
    yield flask_app
    with flask_app.app_context():
        db.session.remove()
        db.drop_all()


@pytest.fixture
def client(app):
    return app.test_client()


@pytest.fixture
def extractor(app):
    return app.extensions['recipe_extractor']


@pytest.fixture
def auth(app):
    return app.extensions['auth']


@pytest.fixture
def alice(auth):
    return auth.add_user('alice-id', 'alice@example.com', 'Alice')


@pytest.fixture
def bob(auth):
    return auth.add_user('bob-id', 'bob@example.com')


@pytest.fixture
def carol(auth):
    return auth.add_user('carol-id', 'carol@example.com', 'Carol')


@pytest.fixture
def recipe_payload():
    return {
        'title': 'Tomato Pasta',
        'description': 'Quick weeknight pasta.',
        'source_url': 'https://example.com/pasta',
        'source_type': 'website',
        'image_url': 'https://example.com/pasta.jpg',
        'servings': 4,
        'total_time': 30,
        'difficulty': 'easy',
        'ingredients': [
            {'name': 'spaghetti', 'amount': 400, 'unit': 'g'},
            {'name': 'tomatoes', 'amount': '1 1/2', 'unit': 'cups', 'notes': 'chopped'},
        ],
        'instructions': [
            {'step_number': 4, 'description': 'Boil the pasta.'},
            {'step_number': 9, 'description': 'Toss with tomatoes.'},
        ],
        'tags': ['Pasta', 'vegetarian'],
    }
