"""
Authentication Service

Auth is delegated to a Supabase-compatible (GoTrue REST) provider. This
module talks to its REST API, keeps the provider session in Flask's signed
cookie session and resolves the calling user for each request.
"""

import logging
import time
from functools import wraps

import requests
from flask import current_app, g, request, session

from models import db, Profile
from utils.errors import AuthorizationError

logger = logging.getLogger(__name__)

SESSION_KEY = 'auth'
ADMIN_PAGE_SIZE = 1000


class AuthProvider:
    """Minimal GoTrue REST client."""

    def __init__(self, url, anon_key, service_role_key=None, timeout=15):
        self.url = (url or '').rstrip('/')
        self.anon_key = anon_key
        self.service_role_key = service_role_key
        self.timeout = timeout

    def _headers(self, token=None, admin=False):
        key = self.service_role_key if admin else self.anon_key
        return {
            'apikey': key or '',
            'Authorization': f'Bearer {token or key}',
            'Content-Type': 'application/json',
        }

    def _token_request(self, grant_type, payload):
        try:
            response = requests.post(
                f'{self.url}/auth/v1/token',
                params={'grant_type': grant_type},
                json=payload,
                headers=self._headers(),
                timeout=self.timeout,
            )
        except requests.RequestException as e:
            logger.error("Auth provider unreachable (%s): %s", grant_type, e)
            raise AuthorizationError('Authentication service unavailable') from e
        if response.status_code != 200:
            logger.warning("Auth provider rejected %s grant: HTTP %s", grant_type, response.status_code)
            raise AuthorizationError('Invalid or expired authorization')
        return response.json()

    def get_user(self, access_token):
        """Return the provider user for an access token, or None if it is not valid."""
        try:
            response = requests.get(
                f'{self.url}/auth/v1/user', headers=self._headers(access_token), timeout=self.timeout,
            )
        except requests.RequestException as e:
            logger.error("Auth provider unreachable (user): %s", e)
            raise AuthorizationError('Authentication service unavailable') from e
        if response.status_code != 200:
            return None
        return response.json()

    def exchange_code_for_session(self, code, code_verifier=None):
        """PKCE code exchange; returns the provider session dict."""
        return self._token_request('pkce', {'auth_code': code, 'code_verifier': code_verifier or ''})

    def refresh_session(self, refresh_token):
        return self._token_request('refresh_token', {'refresh_token': refresh_token})

    def find_user_by_email(self, email):
        """
        Look a user up through the admin API. Needs the service role key;
        returns None without one.
        """
        if not self.service_role_key:
            return None
        email = email.lower()
        page = 1
        while True:
            try:
                response = requests.get(
                    f'{self.url}/auth/v1/admin/users',
                    params={'page': page, 'per_page': ADMIN_PAGE_SIZE},
                    headers=self._headers(admin=True),
                    timeout=self.timeout,
                )
                response.raise_for_status()
            except requests.RequestException as e:
                logger.error("Admin user lookup failed: %s", e)
                return None
            users = response.json().get('users') or []
            for user in users:
                if (user.get('email') or '').lower() == email:
                    return user
            if len(users) < ADMIN_PAGE_SIZE:
                return None
            page += 1


class SessionStore:
    """
    Provider session kept in the Flask cookie session.

    Holds access_token, refresh_token, expires_at (epoch seconds) and the
    user id. current() refreshes the session shortly before it expires and
    clears it when the refresh fails.
    """

    def __init__(self, refresh_margin=60):
        self.refresh_margin = refresh_margin

    def save(self, provider_session):
        expires_at = provider_session.get('expires_at')
        if not expires_at:
            expires_at = int(time.time()) + int(provider_session.get('expires_in') or 3600)
        user = provider_session.get('user') or {}
        session[SESSION_KEY] = {
            'access_token': provider_session['access_token'],
            'refresh_token': provider_session.get('refresh_token'),
            'expires_at': int(expires_at),
            'user_id': user.get('id'),
        }
        session.permanent = True
        return session[SESSION_KEY]

    def load(self):
        return session.get(SESSION_KEY)

    def clear(self):
        session.pop(SESSION_KEY, None)

    def expires_soon(self, stored, now=None):
        return stored['expires_at'] - (now or time.time()) <= self.refresh_margin

    def current(self, provider):
        """Return a valid stored session, refreshing it if needed, or None."""
        stored = self.load()
        if not stored:
            return None
        if not self.expires_soon(stored):
            return stored
        if not stored.get('refresh_token'):
            self.clear()
            return None
        try:
            refreshed = provider.refresh_session(stored['refresh_token'])
        except AuthorizationError:
            logger.info("Session refresh failed for user %s, signing out", stored.get('user_id'))
            self.clear()
            return None
        return self.save(refreshed)


def get_provider():
    return current_app.extensions['auth']


def get_session_store():
    return current_app.extensions['session_store']


def upsert_profile(user):
    """Create or refresh the local Profile for a provider user dict."""
    metadata = user.get('user_metadata') or {}
    email = (user.get('email') or '').lower() or None

    profile = db.session.get(Profile, user['id'])
    if profile is None:
        profile = Profile(user_id=user['id'])
        db.session.add(profile)

    if email and profile.email != email:
        # E-mail moved to another account at the provider
        stale = Profile.query.filter(Profile.email == email, Profile.user_id != user['id']).first()
        if stale is not None:
            stale.email = None
            db.session.flush()
    profile.email = email
    profile.display_name = metadata.get('full_name') or metadata.get('name') or profile.display_name
    profile.avatar_url = metadata.get('avatar_url') or profile.avatar_url
    db.session.commit()
    return profile


def _bearer_token():
    header = request.headers.get('Authorization', '')
    if header.lower().startswith('bearer '):
        return header[7:].strip() or None
    return None


def current_user():
    """
    Resolve the caller from a Bearer token or the cookie session.

    Returns the provider user dict, or None for anonymous requests.
    """
    if 'user' in g:
        return g.user

    provider = get_provider()
    token = _bearer_token()
    if token is None:
        stored = get_session_store().current(provider)
        token = stored['access_token'] if stored else None

    user = provider.get_user(token) if token else None
    if user is not None:
        upsert_profile(user)
    g.user = user
    return user


def current_user_id():
    user = current_user()
    return user['id'] if user else None


def login_required(f):
    """Reject anonymous requests with AuthorizationError (401)."""
    @wraps(f)
    def decorated(*args, **kwargs):
        if current_user() is None:
            raise AuthorizationError()
        return f(*args, **kwargs)
    return decorated
