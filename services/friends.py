"""
Friends Service

Friend requests between users. One Friendship row per unordered pair:
pending until the recipient accepts, deleted on reject or remove.
"""

import logging

from sqlalchemy.exc import IntegrityError

from constants import FRIENDSHIP_PENDING, FRIENDSHIP_ACCEPTED
from models import db, Friendship, Profile
from models.base import isoformat
from utils.errors import ValidationError, NotFoundError, ForbiddenError

from .auth import upsert_profile

logger = logging.getLogger(__name__)


def _involving(user_id):
    return Friendship.query.filter(
        db.or_(Friendship.user_id == user_id, Friendship.friend_id == user_id)
    )


def friend_ids(user_id):
    """Ids of users with an accepted friendship with user_id."""
    rows = _involving(user_id).filter(Friendship.status == FRIENDSHIP_ACCEPTED).all()
    return {row.other_party(user_id) for row in rows}


def are_friends(a, b):
    if not a or not b or a == b:
        return False
    return Friendship.query.filter_by(
        pair_key=Friendship.make_pair_key(a, b), status=FRIENDSHIP_ACCEPTED
    ).first() is not None


def find_profile_by_email(email, lookup=None):
    """
    Find a profile by e-mail, case-insensitively.

    lookup, when given, is asked for users that never signed in here; it
    returns an auth provider user dict or None.
    """
    profile = Profile.query.filter(db.func.lower(Profile.email) == email).first()
    if profile is None and lookup is not None:
        user = lookup(email)
        if user:
            profile = upsert_profile(user)
    return profile


def send_request(user_id, email, lookup=None):
    """
    Send a friend request from user_id to the user with `email`.

    Raises:
        ValidationError: No e-mail, own e-mail, or a request/friendship exists
        NotFoundError: No user with that e-mail
    """
    if email is not None and not isinstance(email, str):
        raise ValidationError('email must be a string')
    email = (email or '').strip().lower()
    if not email or '@' not in email:
        raise ValidationError('Email is required')

    own = db.session.get(Profile, user_id)
    if own is not None and (own.email or '').lower() == email:
        raise ValidationError('You cannot add yourself as a friend')

    target = find_profile_by_email(email, lookup)
    if target is None:
        raise NotFoundError('User not found')
    if target.user_id == user_id:
        raise ValidationError('You cannot add yourself as a friend')

    pair_key = Friendship.make_pair_key(user_id, target.user_id)
    existing = Friendship.query.filter_by(pair_key=pair_key).first()
    if existing is not None:
        if existing.status == FRIENDSHIP_ACCEPTED:
            raise ValidationError('You are already friends')
        raise ValidationError('Friend request already pending')

    friendship = Friendship(
        user_id=user_id, friend_id=target.user_id, status=FRIENDSHIP_PENDING, pair_key=pair_key,
    )
    db.session.add(friendship)
    try:
        db.session.commit()
    except IntegrityError as e:
        # Both users sent a request at the same moment
        db.session.rollback()
        raise ValidationError('Friend request already pending') from e

    logger.info("User %s sent friend request %s to %s", user_id, friendship.id, target.user_id)
    return friendship


def _get_friendship(friendship_id):
    if not friendship_id:
        raise ValidationError('Friendship ID is required')
    friendship = db.session.get(Friendship, friendship_id)
    if friendship is None:
        raise NotFoundError('Friend request not found')
    return friendship


def _get_received_request(user_id, friendship_id):
    friendship = _get_friendship(friendship_id)
    if friendship.friend_id != user_id:
        raise ForbiddenError('Only the recipient can answer a friend request')
    if friendship.status != FRIENDSHIP_PENDING:
        raise ValidationError('Friend request is not pending')
    return friendship


def accept_request(user_id, friendship_id):
    friendship = _get_received_request(user_id, friendship_id)
    friendship.status = FRIENDSHIP_ACCEPTED
    db.session.commit()
    logger.info("User %s accepted friend request %s", user_id, friendship_id)
    return friendship


def reject_request(user_id, friendship_id):
    friendship = _get_received_request(user_id, friendship_id)
    db.session.delete(friendship)
    db.session.commit()
    logger.info("User %s rejected friend request %s", user_id, friendship_id)


def remove_friendship(user_id, friendship_id):
    """Either party may remove a friendship or withdraw a request, in any state."""
    friendship = _get_friendship(friendship_id)
    if not friendship.involves(user_id):
        raise ForbiddenError('You are not part of this friendship')
    db.session.delete(friendship)
    db.session.commit()
    logger.info("User %s removed friendship %s", user_id, friendship_id)


def display_name(profile, user_id):
    if profile is not None:
        if profile.display_name:
            return profile.display_name
        if profile.email:
            return profile.email.split('@', 1)[0]
    return user_id[:8]


def _entry(friendship, user_id, profiles):
    other_id = friendship.other_party(user_id)
    profile = profiles.get(other_id)
    return {
        'friendshipId': friendship.id,
        'userId': other_id,
        'email': profile.email if profile else None,
        'displayName': display_name(profile, other_id),
        'avatarUrl': profile.avatar_url if profile else None,
        'status': friendship.status,
        'createdAt': isoformat(friendship.created_at),
        'isInitiator': friendship.user_id == user_id,
    }


def list_friends(user_id):
    """
    Friends and open requests of user_id.

    Returns {friends, pendingRequests (sent), receivedRequests, total}.
    """
    rows = _involving(user_id).order_by(Friendship.created_at.desc()).all()
    other_ids = {row.other_party(user_id) for row in rows}
    profiles = {}
    if other_ids:
        profiles = {p.user_id: p for p in Profile.query.filter(Profile.user_id.in_(list(other_ids)))}

    friends, sent, received = [], [], []
    for row in rows:
        entry = _entry(row, user_id, profiles)
        if row.status == FRIENDSHIP_ACCEPTED:
            friends.append(entry)
        elif row.user_id == user_id:
            sent.append(entry)
        else:
            received.append(entry)

    return {
        'friends': friends,
        'pendingRequests': sent,
        'receivedRequests': received,
        'total': len(friends),
    }
