"""
Social Models

Contains the Profile and Friendship models. Profiles mirror the auth
provider's users so friends can be found by e-mail.
"""

from .base import db, utcnow, new_id, isoformat


class Profile(db.Model):
    """Local copy of an auth provider user, refreshed on every sign-in."""
    __tablename__ = 'profiles'

    user_id = db.Column(db.String(36), primary_key=True)
    email = db.Column(db.String(320), unique=True, nullable=True, index=True)
    display_name = db.Column(db.String(100), nullable=True)
    avatar_url = db.Column(db.String(2000), nullable=True)
    created_at = db.Column(db.DateTime, nullable=False, default=utcnow)
    updated_at = db.Column(db.DateTime, nullable=False, default=utcnow, onupdate=utcnow)


class Friendship(db.Model):
    """
    Friend request between an initiator (user_id) and a recipient (friend_id).

    pair_key is both ids sorted and joined, so the unique constraint allows
    only one row per unordered pair of users.
    """
    __tablename__ = 'friendships'

    id = db.Column(db.String(36), primary_key=True, default=new_id)
    user_id = db.Column(db.String(36), nullable=False, index=True)
    friend_id = db.Column(db.String(36), nullable=False, index=True)
    status = db.Column(db.String(20), nullable=False, default='pending')
    pair_key = db.Column(db.String(80), nullable=False, unique=True)
    created_at = db.Column(db.DateTime, nullable=False, default=utcnow)
    updated_at = db.Column(db.DateTime, nullable=False, default=utcnow, onupdate=utcnow)

    @staticmethod
    def make_pair_key(a, b):
        return ':'.join(sorted((a, b)))

    def involves(self, user_id):
        return user_id in (self.user_id, self.friend_id)

    def other_party(self, user_id):
        return self.friend_id if self.user_id == user_id else self.user_id

    def to_dict(self):
        return {
            'id': self.id,
            'user_id': self.user_id,
            'friend_id': self.friend_id,
            'status': self.status,
            'created_at': isoformat(self.created_at),
            'updated_at': isoformat(self.updated_at),
        }
