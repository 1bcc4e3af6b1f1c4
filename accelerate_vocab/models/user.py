"""Identity, profile and role models."""

from __future__ import annotations

from datetime import datetime, timezone

from flask_login import UserMixin
from werkzeug.security import check_password_hash, generate_password_hash

from ..db_instance import db


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


class User(UserMixin, db.Model):
    """Login identity. Everything the app shows about a person hangs off ``Profile``."""

    __tablename__ = 'users'
    __table_args__ = {'sqlite_autoincrement': True}

    user_id = db.Column(db.Integer, primary_key=True)
    email = db.Column(db.String(255), unique=True, nullable=False)
    password_hash = db.Column(db.String(256), nullable=False)
    created_at = db.Column(db.DateTime(timezone=True), default=utcnow)

    profile = db.relationship(
        'Profile', uselist=False, back_populates='user', cascade='all, delete-orphan'
    )

    def get_id(self):
        return str(self.user_id)

    def set_password(self, password: str) -> None:
        self.password_hash = generate_password_hash(password)

    def check_password(self, password: str) -> bool:
        return check_password_hash(self.password_hash, password)

    @staticmethod
    def normalize_email(email: str | None) -> str:
        return (email or '').strip().lower()


class Group(db.Model):
    """A class or teaching group that pupils can belong to."""

    __tablename__ = 'groups'

    id = db.Column(db.Integer, primary_key=True)
    name = db.Column(db.String(120), nullable=False)
    description = db.Column(db.Text)
    created_at = db.Column(db.DateTime(timezone=True), default=utcnow)


class Profile(db.Model):
    """Display-facing record of a person, linked 1:1 to a login identity."""

    __tablename__ = 'profiles'
    __table_args__ = {'sqlite_autoincrement': True}

    id = db.Column(db.Integer, primary_key=True)
    auth_id = db.Column(db.Integer, db.ForeignKey('users.user_id'), unique=True, nullable=False)
    name = db.Column(db.String(120), nullable=False)
    group_id = db.Column(db.Integer, db.ForeignKey('groups.id'), nullable=True)
    created_at = db.Column(db.DateTime(timezone=True), default=utcnow)

    user = db.relationship('User', back_populates='profile')
    group = db.relationship('Group', lazy=True)
    roles = db.relationship('UserRole', backref='profile', lazy=True, cascade='all, delete-orphan')

    @property
    def display_name(self) -> str:
        """First name plus last initial, e.g. ``Sam T.``."""

        parts = (self.name or '').split()
        if not parts:
            return ''
        if len(parts) == 1:
            return parts[0]
        return f"{parts[0]} {parts[-1][0].upper()}."


class UserRole(db.Model):
    """Role granted to a profile."""

    __tablename__ = 'user_roles'

    ROLE_ADMIN = 'admin'
    ROLE_PUPIL = 'pupil'
    ROLES = (ROLE_ADMIN, ROLE_PUPIL)

    id = db.Column(db.Integer, primary_key=True)
    user_id = db.Column(db.Integer, db.ForeignKey('profiles.id'), nullable=False)
    role = db.Column(db.String(20), nullable=False)

    __table_args__ = (db.UniqueConstraint('user_id', 'role', name='_user_role_uc'),)
