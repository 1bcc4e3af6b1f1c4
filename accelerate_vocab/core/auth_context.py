"""Per-request authentication context.

Maps the logged-in identity to its profile and single role. The context is
resolved into ``flask.g.auth`` at the start of each request, refreshed when
Flask-Login reports a sign-in and cleared on sign-out.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from functools import wraps
from typing import Optional

from flask import Flask, flash, g, redirect, url_for
from flask_login import current_user, user_logged_in, user_logged_out
from sqlalchemy.exc import SQLAlchemyError

from ..extensions import login_manager
from ..models import Profile, User, UserRole

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class AuthContext:
    """Who is signed in, and as what."""

    user: Optional[User] = None
    profile: Optional[Profile] = None
    role: Optional[str] = None

    @property
    def is_authenticated(self) -> bool:
        return self.user is not None

    @property
    def is_admin(self) -> bool:
        return self.role == UserRole.ROLE_ADMIN

    @property
    def is_pupil(self) -> bool:
        return self.role == UserRole.ROLE_PUPIL

    @property
    def profile_id(self) -> Optional[int]:
        return self.profile.id if self.profile else None


ANONYMOUS = AuthContext()


def resolve_auth_context(user) -> AuthContext:
    """Resolve profile then role for ``user``.

    A missing profile, a missing role or a database error all yield a context
    without a role; nothing is raised.
    """
    if user is None or not getattr(user, 'is_authenticated', False):
        return ANONYMOUS

    try:
        profile = Profile.query.filter_by(auth_id=user.user_id).first()
        if profile is None:
            logger.warning("No profile for user %s", user.user_id)
            return AuthContext(user=user)

        role_row = UserRole.query.filter_by(user_id=profile.id).first()
        role = role_row.role if role_row and role_row.role in UserRole.ROLES else None
        return AuthContext(user=user, profile=profile, role=role)
    except SQLAlchemyError as exc:
        logger.error("Failed to resolve role for user %s: %s", user.user_id, exc)
        return AuthContext(user=user)


def get_auth_context() -> AuthContext:
    """Return the context for the current request, resolving it on first use."""

    if 'auth' not in g:
        g.auth = resolve_auth_context(current_user)
    return g.auth


def check_roles(*roles):
    """Return a redirect response when the current visitor lacks every role in ``roles``.

    Returns ``None`` when access is allowed, so it can back a blueprint's
    ``before_request`` hook directly.
    """
    auth = get_auth_context()
    if not auth.is_authenticated:
        return login_manager.unauthorized()
    if auth.role not in roles:
        flash('You do not have access to that page.', 'danger')
        return redirect(url_for('dashboard.dashboard'))
    return None


def role_required(*roles):
    """Restrict a view to the given roles. Anonymous visitors go to the login page."""

    def decorator(view):
        @wraps(view)
        def wrapped(*args, **kwargs):
            denied = check_roles(*roles)
            if denied is not None:
                return denied
            return view(*args, **kwargs)

        return wrapped

    return decorator


def init_auth_context(app: Flask) -> None:
    """Hook the context lifecycle into the app."""

    @app.before_request
    def _load_auth_context():
        g.auth = resolve_auth_context(current_user)

    @app.context_processor
    def _inject_auth_context():
        return {'auth': get_auth_context()}

    def _on_login(sender, user, **extra):
        g.auth = resolve_auth_context(user)
        logger.info("User %s signed in with role %s", user.user_id, g.auth.role)

    def _on_logout(sender, user, **extra):
        g.auth = ANONYMOUS

    # strong refs: the handlers are local closures
    user_logged_in.connect(_on_login, app, weak=False)
    user_logged_out.connect(_on_logout, app, weak=False)
