"""
Auth Service - credential checks.

Keeps database lookups out of the routes.
"""
from flask import current_app

from ...models import User


class AuthService:
    """Service for authentication related operations."""

    @staticmethod
    def authenticate(email, password):
        """
        Verify credentials.

        Returns:
            User object if valid, None otherwise.
        """
        user = User.query.filter_by(email=User.normalize_email(email)).first()
        if user and user.check_password(password or ''):
            return user

        current_app.logger.info("Failed sign-in attempt for %s", email)
        return None
