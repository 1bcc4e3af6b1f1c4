"""Bootstrap helpers for configuring the Flask application."""

from __future__ import annotations

from typing import Callable

from flask import Flask

from ..extensions import csrf_protect, db, login_manager
from .auth_context import init_auth_context
from .logging_config import setup_logging
from .module_registry import register_default_modules


def configure_logging(app: Flask) -> None:
    """Attach console and rotating file handlers to the app logger.

    ``app.logger`` is the ``accelerate_vocab`` logger, so every module logger
    under the package shares these handlers.
    """

    setup_logging(app)
    app.logger.info("Flask app logger configured successfully.")


def register_extensions(app: Flask) -> None:
    """Initialize shared extensions with the Flask app instance."""

    db.init_app(app)
    login_manager.init_app(app)
    csrf_protect.init_app(app)


def register_auth_context(app: Flask) -> None:
    """Wire the user loader and the per-request auth context."""

    @login_manager.user_loader
    def load_user(user_id: str):
        from ..models import User

        return db.session.get(User, int(user_id))

    init_auth_context(app)


def register_context_processors(app: Flask) -> None:
    """Register global template context processors."""

    from ..utils.formatting import accuracy_band, format_accuracy, format_duration

    @app.context_processor
    def inject_utility_functions() -> dict[str, Callable[..., str]]:
        return {
            "format_accuracy": format_accuracy,
            "format_duration": format_duration,
            "accuracy_band": accuracy_band,
        }

    @app.context_processor
    def inject_app_name() -> dict[str, object]:
        return {"app_name": app.config.get("APP_NAME", "Accelerate Vocab")}


def register_blueprints(app: Flask) -> None:
    """Register all default blueprints with the app."""

    register_default_modules(app)


def initialize_database(app: Flask) -> None:
    """Create database tables and ensure an administrator exists."""

    from ..models import Profile, User, UserRole

    db.create_all()

    admin_role = UserRole.query.filter_by(role=UserRole.ROLE_ADMIN).first()
    if admin_role is not None:
        app.logger.info("Existing admin found, skipping default admin creation.")
        return

    email = app.config.get("DEFAULT_ADMIN_EMAIL")
    password = app.config.get("DEFAULT_ADMIN_PASSWORD")
    if not email or not password:
        app.logger.info("No admin account yet; use /create-test-users or set DEFAULT_ADMIN_EMAIL.")
        return

    admin = User(email=User.normalize_email(email))
    admin.set_password(password)
    db.session.add(admin)
    db.session.flush()
    profile = Profile(auth_id=admin.user_id, name="Administrator")
    db.session.add(profile)
    db.session.flush()
    db.session.add(UserRole(user_id=profile.id, role=UserRole.ROLE_ADMIN))
    db.session.commit()
    app.logger.info("Created default admin %s.", admin.email)
