"""Declarative list of the blueprints that make up Accelerate Vocab.

Each feature package exposes one blueprint; ``FEATURES`` says where it lives
and where it is mounted. The admin blueprints share the ``/admin`` prefix, so
their route rules must not overlap.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Optional, Sequence, Tuple

from flask import Blueprint, Flask
from werkzeug.utils import import_string


@dataclass(frozen=True)
class ModuleDefinition:
    """A feature package, the name of its blueprint and its URL prefix."""

    package: str
    blueprint_name: str
    url_prefix: Optional[str] = None

    @property
    def import_path(self) -> str:
        return f"accelerate_vocab.modules.{self.package}:{self.blueprint_name}"

    def load_blueprint(self) -> Blueprint:
        blueprint = import_string(self.import_path)
        if not isinstance(blueprint, Blueprint):
            raise TypeError(f"{self.import_path} is {type(blueprint).__name__}, not a Blueprint")
        return blueprint


FEATURES: Tuple[ModuleDefinition, ...] = (
    ModuleDefinition("landing", "landing_bp"),
    ModuleDefinition("auth", "auth_bp"),
    ModuleDefinition("dashboard", "dashboard_bp"),
    ModuleDefinition("admin.content_management", "content_management_bp", url_prefix="/admin"),
    ModuleDefinition("admin.user_management", "user_management_bp", url_prefix="/admin"),
    ModuleDefinition("admin.analytics", "analytics_bp", url_prefix="/admin/analytics"),
    ModuleDefinition("games", "games_bp", url_prefix="/game"),
)


def register_modules(app: Flask, modules: Sequence[ModuleDefinition] = FEATURES) -> None:
    """Mount every blueprint in ``modules`` on ``app``."""

    for module in modules:
        app.register_blueprint(module.load_blueprint(), url_prefix=module.url_prefix)
        app.logger.debug("Mounted %s at %s", module.import_path, module.url_prefix or "/")
    app.logger.info("Registered %d feature blueprints", len(modules))


def register_default_modules(app: Flask) -> None:
    register_modules(app, FEATURES)
