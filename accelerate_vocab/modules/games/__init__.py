# File: accelerate_vocab/modules/games/__init__.py
# Purpose: Game pages (matching, multiple choice, synonym match) and their JSON API.

from flask import Blueprint

games_bp = Blueprint('games', __name__)

from . import routes  # noqa: E402,F401
