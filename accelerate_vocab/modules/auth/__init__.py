# File: accelerate_vocab/modules/auth/__init__.py
# Purpose: Blueprint for sign-in, sign-out and the test-account utility page.

from flask import Blueprint

auth_bp = Blueprint('auth', __name__)

from . import routes  # noqa: E402,F401
