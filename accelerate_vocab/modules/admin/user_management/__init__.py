# File: accelerate_vocab/modules/admin/user_management/__init__.py
# Purpose: Blueprint for the admin pupil screens and the assignment toggle API.

from flask import Blueprint

user_management_bp = Blueprint('user_management', __name__)

from . import routes  # noqa: E402,F401
