# File: accelerate_vocab/modules/admin/analytics/__init__.py
# Purpose: Blueprint for the admin analytics overview and per-pupil reports.

from flask import Blueprint

analytics_bp = Blueprint('analytics', __name__)

from . import routes  # noqa: E402,F401
