# File: accelerate_vocab/modules/admin/content_management/__init__.py
# Purpose: Blueprint for the admin module, question and onboarding-slide screens.

from flask import Blueprint

content_management_bp = Blueprint('content_management', __name__)

from . import routes  # noqa: E402,F401
