from flask import Blueprint

landing_bp = Blueprint('landing', __name__)

from . import routes  # noqa: E402,F401
