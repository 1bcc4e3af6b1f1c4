"""Extension instances shared by the blueprints and services.

Anonymous requests to the JSON game and assignment endpoints get a 401 body
instead of the login redirect, so the game screen can tell the pupil to sign
in again rather than trying to parse a login page.
"""

from flask import flash, redirect, request, url_for
from flask_login import LoginManager
from flask_wtf import CSRFProtect

from .core.error_handlers import error_response, wants_json
from .db_instance import db

login_manager = LoginManager()
login_manager.login_view = "auth.login"
login_manager.login_message = "Please sign in to continue."
login_manager.login_message_category = "info"

csrf_protect = CSRFProtect()


@login_manager.unauthorized_handler
def _handle_unauthorized():
    if wants_json():
        return error_response("Please sign in again.", "UNAUTHENTICATED", 401)
    flash(login_manager.login_message, login_manager.login_message_category)
    return redirect(url_for(login_manager.login_view, next=request.path))


__all__ = ["db", "login_manager", "csrf_protect"]
