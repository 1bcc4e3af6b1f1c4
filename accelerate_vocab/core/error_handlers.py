"""
Error taxonomy and Flask error handlers for Accelerate Vocab.

Services raise ``AccelerateVocabError`` subclasses. Requests under the JSON
prefixes (game and assignment endpoints the browser calls with ``fetch``) get
``{"success": false, "message", "code"}`` bodies; page requests get a flash
message and a redirect to the dashboard, or the 404/500 pages.
"""

from typing import Any, Dict, Optional

from flask import current_app, flash, jsonify, redirect, render_template, request, url_for
from flask_wtf.csrf import CSRFError


JSON_PREFIXES = ('/api/', '/game/api/', '/admin/api/')


class AccelerateVocabError(Exception):
    """Base class; subclasses fix ``code`` and ``status_code``."""

    code = 'UNKNOWN_ERROR'
    status_code = 500

    def __init__(self, message: str, details: Optional[Dict[str, Any]] = None):
        super().__init__(message)
        self.message = message
        self.details = details or {}

    def to_dict(self) -> Dict[str, Any]:
        return {
            'success': False,
            'message': self.message,
            'code': self.code,
            'details': self.details,
        }


class NotFoundError(AccelerateVocabError):
    """A module, pupil, question or game that does not exist."""

    code = 'NOT_FOUND'
    status_code = 404

    def __init__(self, message: str = 'Resource not found', resource: Optional[str] = None):
        super().__init__(message, {'resource': resource} if resource else None)


class ValidationError(AccelerateVocabError):
    """Input the service refuses (missing title, short password, bad sheet)."""

    code = 'VALIDATION_ERROR'
    status_code = 400

    def __init__(self, message: str = 'Validation failed', errors: Optional[Dict[str, Any]] = None):
        super().__init__(message, {'errors': errors} if errors else None)


class AuthorizationError(AccelerateVocabError):
    """The signed-in user may not do this (unassigned module, deleting an admin)."""

    code = 'UNAUTHORIZED'
    status_code = 403

    def __init__(self, message: str = 'Access denied'):
        super().__init__(message)


def error_response(message: str, code: str = 'ERROR', status_code: int = 400, details: Optional[Dict] = None):
    """``(json, status)`` pair for a failed API call."""

    body = {'success': False, 'message': message, 'code': code}
    if details:
        body['details'] = details
    return jsonify(body), status_code


def success_response(data: Any = None, message: Optional[str] = None) -> dict:
    body = {'success': True}
    if data is not None:
        body['data'] = data
    if message:
        body['message'] = message
    return body


def wants_json() -> bool:
    return request.path.startswith(JSON_PREFIXES)


def register_error_handlers(app):
    """Install the handlers on ``app``."""

    @app.errorhandler(AccelerateVocabError)
    def handle_app_error(error):
        current_app.logger.warning(f"{error.code} on {request.path}: {error.message}")
        if wants_json():
            return jsonify(error.to_dict()), error.status_code
        flash(error.message, 'danger')
        return redirect(url_for('dashboard.dashboard'))

    @app.errorhandler(CSRFError)
    def handle_csrf_error(error):
        current_app.logger.warning(f"CSRF check failed on {request.path}: {error.description}")
        if wants_json():
            return error_response('Your session has expired. Please reload the page.', 'CSRF_ERROR', 400)
        flash('Your session has expired. Please try again.', 'danger')
        return redirect(request.referrer or url_for('dashboard.dashboard'))

    @app.errorhandler(404)
    def handle_not_found(error):
        if wants_json():
            return error_response('Endpoint not found', 'NOT_FOUND', 404)
        return render_template('errors/404.html', path=request.path), 404

    @app.errorhandler(500)
    def handle_internal_error(error):
        current_app.logger.exception('Internal server error')
        if wants_json():
            return error_response('Internal server error', 'SERVER_ERROR', 500)
        return render_template('errors/500.html'), 500
