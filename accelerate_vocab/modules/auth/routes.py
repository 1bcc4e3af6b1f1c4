# File: accelerate_vocab/modules/auth/routes.py
# Purpose: Sign-in/sign-out and the one-off test account page.

from urllib.parse import urlparse

from flask import abort, current_app, flash, redirect, render_template, request, url_for
from flask_login import current_user, login_user, logout_user
from sqlalchemy.exc import SQLAlchemyError

from . import auth_bp
from .forms import CreateTestUsersForm, LoginForm
from .services import AuthService
from ...core.error_handlers import AccelerateVocabError
from ..admin.user_management.services import PupilService


def _safe_next(target):
    """Only allow relative redirects back into this site."""
    if not target:
        return None
    parsed = urlparse(target)
    if parsed.scheme or parsed.netloc or not target.startswith('/'):
        return None
    return target


@auth_bp.route('/login', methods=['GET', 'POST'])
def login():
    if current_user.is_authenticated:
        return redirect(url_for('dashboard.dashboard'))

    form = LoginForm()
    if form.validate_on_submit():
        user = AuthService.authenticate(form.email.data, form.password.data)
        if user is None:
            flash('Invalid email or password.', 'danger')
            return render_template('auth/login.html', form=form), 401

        login_user(user, remember=form.remember_me.data)
        flash('Signed in successfully.', 'success')

        next_page = _safe_next(request.args.get('next'))
        return redirect(next_page or url_for('dashboard.dashboard'))

    return render_template('auth/login.html', form=form)


@auth_bp.route('/logout', methods=['GET', 'POST'])
def logout():
    logout_user()
    flash('You have been signed out.', 'info')
    return redirect(url_for('landing.index'))


@auth_bp.route('/create-test-users', methods=['GET', 'POST'])
def create_test_users():
    if not current_app.config.get('ENABLE_TEST_USER_ROUTE', True):
        abort(404)

    form = CreateTestUsersForm()
    accounts = None
    if form.validate_on_submit():
        try:
            accounts = PupilService.create_test_users()
            flash('Test users created successfully', 'success')
        except (AccelerateVocabError, SQLAlchemyError) as exc:
            current_app.logger.error(f"Error creating test users: {exc}")
            flash(f'Error: {exc}', 'danger')

    return render_template('auth/create_test_users.html', form=form, accounts=accounts)
