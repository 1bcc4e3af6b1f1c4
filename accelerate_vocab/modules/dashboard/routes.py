# File: accelerate_vocab/modules/dashboard/routes.py
# Purpose: /dashboard, branching on the signed-in user's role.

from flask import current_app, flash, render_template, request
from flask_login import login_required
from sqlalchemy.exc import SQLAlchemyError

from . import dashboard_bp
from .logics.leaderboard import SORT_MODULES, SORT_OPTIONS, build_leaderboard
from .services import LEVEL_FILTERS, AdminStats, DashboardService, PupilStats
from ...core.auth_context import get_auth_context
from ..games.services import game_endpoint


@dashboard_bp.route('/dashboard')
@login_required
def dashboard():
    auth = get_auth_context()

    if auth.is_admin:
        return _admin_dashboard()
    if auth.is_pupil:
        return _pupil_dashboard(auth)
    return render_template('dashboard/no_role.html')


def _admin_dashboard():
    try:
        stats = DashboardService.admin_stats()
    except SQLAlchemyError as exc:
        current_app.logger.error(f"Error loading admin stats: {exc}")
        flash('Failed to load dashboard statistics', 'danger')
        stats = AdminStats()
    return render_template('dashboard/admin.html', stats=stats)


def _pupil_dashboard(auth):
    level = request.args.get('level', 'all')
    if level not in LEVEL_FILTERS:
        level = 'all'
    sort_by = request.args.get('sort', SORT_MODULES)
    if sort_by not in SORT_OPTIONS:
        sort_by = SORT_MODULES
    expanded = request.args.get('expanded') == '1'

    modules = []
    stats = PupilStats()
    try:
        modules = DashboardService.pupil_modules(auth.profile_id, level)
    except SQLAlchemyError as exc:
        current_app.logger.error(f"Error fetching modules: {exc}")
        flash('Failed to load your modules', 'danger')
    try:
        stats = DashboardService.pupil_stats(auth.profile_id)
    except SQLAlchemyError as exc:
        current_app.logger.error(f"Error fetching stats: {exc}")

    leaderboard = build_leaderboard(
        auth.profile.display_name,
        stats.modules_completed,
        stats.average_accuracy,
        sort_by=sort_by,
        expanded=expanded,
    )

    return render_template(
        'dashboard/pupil.html',
        modules=modules,
        stats=stats,
        leaderboard=leaderboard,
        level=level,
        level_filters=LEVEL_FILTERS,
        game_endpoint=game_endpoint,
    )
