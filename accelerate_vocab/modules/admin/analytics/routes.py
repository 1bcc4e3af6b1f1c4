# File: accelerate_vocab/modules/admin/analytics/routes.py
# Purpose: Pupil activity overview and the per-pupil full report.

from flask import current_app, flash, redirect, render_template, url_for
from sqlalchemy.exc import SQLAlchemyError

from . import analytics_bp
from .services import AnalyticsService
from ....core.auth_context import role_required
from ....models import UserRole


@analytics_bp.route('/')
@role_required(UserRole.ROLE_ADMIN)
def overview():
    rows = []
    try:
        rows = AnalyticsService.pupil_overview()
    except SQLAlchemyError as exc:
        current_app.logger.error(f"Error fetching analytics: {exc}")
        flash('Failed to load analytics', 'danger')
    return render_template('admin/analytics/overview.html', rows=rows)


@analytics_bp.route('/pupils/<int:profile_id>')
@role_required(UserRole.ROLE_ADMIN)
def pupil_report(profile_id):
    try:
        summary, performance = AnalyticsService.pupil_report(profile_id)
    except SQLAlchemyError as exc:
        current_app.logger.error(f"Error fetching report for pupil {profile_id}: {exc}")
        flash('Failed to load pupil report', 'danger')
        return redirect(url_for('analytics.overview'))
    return render_template('admin/analytics/pupil.html', summary=summary, performance=performance)
