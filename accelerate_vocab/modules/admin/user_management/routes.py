# File: accelerate_vocab/modules/admin/user_management/routes.py
# Purpose: Admin pupil list, pupil CRUD and module assignment toggles.

from flask import current_app, flash, jsonify, redirect, render_template, request, url_for
from sqlalchemy.exc import SQLAlchemyError

from . import user_management_bp
from .forms import EditPupilForm, PupilForm
from .services import PupilService
from ....core.auth_context import check_roles
from ....core.error_handlers import AccelerateVocabError, error_response, success_response
from ....models import Module, UserRole
from ..content_management.forms import DeleteForm


@user_management_bp.before_request
def admin_users_required():
    return check_roles(UserRole.ROLE_ADMIN)


def _assignment_message(assigned):
    return 'Module assigned' if assigned else 'Module unassigned'


@user_management_bp.route('/pupils')
def list_pupils():
    pupils, modules = [], []
    try:
        pupils = PupilService.list_pupils()
        modules = Module.query.order_by(Module.title).all()
    except SQLAlchemyError as exc:
        current_app.logger.error(f"Error fetching pupils: {exc}")
        flash('Failed to load pupils', 'danger')

    return render_template(
        'admin/pupils/list.html',
        pupils=pupils,
        modules=modules,
        form=PupilForm(),
        delete_form=DeleteForm(),
    )


@user_management_bp.route('/pupils/new', methods=['GET', 'POST'])
def create_pupil():
    form = PupilForm()
    if form.validate_on_submit():
        try:
            PupilService.create_pupil(form.email.data, form.password.data, form.name.data)
            flash('Pupil created successfully', 'success')
            return redirect(url_for('user_management.list_pupils'))
        except AccelerateVocabError as exc:
            flash(exc.message, 'danger')
        except SQLAlchemyError:
            flash('Failed to create pupil', 'danger')
    return render_template('admin/pupils/form.html', form=form, title='New pupil')


@user_management_bp.route('/pupils/<int:profile_id>/edit', methods=['GET', 'POST'])
def edit_pupil(profile_id):
    pupil = PupilService.get_pupil(profile_id)
    form = EditPupilForm()
    if request.method == 'GET':
        form.name.data = pupil.name
        form.email.data = pupil.user.email if pupil.user else ''

    if form.validate_on_submit():
        try:
            PupilService.update_pupil(
                profile_id,
                name=form.name.data,
                email=form.email.data,
                password=form.password.data,
            )
            flash('Pupil updated successfully', 'success')
            return redirect(url_for('user_management.list_pupils'))
        except AccelerateVocabError as exc:
            flash(exc.message, 'danger')
        except SQLAlchemyError:
            flash('Failed to update pupil', 'danger')
    return render_template('admin/pupils/form.html', form=form, pupil=pupil, title='Edit pupil')


@user_management_bp.route('/pupils/<int:profile_id>/delete', methods=['POST'])
def delete_pupil(profile_id):
    form = DeleteForm()
    if not form.validate_on_submit():
        flash('Invalid delete request', 'danger')
        return redirect(url_for('user_management.list_pupils'))
    try:
        PupilService.delete_pupil(profile_id)
        flash('Pupil deleted successfully', 'success')
    except AccelerateVocabError as exc:
        flash(exc.message, 'danger')
    except SQLAlchemyError:
        flash('Failed to delete pupil', 'danger')
    return redirect(url_for('user_management.list_pupils'))


@user_management_bp.route('/pupils/<int:profile_id>/modules/<int:module_id>/toggle', methods=['POST'])
def toggle_module(profile_id, module_id):
    try:
        assigned = PupilService.toggle_assignment(profile_id, module_id)
        flash(_assignment_message(assigned), 'success')
    except AccelerateVocabError as exc:
        flash(exc.message, 'danger')
    except SQLAlchemyError:
        flash('Failed to update module assignment', 'danger')
    return redirect(url_for('user_management.list_pupils'))


@user_management_bp.route('/api/pupils/<int:profile_id>/modules/<int:module_id>', methods=['POST'])
def api_toggle_module(profile_id, module_id):
    """Set (``{"assigned": true|false}``) or flip the assignment in place."""

    data = request.get_json(silent=True) or {}
    if 'assigned' in data and not isinstance(data['assigned'], bool):
        return error_response('"assigned" must be true or false', 'VALIDATION_ERROR', 400)
    try:
        if 'assigned' in data:
            assigned = PupilService.set_assignment(profile_id, module_id, data['assigned'])
        else:
            assigned = PupilService.toggle_assignment(profile_id, module_id)
    except AccelerateVocabError as exc:
        return jsonify(exc.to_dict()), exc.status_code
    except SQLAlchemyError:
        return error_response('Failed to update module assignment', 'DATABASE_ERROR', 500)

    return jsonify(success_response({'assigned': assigned}, _assignment_message(assigned)))
