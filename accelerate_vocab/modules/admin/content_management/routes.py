# File: accelerate_vocab/modules/admin/content_management/routes.py
# Purpose: Admin screens for modules, their questions and their onboarding slides.
#
# Every mutation redirects back to its list so the page re-reads fresh rows.
# Failed mutations are rolled back in the service and flashed here.

from flask import current_app, flash, redirect, render_template, request, url_for
from sqlalchemy.exc import SQLAlchemyError

from . import content_management_bp
from .forms import DeleteForm, ImportForm, ModuleForm, SlidesForm, VocabItemForm
from .services import ContentService
from ....core.auth_context import check_roles
from ....core.error_handlers import ValidationError
from ....models import Module, UserRole
from ....utils.excel import format_import_warnings
from ....utils.pagination import get_pagination_data
from ...games.logics.onboarding import EDITABLE_ICONS, SlideIcon, choose_slides, render_icon


@content_management_bp.before_request
def admin_content_required():
    return check_roles(UserRole.ROLE_ADMIN)


# --- MODULES ---

@content_management_bp.route('/modules')
def list_modules():
    modules = []
    try:
        modules = ContentService.list_modules()
    except SQLAlchemyError as exc:
        current_app.logger.error(f"Error fetching modules: {exc}")
        flash('Failed to load modules', 'danger')
    return render_template('admin/modules/list.html', modules=modules, delete_form=DeleteForm())


@content_management_bp.route('/modules/new', methods=['GET', 'POST'])
def create_module():
    form = ModuleForm()
    if form.validate_on_submit():
        try:
            module = ContentService.create_module(form.data)
            flash(f'Module "{module.title}" created successfully', 'success')
            return redirect(url_for('content_management.list_modules'))
        except ValidationError as exc:
            flash(exc.message, 'danger')
        except SQLAlchemyError:
            flash('Failed to create module', 'danger')
    return render_template('admin/modules/form.html', form=form, title='New module')


@content_management_bp.route('/modules/<int:module_id>/edit', methods=['GET', 'POST'])
def edit_module(module_id):
    module = ContentService.get_module(module_id)
    form = ModuleForm(obj=module)
    if form.validate_on_submit():
        try:
            ContentService.update_module(module_id, form.data)
            flash('Module updated successfully', 'success')
            return redirect(url_for('content_management.list_modules'))
        except ValidationError as exc:
            flash(exc.message, 'danger')
        except SQLAlchemyError:
            flash('Failed to update module', 'danger')
    return render_template('admin/modules/form.html', form=form, module=module, title='Edit module')


@content_management_bp.route('/modules/<int:module_id>/delete', methods=['POST'])
def delete_module(module_id):
    form = DeleteForm()
    if not form.validate_on_submit():
        flash('Invalid delete request', 'danger')
        return redirect(url_for('content_management.list_modules'))
    try:
        ContentService.delete_module(module_id)
        flash('Module deleted successfully', 'success')
    except SQLAlchemyError:
        flash('Failed to delete module', 'danger')
    return redirect(url_for('content_management.list_modules'))


# --- QUESTIONS (VOCABULARY ITEMS) ---

def _item_form(module, **kwargs):
    return VocabItemForm(require_options=module.game_type == Module.GAME_MULTIPLE_CHOICE, **kwargs)


@content_management_bp.route('/modules/<int:module_id>/questions', methods=['GET', 'POST'])
def list_questions(module_id):
    """List a module's questions; the page's add form posts back here."""

    module = ContentService.get_module(module_id)
    form = _item_form(module)
    if form.validate_on_submit():
        try:
            ContentService.create_item(module_id, form.data)
            flash('Question added successfully', 'success')
            return redirect(url_for('content_management.list_questions', module_id=module_id))
        except ValidationError as exc:
            flash(exc.message, 'danger')
        except SQLAlchemyError:
            flash('Failed to add question', 'danger')

    pagination = get_pagination_data(ContentService.items_query(module_id))
    return render_template(
        'admin/questions/list.html',
        module=module,
        form=form,
        import_form=ImportForm(),
        delete_form=DeleteForm(),
        items=pagination.items,
        pagination=pagination,
    )


@content_management_bp.route('/modules/<int:module_id>/questions/<int:item_id>/edit', methods=['GET', 'POST'])
def edit_question(module_id, item_id):
    module = ContentService.get_module(module_id)
    item = ContentService.get_item(module_id, item_id)
    form = _item_form(module, obj=item)
    if request.method == 'GET' and not item.correct_option:
        form.correct_option.data = 'A'
    if form.validate_on_submit():
        try:
            ContentService.update_item(module_id, item_id, form.data)
            flash('Question updated successfully', 'success')
            return redirect(url_for('content_management.list_questions', module_id=module_id))
        except ValidationError as exc:
            flash(exc.message, 'danger')
        except SQLAlchemyError:
            flash('Failed to update question', 'danger')
    return render_template('admin/questions/form.html', module=module, item=item, form=form)


@content_management_bp.route('/modules/<int:module_id>/questions/<int:item_id>/delete', methods=['POST'])
def delete_question(module_id, item_id):
    form = DeleteForm()
    if form.validate_on_submit():
        try:
            ContentService.delete_item(module_id, item_id)
            flash('Question deleted successfully', 'success')
        except SQLAlchemyError:
            flash('Failed to delete question', 'danger')
    else:
        flash('Invalid delete request', 'danger')
    return redirect(url_for('content_management.list_questions', module_id=module_id))


@content_management_bp.route('/modules/<int:module_id>/questions/import', methods=['POST'])
def import_questions(module_id):
    form = ImportForm()
    if not form.validate_on_submit():
        for errors in form.errors.values():
            for error in errors:
                flash(error, 'danger')
        return redirect(url_for('content_management.list_questions', module_id=module_id))

    try:
        added, warnings = ContentService.import_items(module_id, form.excel_file.data)
    except ValidationError as exc:
        flash(exc.message, 'danger')
    except SQLAlchemyError:
        flash('Failed to import questions', 'danger')
    else:
        flash(f'Imported {added} question(s)', 'success' if added else 'warning')
        if warnings:
            flash(format_import_warnings(warnings), 'warning')
    return redirect(url_for('content_management.list_questions', module_id=module_id))


# --- ONBOARDING SLIDES ---

@content_management_bp.route('/modules/<int:module_id>/slides', methods=['GET', 'POST'])
def edit_slides(module_id):
    module = ContentService.get_module(module_id)
    form = SlidesForm()

    if form.validate_on_submit():
        try:
            ContentService.save_slides(module_id, [entry.data for entry in form.slides])
            flash('Onboarding slides saved', 'success')
            return redirect(url_for('content_management.edit_slides', module_id=module_id))
        except ValidationError as exc:
            flash(exc.message, 'danger')
        except SQLAlchemyError:
            flash('Failed to save slides', 'danger')
    elif request.method == 'GET':
        # prefill with the slides pupils currently see
        current = choose_slides(module.game_type, ContentService.custom_slides(module_id))
        for entry, slide in zip(form.slides, current):
            icon = slide.icon if slide.icon in EDITABLE_ICONS else SlideIcon.SPARKLES
            entry.icon_name.data = icon.value
            entry.image_url.data = slide.image_url or ''
            entry.content.data = slide.content

    return render_template(
        'admin/slides/edit.html',
        module=module,
        form=form,
        has_custom=bool(ContentService.custom_slides(module_id)),
        icons=[(icon.value, render_icon(icon.value)) for icon in EDITABLE_ICONS],
        delete_form=DeleteForm(),
    )


@content_management_bp.route('/modules/<int:module_id>/slides/reset', methods=['POST'])
def reset_slides(module_id):
    form = DeleteForm()
    if form.validate_on_submit():
        try:
            ContentService.reset_slides(module_id)
            flash('Slides reset to the defaults', 'success')
        except SQLAlchemyError:
            flash('Failed to reset slides', 'danger')
    return redirect(url_for('content_management.edit_slides', module_id=module_id))
