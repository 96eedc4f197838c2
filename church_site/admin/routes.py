"""
Admin Routes

One screen per collection. Each request builds a CrudController for the
screen, loads it, applies the submitted change and either redirects back to
the list or re-renders the screen with the form still open.
"""

import logging

from flask import abort, current_app, flash, redirect, render_template, request, url_for
from flask_login import current_user

from church_site.admin import admin_bp
from church_site.auth.decorators import admin_required
from church_site.errors import StoreError, ValidationError
from church_site.models import GALLERY_CATEGORIES
from church_site.services.crud import DEFAULT_DELETE_PROMPT, CrudController
from church_site.services.featured import activate, deactivate, deactivate_others
from church_site.services.media import (
    attach_and_save, complete_and_purge, delete_with_media, has_file,
)
from church_site.validation import (
    event_form, gallery_form, settings_form, study_form, team_form, verse_form,
)

logger = logging.getLogger(__name__)

SCREENS = {
    'verses': {'collection': 'featured_verses', 'initial_form': {'active': True}},
    'events': {'collection': 'events', 'order_by': 'start_date', 'ascending': True},
    'studies': {'collection': 'studies', 'order_by': 'study_date'},
    'gallery': {'collection': 'gallery', 'order_by': 'sort_order', 'ascending': True,
                'initial_form': {'category': GALLERY_CATEGORIES[0], 'sort_order': 0}},
    'team': {'collection': 'team_members', 'order_by': 'sort_order', 'ascending': True,
             'initial_form': {'active': True, 'sort_order': 0}},
    'settings': {'collection': 'church_info', 'ascending': True},
}

COMPLETE_PROMPT = 'Mark this event as completed? Its image will be removed.'


def _controller(screen):
    options = dict(SCREENS[screen])
    controller = CrudController(options.pop('collection'), **options)
    controller.refresh()
    return controller


def _render(screen, controller, status=200, **context):
    return render_template(f'admin/{screen}.html', screen=controller, **context), status


def _open_requested_form(controller):
    """?new=1 opens the create form, ?edit=<id> the edit form."""
    if request.args.get('new'):
        controller.open_create_modal()
    edit_id = request.args.get('edit')
    if edit_id:
        record = controller.find(edit_id)
        if record is None:
            flash('Item not found.', 'warning')
        else:
            controller.open_edit_modal(record)


def _record_or_404(controller, record_id):
    record = controller.find(record_id)
    if record is None:
        abort(404)
    return record


def _confirmed():
    return request.form.get('confirmed') == 'yes'


def _ask(prompt, screen):
    """Confirmation page that re-posts the same action with confirmed=yes."""
    return render_template('admin/confirm.html', prompt=prompt, action=request.path,
                           cancel=url_for(f'admin.{screen}'))


def _save(screen, validate, record_id=None, before_save=None):
    controller = _controller(screen)
    record = _record_or_404(controller, record_id) if record_id else None
    if record:
        controller.open_edit_modal(record)
    else:
        controller.open_create_modal()

    try:
        fields = validate(request.form)
    except ValidationError as e:
        controller.show_errors(e.errors, request.form.to_dict(), record)
        return _render(screen, controller, 400)

    if before_save is not None and not before_save(controller, record, fields):
        controller.show_errors({}, request.form.to_dict(), record)
        return _render(screen, controller)

    if record:
        saved = controller.update(record['id'], fields)
    else:
        saved = controller.create(fields)
    if not saved:
        return _render(screen, controller)
    return redirect(url_for(f'admin.{screen}'))


def _save_with_media(screen, validate, bucket_key, url_field, file_field,
                     record_id=None, require_image=False, locked_when=None):
    controller = _controller(screen)
    record = _record_or_404(controller, record_id) if record_id else None
    if record:
        controller.open_edit_modal(record)
    else:
        controller.open_create_modal()
    upload = request.files.get(file_field)
    # locked records (completed events) keep no image
    locked = bool(record and locked_when and record.get(locked_when))
    if locked:
        upload = None

    try:
        fields = validate(request.form)
        if locked:
            fields.pop(url_field, None)
        if require_image and not has_file(upload) and not fields.get(url_field):
            raise ValidationError({file_field: 'Select an image or paste its URL'})
        saved = attach_and_save(controller, record, fields,
                                bucket=current_app.config[bucket_key],
                                url_field=url_field,
                                upload=upload,
                                pasted_url=fields.get(url_field))
    except ValidationError as e:
        controller.show_errors(e.errors, request.form.to_dict(), record)
        return _render(screen, controller, 400)

    if not saved:
        return _render(screen, controller)
    return redirect(url_for(f'admin.{screen}'))


def _delete(screen, record_id, prompt=DEFAULT_DELETE_PROMPT):
    controller = _controller(screen)
    _record_or_404(controller, record_id)
    if not _confirmed():
        return _ask(prompt, screen)
    controller.delete(record_id, prompt, confirm=lambda p: _confirmed())
    return redirect(url_for(f'admin.{screen}'))


def _delete_with_media(screen, record_id, bucket_key, url_field):
    controller = _controller(screen)
    record = _record_or_404(controller, record_id)
    if not _confirmed():
        return _ask(DEFAULT_DELETE_PROMPT, screen)
    delete_with_media(controller, record, current_app.config[bucket_key], url_field)
    return redirect(url_for(f'admin.{screen}'))


@admin_bp.route('/')
@admin_bp.route('/dashboard')
@admin_required
def dashboard():
    """Admin dashboard with collection counters."""
    stats = current_app.extensions['dashboard_stats']
    return render_template('admin/dashboard.html',
                           counts=stats.counts(),
                           last_change=stats.last_change,
                           admin_email=current_user.email)


# Featured verses

def _single_active(controller, record, fields):
    if not fields.get('active'):
        return True
    try:
        deactivate_others(controller.collection, keep_id=record['id'] if record else None)
    except StoreError as e:
        flash(f'Could not deactivate the other verses: {e.message}', 'danger')
        return False
    return True


@admin_bp.route('/verses', methods=['GET', 'POST'])
@admin_required
def verses():
    if request.method == 'POST':
        return _save('verses', verse_form, before_save=_single_active)
    controller = _controller('verses')
    _open_requested_form(controller)
    return _render('verses', controller)


@admin_bp.route('/verses/<record_id>', methods=['POST'])
@admin_required
def update_verse(record_id):
    return _save('verses', verse_form, record_id, before_save=_single_active)


@admin_bp.route('/verses/<record_id>/toggle', methods=['POST'])
@admin_required
def toggle_verse(record_id):
    """Activate a verse (switching all others off) or deactivate it."""
    controller = _controller('verses')
    record = _record_or_404(controller, record_id)
    try:
        if record['active']:
            deactivate(controller.collection, record_id)
            flash('Verse deactivated.', 'success')
        else:
            activate(controller.collection, record_id)
            flash('Verse activated! It is now the verse of the week.', 'success')
    except StoreError as e:
        logger.error('Verse toggle failed id=%s: %s', record_id, e.message)
        flash(f'Could not change the verse status: {e.message}', 'danger')
    return redirect(url_for('admin.verses'))


@admin_bp.route('/verses/<record_id>/delete', methods=['POST'])
@admin_required
def delete_verse(record_id):
    return _delete('verses', record_id)


# Events

@admin_bp.route('/events', methods=['GET', 'POST'])
@admin_required
def events():
    if request.method == 'POST':
        return _save_with_media('events', event_form, 'BUCKET_EVENTS', 'image_url', 'image')
    controller = _controller('events')
    _open_requested_form(controller)
    return _render('events', controller)


@admin_bp.route('/events/<record_id>', methods=['POST'])
@admin_required
def update_event(record_id):
    return _save_with_media('events', event_form, 'BUCKET_EVENTS', 'image_url', 'image', record_id,
                            locked_when='completed')


@admin_bp.route('/events/<record_id>/complete', methods=['POST'])
@admin_required
def complete_event(record_id):
    controller = _controller('events')
    record = _record_or_404(controller, record_id)
    if not _confirmed():
        return _ask(COMPLETE_PROMPT, 'events')
    complete_and_purge(controller, record, current_app.config['BUCKET_EVENTS'])
    return redirect(url_for('admin.events'))


@admin_bp.route('/events/<record_id>/delete', methods=['POST'])
@admin_required
def delete_event(record_id):
    return _delete_with_media('events', record_id, 'BUCKET_EVENTS', 'image_url')


# Studies

@admin_bp.route('/studies', methods=['GET', 'POST'])
@admin_required
def studies():
    if request.method == 'POST':
        return _save('studies', study_form)
    controller = _controller('studies')
    _open_requested_form(controller)
    categories = sorted({item['category'] for item in controller.items})
    return _render('studies', controller, categories=categories)


@admin_bp.route('/studies/<record_id>', methods=['POST'])
@admin_required
def update_study(record_id):
    return _save('studies', study_form, record_id)


@admin_bp.route('/studies/<record_id>/archive', methods=['POST'])
@admin_required
def archive_study(record_id):
    """Move a study to or from the archive."""
    controller = _controller('studies')
    record = _record_or_404(controller, record_id)
    controller.update(record_id, {'archived': not record['archived']})
    return redirect(url_for('admin.studies'))


@admin_bp.route('/studies/<record_id>/delete', methods=['POST'])
@admin_required
def delete_study(record_id):
    return _delete('studies', record_id)


# Gallery

@admin_bp.route('/gallery', methods=['GET', 'POST'])
@admin_required
def gallery():
    if request.method == 'POST':
        return _save_with_media('gallery', gallery_form, 'BUCKET_GALLERY', 'url', 'image',
                                require_image=True)
    controller = _controller('gallery')
    _open_requested_form(controller)
    return _render('gallery', controller, categories=GALLERY_CATEGORIES)


@admin_bp.route('/gallery/<record_id>', methods=['POST'])
@admin_required
def update_photo(record_id):
    return _save_with_media('gallery', gallery_form, 'BUCKET_GALLERY', 'url', 'image', record_id)


@admin_bp.route('/gallery/<record_id>/delete', methods=['POST'])
@admin_required
def delete_photo(record_id):
    return _delete_with_media('gallery', record_id, 'BUCKET_GALLERY', 'url')


# Team

@admin_bp.route('/team', methods=['GET', 'POST'])
@admin_required
def team():
    if request.method == 'POST':
        return _save_with_media('team', team_form, 'BUCKET_TEAM', 'photo_url', 'photo')
    controller = _controller('team')
    _open_requested_form(controller)
    return _render('team', controller)


@admin_bp.route('/team/<record_id>', methods=['POST'])
@admin_required
def update_member(record_id):
    return _save_with_media('team', team_form, 'BUCKET_TEAM', 'photo_url', 'photo', record_id)


@admin_bp.route('/team/<record_id>/delete', methods=['POST'])
@admin_required
def delete_member(record_id):
    return _delete_with_media('team', record_id, 'BUCKET_TEAM', 'photo_url')


# Church settings

@admin_bp.route('/settings', methods=['GET', 'POST'])
@admin_required
def settings():
    """Church information shown on the public pages (a single row)."""
    controller = _controller('settings')
    record = controller.items[0] if controller.items else None

    if request.method == 'POST':
        try:
            fields = settings_form(request.form)
        except ValidationError as e:
            controller.show_errors(e.errors, request.form.to_dict(), record)
            return _render('settings', controller, 400)

        if record:
            saved = controller.update(record['id'], fields)
        else:
            saved = controller.create(fields)
        if saved:
            return redirect(url_for('admin.settings'))
        return _render('settings', controller)

    if record:
        controller.open_edit_modal(record)
    else:
        controller.open_create_modal()
    return _render('settings', controller)
