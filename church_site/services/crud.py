"""
Generic CRUD Controller

One controller backs one admin screen for the length of a request. It keeps
the screen state (loaded items, which form is open, which record is being
edited) and runs create/update/delete against the record store, reporting
the outcome to the user through `notify` (flask.flash by default).

    Idle -> Loading -> Ready <-> modal 'create' | 'edit'
"""

import logging

from flask import flash

from church_site.errors import StoreError
from church_site.services.stats import stats_changed
from church_site.services.store import record_store

logger = logging.getLogger(__name__)

IDLE = 'idle'
LOADING = 'loading'
READY = 'ready'

DEFAULT_DELETE_PROMPT = 'Are you sure you want to delete this item?'


class CrudController:
    """State and operations for one collection screen."""

    def __init__(self, collection, order_by='created_at', ascending=False,
                 initial_form=None, store=None, notify=None):
        self.collection = collection
        self.order_by = order_by
        self.ascending = ascending
        self.initial_form = dict(initial_form or {})
        self.store = store or record_store
        self.notify = notify or flash

        self.items = []
        self.phase = IDLE
        self.modal = None
        self.editing = None
        self.form_data = dict(self.initial_form)
        self.errors = {}

    @property
    def loading(self):
        return self.phase != READY

    @property
    def show_modal(self):
        return self.modal is not None

    def refresh(self):
        """Reload items. On failure the previous list stays visible."""
        self.phase = LOADING
        try:
            self.items = self.store.list(self.collection, order_by=self.order_by,
                                         ascending=self.ascending)
        except StoreError as e:
            logger.error('Could not load %s: %s', self.collection, e.message)
        finally:
            self.phase = READY
        return self.items

    def create(self, fields):
        try:
            record = self.store.create(self.collection, fields)
        except StoreError as e:
            logger.error('Could not create %s: %s', self.collection, e.message)
            self.notify(f'Could not create: {e.message}', 'danger')
            self._keep_form('create', fields)
            return False

        logger.info('Created %s id=%s', self.collection, record.get('id'))
        self.notify('Item created successfully!', 'success')
        self.close_modal()
        self.refresh()
        stats_changed.send(self.collection)
        return True

    def update(self, record_id, fields):
        try:
            self.store.update(self.collection, record_id, fields)
        except StoreError as e:
            logger.error('Could not update %s id=%s: %s', self.collection, record_id, e.message)
            self.notify(f'Could not update: {e.message}', 'danger')
            self._keep_form('edit', fields)
            return False

        logger.info('Updated %s id=%s', self.collection, record_id)
        self.notify('Item updated successfully!', 'success')
        self.close_modal()
        self.refresh()
        return True

    def delete(self, record_id, confirm_prompt=DEFAULT_DELETE_PROMPT, confirm=None):
        """Delete a record after confirmation.

        An empty `confirm_prompt` means the caller already confirmed; with a
        prompt, `confirm(prompt)` must return True or nothing is deleted.
        """
        if confirm_prompt:
            if confirm is None or not confirm(confirm_prompt):
                return False

        try:
            self.store.remove(self.collection, record_id)
        except StoreError as e:
            logger.error('Could not delete %s id=%s: %s', self.collection, record_id, e.message)
            self.notify(f'Could not delete: {e.message}', 'danger')
            return False

        logger.info('Deleted %s id=%s', self.collection, record_id)
        self.notify('Item deleted successfully!', 'success')
        self.refresh()
        stats_changed.send(self.collection)
        return True

    def find(self, record_id):
        for item in self.items:
            if item.get('id') == record_id:
                return item
        return None

    def open_create_modal(self):
        self.editing = None
        self.form_data = dict(self.initial_form)
        self.errors = {}
        self.modal = 'create'

    def open_edit_modal(self, record):
        self.editing = record
        self.form_data = dict(record)
        self.errors = {}
        self.modal = 'edit'

    def close_modal(self):
        self.modal = None
        self.editing = None
        self.form_data = dict(self.initial_form)
        self.errors = {}

    def show_errors(self, errors, form_data, record=None):
        """Reopen the form with field errors after a rejected submission."""
        self.editing = record
        self.modal = 'edit' if record else 'create'
        self.form_data = dict(form_data)
        self.errors = dict(errors)

    def _keep_form(self, mode, fields):
        self.modal = mode
        self.form_data = {**self.form_data, **fields}
