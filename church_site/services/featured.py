"""
Single active record

Keeps at most one record of a collection flagged `active`. Activation is a
sequence of plain writes (deactivate the others, then activate the target),
not a transaction: two admins activating different records at the same time
can still leave two active rows.
"""

import logging

from church_site.errors import StoreError
from church_site.services.store import record_store

logger = logging.getLogger(__name__)


def deactivate_others(collection, keep_id=None, store=None):
    """Switch off every active record except `keep_id`. Returns how many changed.

    Raises StoreError if the batched update fails.
    """
    store = store or record_store
    exclude = {'id': keep_id} if keep_id else None
    others = store.list(collection, filters={'active': True}, exclude=exclude)
    if not others:
        return 0

    ids = [row['id'] for row in others]
    try:
        changed = store.update_many(collection, ids, {'active': False})
    except StoreError as e:
        logger.error('Could not deactivate other %s records: %s', collection, e.message)
        raise
    logger.info('Deactivated %d %s record(s) ahead of activation', len(ids), collection)
    return changed


def activate(collection, target_id, store=None):
    """Make `target_id` the only active record.

    If the others cannot be switched off the target is left untouched and the
    StoreError propagates.
    """
    store = store or record_store
    deactivate_others(collection, keep_id=target_id, store=store)
    record = store.update(collection, target_id, {'active': True})
    logger.info('Activated %s id=%s', collection, target_id)
    return record


def deactivate(collection, target_id, store=None):
    store = store or record_store
    return store.update(collection, target_id, {'active': False})
