"""
Public page queries

Each loader returns what a page needs. A store failure is logged and the
page renders without that section instead of failing.
"""

import logging
from datetime import date

from church_site.errors import StoreError
from church_site.services.store import record_store

logger = logging.getLogger(__name__)

UPCOMING_ON_HOME = 3


def _safe_list(collection, **kwargs):
    try:
        return record_store.list(collection, **kwargs)
    except StoreError as e:
        logger.error('Could not load %s: %s', collection, e.message)
        return []


def get_featured_verse():
    rows = _safe_list('featured_verses', filters={'active': True},
                      order_by='created_at', ascending=False, limit=1)
    return rows[0] if rows else None


def get_upcoming_events(limit=None):
    today = date.today().isoformat()
    rows = _safe_list('events', filters={'completed': False}, order_by='start_date', ascending=True)
    upcoming = [row for row in rows if (row.get('end_date') or row['start_date']) >= today]
    return upcoming[:limit] if limit else upcoming


def get_open_events():
    return _safe_list('events', filters={'completed': False}, order_by='start_date', ascending=True)


def get_past_events():
    return _safe_list('events', filters={'completed': True}, order_by='start_date', ascending=False)


def get_studies(archived=False, category=None):
    filters = {'archived': archived}
    if category:
        filters['category'] = category
    return _safe_list('studies', filters=filters, order_by='study_date', ascending=False)


def get_study_categories():
    rows = _safe_list('studies', filters={'archived': False})
    return sorted({row['category'] for row in rows})


def get_gallery(category=None):
    filters = {'category': category} if category else None
    return _safe_list('gallery', filters=filters, order_by='sort_order', ascending=True)


def get_team():
    return _safe_list('team_members', filters={'active': True}, order_by='sort_order', ascending=True)


def get_church_info():
    rows = _safe_list('church_info', order_by='created_at', ascending=True, limit=1)
    return rows[0] if rows else None
