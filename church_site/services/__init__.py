"""
Services Package

Exports all services for easy importing.
"""

from church_site.services.store import RecordStore, record_store
from church_site.services.crud import CrudController
from church_site.services.featured import activate, deactivate, deactivate_others
from church_site.services.media import (
    attach_and_save, complete_and_purge, delete_with_media, optimize_image, object_path,
)
from church_site.services.stats import DashboardStats, stats_changed

__all__ = [
    'RecordStore',
    'record_store',
    'CrudController',
    'activate',
    'deactivate',
    'deactivate_others',
    'attach_and_save',
    'complete_and_purge',
    'delete_with_media',
    'optimize_image',
    'object_path',
    'DashboardStats',
    'stats_changed',
]
