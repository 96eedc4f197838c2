"""
Record Store Client

Thin create/read/update/delete surface over the site's collections. Every
call is a single request to the database; failures are rolled back and
raised as StoreError with the driver's message. Nothing is retried here.
"""

import logging

from sqlalchemy.exc import SQLAlchemyError

from church_site.errors import StoreError
from church_site.extensions import db
from church_site.models import (
    Administrator, ChurchInfo, Event, FeaturedVerse, GalleryPhoto, Study, TeamMember, User,
    Worshipper,
)

logger = logging.getLogger(__name__)

COLLECTIONS = {
    'featured_verses': FeaturedVerse,
    'events': Event,
    'studies': Study,
    'gallery': GalleryPhoto,
    'team_members': TeamMember,
    'church_info': ChurchInfo,
    'users': User,
    'administrators': Administrator,
    'worshippers': Worshipper,
}

# Columns callers may never write
PROTECTED_COLUMNS = frozenset({'id', 'created_at'})


class RecordStore:
    """Collection-oriented access to the relational store."""

    def __init__(self, collections=None):
        self.collections = dict(collections or COLLECTIONS)

    def model_for(self, collection):
        try:
            return self.collections[collection]
        except KeyError:
            raise StoreError(f'relation "{collection}" does not exist') from None

    def _column(self, model, name):
        column = model.__table__.columns.get(name)
        if column is None:
            raise StoreError(f'column "{name}" of relation "{model.__tablename__}" does not exist')
        return getattr(model, name)

    def _checked_fields(self, model, fields):
        clean = {}
        for name, value in (fields or {}).items():
            self._column(model, name)
            if name in PROTECTED_COLUMNS:
                continue
            clean[name] = value
        return clean

    def _query(self, model, filters=None, exclude=None):
        query = db.session.query(model)
        for name, value in (filters or {}).items():
            query = query.filter(self._column(model, name) == value)
        for name, value in (exclude or {}).items():
            query = query.filter(self._column(model, name) != value)
        return query

    def _commit(self, action, collection):
        try:
            db.session.commit()
        except SQLAlchemyError as exc:
            db.session.rollback()
            logger.error('store.%s failed collection=%s error=%s', action, collection, exc)
            raise StoreError(str(getattr(exc, 'orig', None) or exc)) from exc

    def list(self, collection, order_by=None, ascending=True, filters=None, exclude=None, limit=None):
        """Return rows of a collection as dicts, optionally filtered and ordered."""
        model = self.model_for(collection)
        try:
            query = self._query(model, filters, exclude)
            if order_by:
                column = self._column(model, order_by)
                query = query.order_by(column.asc() if ascending else column.desc())
            if limit:
                query = query.limit(limit)
            return [row.to_dict() for row in query.all()]
        except SQLAlchemyError as exc:
            db.session.rollback()
            logger.error('store.list failed collection=%s error=%s', collection, exc)
            raise StoreError(str(exc)) from exc

    def _row(self, model, record_id):
        row = db.session.get(model, record_id)
        if row is None:
            raise StoreError(f'{model.__tablename__} record {record_id} not found')
        return row

    def get(self, collection, record_id):
        model = self.model_for(collection)
        return self._row(model, record_id).to_dict()

    def create(self, collection, fields):
        model = self.model_for(collection)
        row = model(**self._checked_fields(model, fields))
        db.session.add(row)
        self._commit('create', collection)
        logger.debug('store.create collection=%s id=%s', collection, row.id)
        return row.to_dict()

    def update(self, collection, record_id, fields):
        model = self.model_for(collection)
        clean = self._checked_fields(model, fields)
        row = self._row(model, record_id)
        for name, value in clean.items():
            setattr(row, name, value)
        self._commit('update', collection)
        return row.to_dict()

    def update_many(self, collection, ids, fields):
        """Apply the same field values to every id in one UPDATE statement."""
        model = self.model_for(collection)
        clean = self._checked_fields(model, fields)
        ids = list(ids)
        if not ids or not clean:
            return 0
        try:
            count = db.session.query(model).filter(model.id.in_(ids)).update(
                clean, synchronize_session=False)
        except SQLAlchemyError as exc:
            db.session.rollback()
            logger.error('store.update_many failed collection=%s error=%s', collection, exc)
            raise StoreError(str(exc)) from exc
        self._commit('update_many', collection)
        return count

    def remove(self, collection, record_id):
        model = self.model_for(collection)
        row = self._row(model, record_id)
        db.session.delete(row)
        self._commit('remove', collection)

    def count(self, collection, filters=None):
        model = self.model_for(collection)
        try:
            return self._query(model, filters).count()
        except SQLAlchemyError as exc:
            db.session.rollback()
            raise StoreError(str(exc)) from exc


record_store = RecordStore()
