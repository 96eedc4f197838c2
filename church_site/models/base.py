"""
Shared columns and serialization for site collections
"""

import uuid
from datetime import date, datetime, timezone

from church_site.extensions import db


def new_id():
    return str(uuid.uuid4())


def utcnow():
    return datetime.now(timezone.utc)


class RecordMixin:
    """Columns every collection record carries: an immutable id and a creation time."""

    id = db.Column(db.String(36), primary_key=True, default=new_id)
    created_at = db.Column(db.DateTime(timezone=True), default=utcnow, nullable=False, index=True)

    def to_dict(self):
        """Snapshot of the row as plain values (dates as ISO strings)."""
        out = {}
        for column in self.__table__.columns:
            value = getattr(self, column.name)
            if isinstance(value, (datetime, date)):
                value = value.isoformat()
            out[column.name] = value
        return out
