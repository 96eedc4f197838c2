"""
Event Model
"""

from church_site.extensions import db
from church_site.models.base import RecordMixin


class Event(RecordMixin, db.Model):
    """Church event. Completing an event drops its image."""
    __tablename__ = 'events'

    title = db.Column(db.String(200), nullable=False)
    description = db.Column(db.Text, nullable=False)
    start_date = db.Column(db.Date, nullable=False, index=True)
    end_date = db.Column(db.Date)
    time = db.Column(db.String(50), nullable=False)
    location = db.Column(db.String(200), nullable=False)
    image_url = db.Column(db.String(500))
    completed = db.Column(db.Boolean, default=False, nullable=False, index=True)

    def __repr__(self):
        return f'<Event {self.title}>'
