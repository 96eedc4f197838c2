"""
Featured Verse Model
"""

from church_site.extensions import db
from church_site.models.base import RecordMixin


class FeaturedVerse(RecordMixin, db.Model):
    """Verse of the week; at most one row is active at a time."""
    __tablename__ = 'featured_verses'

    book = db.Column(db.String(50), nullable=False)
    reference = db.Column(db.String(20), nullable=False)
    text = db.Column(db.Text, nullable=False)
    start_date = db.Column(db.Date)
    end_date = db.Column(db.Date)
    active = db.Column(db.Boolean, default=False, nullable=False, index=True)

    def __repr__(self):
        return f'<FeaturedVerse {self.book} {self.reference}>'
