"""
Bible Study Model
"""

from church_site.extensions import db
from church_site.models.base import RecordMixin


class Study(RecordMixin, db.Model):
    """Published Bible study"""
    __tablename__ = 'studies'

    title = db.Column(db.String(200), nullable=False)
    book = db.Column(db.String(50), nullable=False)
    reference = db.Column(db.String(20), nullable=False)
    verse_text = db.Column(db.Text, nullable=False)
    content = db.Column(db.Text, nullable=False)
    category = db.Column(db.String(100), nullable=False, index=True)
    study_date = db.Column(db.Date, nullable=False, index=True)
    archived = db.Column(db.Boolean, default=False, nullable=False)

    def __repr__(self):
        return f'<Study {self.title}>'
