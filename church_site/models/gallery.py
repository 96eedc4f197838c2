"""
Gallery Photo Model
"""

from church_site.extensions import db
from church_site.models.base import RecordMixin

GALLERY_CATEGORIES = ('Services', 'Youth', 'Special Events', 'Children')


class GalleryPhoto(RecordMixin, db.Model):
    """Photo shown on the public gallery"""
    __tablename__ = 'gallery'

    title = db.Column(db.String(100), nullable=False)
    category = db.Column(db.String(50), nullable=False, default='Services')
    url = db.Column(db.String(500), nullable=False)
    description = db.Column(db.String(500))
    sort_order = db.Column(db.Integer, default=0, nullable=False)

    def __repr__(self):
        return f'<GalleryPhoto {self.title}>'
