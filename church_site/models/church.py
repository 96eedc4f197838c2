"""
Church Information Model
"""

from church_site.extensions import db
from church_site.models.base import RecordMixin


class ChurchInfo(RecordMixin, db.Model):
    """Contact details and statements edited from the settings screen (single row)"""
    __tablename__ = 'church_info'

    name = db.Column(db.String(200), nullable=False)
    address = db.Column(db.String(500), nullable=False)
    phone = db.Column(db.String(20), nullable=False)
    whatsapp = db.Column(db.String(20))
    email = db.Column(db.String(255), nullable=False)
    service_times = db.Column(db.Text)
    mission = db.Column(db.Text)
    vision = db.Column(db.Text)
    facebook_url = db.Column(db.String(500))
    instagram_url = db.Column(db.String(500))
    youtube_url = db.Column(db.String(500))

    def __repr__(self):
        return f'<ChurchInfo {self.name}>'
