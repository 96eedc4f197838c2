"""
Pastoral Team Model
"""

from church_site.extensions import db
from church_site.models.base import RecordMixin


class TeamMember(RecordMixin, db.Model):
    """Member of the pastoral team shown on the about page"""
    __tablename__ = 'team_members'

    name = db.Column(db.String(100), nullable=False)
    position = db.Column(db.String(100), nullable=False)
    description = db.Column(db.Text, nullable=False)
    photo_url = db.Column(db.String(500))
    active = db.Column(db.Boolean, default=True, nullable=False)
    sort_order = db.Column(db.Integer, default=0, nullable=False)

    def __repr__(self):
        return f'<TeamMember {self.name}>'
