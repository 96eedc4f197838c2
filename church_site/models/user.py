"""
User and Administrator Models
"""

from flask_login import UserMixin

from church_site.extensions import db
from church_site.models.base import RecordMixin


class User(UserMixin, RecordMixin, db.Model):
    """Account that can sign in. The role claim lives in user_metadata."""
    __tablename__ = 'users'

    email = db.Column(db.String(255), unique=True, nullable=False, index=True)
    password_hash = db.Column(db.String(255), nullable=False)
    user_metadata = db.Column(db.JSON, default=dict, nullable=False)

    @property
    def role(self):
        return (self.user_metadata or {}).get('role')

    def __repr__(self):
        return f'<User {self.email}>'


class Administrator(RecordMixin, db.Model):
    """Administrators table: a user is an admin only while its row is active"""
    __tablename__ = 'administrators'

    user_id = db.Column(db.String(36), db.ForeignKey('users.id'), unique=True, nullable=False)
    name = db.Column(db.String(100))
    active = db.Column(db.Boolean, default=True, nullable=False)

    user = db.relationship('User', backref=db.backref('administrator', uselist=False))

    def __repr__(self):
        return f'<Administrator {self.user_id} active={self.active}>'


class Worshipper(RecordMixin, db.Model):
    """Member profile created at sign-up, one per member account"""
    __tablename__ = 'worshippers'

    user_id = db.Column(db.String(36), db.ForeignKey('users.id'), unique=True, nullable=False)
    name = db.Column(db.String(100), nullable=False)
    email = db.Column(db.String(255), nullable=False)
    phone = db.Column(db.String(20))

    user = db.relationship('User', backref=db.backref('worshipper', uselist=False))

    def __repr__(self):
        return f'<Worshipper {self.email}>'
