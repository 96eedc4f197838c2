"""
Member accounts

Sign-up creates a login plus a worshipper profile. Password reset links
carry a signed, timed token; the token embeds a fingerprint of the current
password hash so it stops working once the password changes.
"""

import logging

from flask import current_app
from flask_login import login_user
from itsdangerous import BadSignature, SignatureExpired, URLSafeTimedSerializer
from sqlalchemy.exc import SQLAlchemyError
from werkzeug.security import check_password_hash, generate_password_hash

from church_site.errors import AuthError, StoreError
from church_site.extensions import db
from church_site.models import User, Worshipper

logger = logging.getLogger(__name__)

MEMBER_ROLE = 'member'
RESET_SALT = 'password-reset'


class EmailTaken(StoreError):
    """An account with this e-mail already exists."""


def register_member(name, email, password, phone=None):
    """Create the user and its worshipper profile in one transaction."""
    if db.session.query(User).filter_by(email=email).first() is not None:
        raise EmailTaken('Email already registered. Please log in or use another email.')

    user = User(email=email, password_hash=generate_password_hash(password),
                user_metadata={'role': MEMBER_ROLE, 'name': name})
    try:
        db.session.add(user)
        db.session.flush()
        db.session.add(Worshipper(user_id=user.id, name=name, email=email, phone=phone))
        db.session.commit()
    except SQLAlchemyError as e:
        db.session.rollback()
        logger.error('Member sign-up failed email=%s: %s', email, e)
        raise StoreError('Could not create your profile. Please try again.') from e

    logger.info('Member registered user_id=%s', user.id)
    return user


def sign_in_member(email, password):
    user = db.session.query(User).filter_by(email=email).first()
    if user is None or not check_password_hash(user.password_hash, password or ''):
        logger.warning('Member sign-in failed email=%s', email)
        raise AuthError('credentials', 'Incorrect email or password.')
    login_user(user)
    logger.info('Member signed in user_id=%s', user.id)
    return user


def _serializer():
    return URLSafeTimedSerializer(current_app.config['SECRET_KEY'], salt=RESET_SALT)


def _fingerprint(user):
    return user.password_hash[-16:]


def reset_token(user):
    return _serializer().dumps({'uid': user.id, 'pw': _fingerprint(user)})


def user_for_token(token):
    """User a reset token was issued to, or None when it is expired, forged or used."""
    try:
        data = _serializer().loads(token, max_age=current_app.config['PASSWORD_RESET_MAX_AGE'])
    except SignatureExpired:
        logger.info('Expired password reset token')
        return None
    except BadSignature:
        logger.warning('Invalid password reset token')
        return None

    user = db.session.get(User, data.get('uid'))
    if user is None or data.get('pw') != _fingerprint(user):
        return None
    return user


def set_password(user, password):
    user.password_hash = generate_password_hash(password)
    try:
        db.session.commit()
    except SQLAlchemyError as e:
        db.session.rollback()
        raise StoreError('Could not update the password. Please try again.') from e
    logger.info('Password reset user_id=%s', user.id)
