"""
Three-layer admin gate

A request is treated as an administrator's only when all three hold:

1. the credentials are valid (there is a logged-in user),
2. the user's metadata carries role == 'admin',
3. the administrators table has an active row for that user.

enforce_admin() runs in front of every /admin request and is the actual
protection. admin_required and the `is_admin` template flag only decide
what to render.
"""

import logging

from flask import current_app, redirect, session, url_for
from flask_login import current_user, login_user, logout_user
from werkzeug.security import check_password_hash

from church_site.errors import AuthError
from church_site.extensions import db
from church_site.models import Administrator, User

logger = logging.getLogger(__name__)

ADMIN_ROLE = 'admin'

MESSAGES = {
    'credentials': 'Incorrect email or password.',
    'role': 'Access denied. This account has no administrator access.',
    'inactive': 'Access denied. This administrator account is inactive.',
}


def check_admin(user):
    """Return the failed layer ('credentials', 'role', 'inactive') or None."""
    if user is None or not getattr(user, 'is_authenticated', False):
        return 'credentials'
    if user.role != ADMIN_ROLE:
        return 'role'
    admin = db.session.query(Administrator).filter_by(user_id=user.id).first()
    if admin is None or not admin.active:
        return 'inactive'
    return None


def is_active_admin(user):
    return check_admin(user) is None


def end_session():
    logout_user()
    session.clear()


def sign_in(email, password):
    """Authenticate and authorize an administrator.

    On any failure no session survives and AuthError is raised.
    """
    email = (email or '').strip().lower()
    user = db.session.query(User).filter_by(email=email).first()
    if user is None or not check_password_hash(user.password_hash, password or ''):
        logger.warning('Admin sign-in failed: bad credentials email=%s', email)
        raise AuthError('credentials', MESSAGES['credentials'])

    login_user(user)

    failed = check_admin(user)
    if failed:
        logger.warning('Admin sign-in rejected reason=%s user_id=%s', failed, user.id)
        end_session()
        raise AuthError(failed, MESSAGES[failed])

    logger.info('Admin signed in user_id=%s', user.id)
    return user


def enforce_admin():
    """before_request hook for the admin blueprint."""
    if not current_app.config.get('USE_EDGE_AUTH', True):
        logger.warning('USE_EDGE_AUTH is off; /admin served without the edge check')
        return None

    if not current_user.is_authenticated:
        return redirect(url_for('auth.admin_login'))

    failed = check_admin(current_user)
    if failed:
        logger.warning('Edge gate rejected reason=%s user_id=%s', failed, current_user.get_id())
        end_session()
        return redirect(url_for('public.home'))
    return None
