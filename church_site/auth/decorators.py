"""
Admin view decorator

Rendering guard only: it keeps anonymous visitors from seeing a half-drawn
admin page when the edge check is switched off. enforce_admin() is what
protects the panel.
"""

from functools import wraps

from flask import redirect, url_for
from flask_login import current_user


def admin_required(f):
    @wraps(f)
    def wrapper(*args, **kwargs):
        if not current_user.is_authenticated:
            return redirect(url_for('auth.admin_login'))
        return f(*args, **kwargs)
    return wrapper
