"""
Auth Blueprint

Administrator and member sign-in, sign-up, password reset and sign-out.
The admin checks live in gate.py, member accounts in members.py.
"""

from flask import Blueprint

auth_bp = Blueprint('auth', __name__)

from church_site.auth import routes  # noqa: E402, F401
