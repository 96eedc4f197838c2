"""
Public Blueprint

The visitor-facing site: home, about, events, studies, gallery, contact.
"""

from flask import Blueprint

public_bp = Blueprint('public', __name__)

from church_site.public import routes  # noqa: E402, F401
