"""
Admin Blueprint

Every request to /admin passes the edge gate (enforce_admin) before any
view runs.
"""

from flask import Blueprint

from church_site.auth.gate import enforce_admin

admin_bp = Blueprint('admin', __name__)
admin_bp.before_request(enforce_admin)

from church_site.admin import routes  # noqa: E402, F401
