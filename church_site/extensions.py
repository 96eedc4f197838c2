"""
Flask Extensions

Admin sessions ride on Flask-Login; the administrator checks themselves live
in church_site.auth.gate.
"""

from flask_sqlalchemy import SQLAlchemy
from flask_login import LoginManager
from flask_wtf.csrf import CSRFProtect

# Database instance
db = SQLAlchemy()

# Login manager for the admin panel
login_manager = LoginManager()

# CSRF check for every form POST
csrf = CSRFProtect()
