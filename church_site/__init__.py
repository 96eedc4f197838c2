"""
Church Website - Application Factory

This module provides the Flask application factory pattern for creating
and configuring the application instance.
"""

import logging
import os
from datetime import date

from flask import Flask
from werkzeug.middleware.proxy_fix import ProxyFix

from church_site.config import Config, validate_production_flags
from church_site.extensions import csrf, db, login_manager


def create_app(config_class=Config):
    """Create and configure the Flask application.

    Args:
        config_class: Configuration class to use (default: Config)

    Returns:
        Configured Flask application instance
    """
    app = Flask(__name__)
    app.config.from_object(config_class)

    _configure_logging(app)

    # Initialize extensions
    db.init_app(app)
    login_manager.init_app(app)
    login_manager.login_view = 'auth.admin_login'
    csrf.init_app(app)

    # Trust X-Forwarded-For only from the configured number of proxies
    if app.config['PROXY_COUNT']:
        app.wsgi_app = ProxyFix(app.wsgi_app, x_for=app.config['PROXY_COUNT'], x_proto=1, x_host=1)

    from church_site.services.ratelimit import RateLimiter
    from church_site.services.storage import init_storage

    init_storage(app)
    app.extensions['contact_limiter'] = RateLimiter(app.config['CONTACT_RATE_LIMIT'],
                                                    app.config['CONTACT_RATE_WINDOW'])

    # Register blueprints
    from church_site.auth import auth_bp
    from church_site.admin import admin_bp
    from church_site.public import public_bp

    app.register_blueprint(auth_bp)
    app.register_blueprint(admin_bp, url_prefix='/admin')
    app.register_blueprint(public_bp)

    # Rendering flag only; /admin is protected by the edge gate
    @app.context_processor
    def inject_site_flags():
        from flask_login import current_user
        from church_site.auth.gate import is_active_admin
        return dict(
            is_admin=is_active_admin(current_user),
            site_name=app.config['SITE_NAME'],
            site_description=app.config['SITE_DESCRIPTION'],
            current_year=date.today().year,
        )

    # User loader for Flask-Login
    @login_manager.user_loader
    def load_user(user_id):
        from church_site.models import User
        return db.session.get(User, user_id)

    @app.template_filter('br_date')
    def br_date_filter(value):
        """Format an ISO date as DD/MM/YYYY."""
        if not value:
            return ''
        text = value.isoformat() if hasattr(value, 'isoformat') else str(value)
        year, month, day = text[:10].split('-')
        return f'{day}/{month}/{year}'

    # Create database tables
    with app.app_context():
        os.makedirs(app.instance_path, exist_ok=True)
        db.create_all()

        from church_site.services.stats import DashboardStats
        from church_site.services.store import record_store
        app.extensions['dashboard_stats'] = DashboardStats(record_store)

    validate_production_flags(app)
    return app


def _configure_logging(app):
    level = logging.DEBUG if app.config.get('DEBUG_MODE') else logging.INFO
    logging.basicConfig(level=level, format='%(asctime)s %(levelname)s %(name)s: %(message)s')
    app.logger.setLevel(level)
