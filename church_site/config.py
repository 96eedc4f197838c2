"""
Configuration settings for the church website
"""
import logging
import os

logger = logging.getLogger(__name__)


def _flag(name, default):
    """Read a boolean feature flag from the environment."""
    value = os.environ.get(name)
    if value is None:
        return default
    return value.strip().lower() in ('1', 'true', 'yes', 'on')


class Config:
    """Flask application configuration"""

    # Flask secret key for sessions
    SECRET_KEY = os.environ.get('SECRET_KEY') or 'dev-secret-key-change-in-production-12345'

    # Database configuration
    basedir = os.path.abspath(os.path.dirname(os.path.dirname(__file__)))
    SQLALCHEMY_DATABASE_URI = os.environ.get('DATABASE_URL') or \
        'sqlite:///' + os.path.join(basedir, 'instance', 'church_site.db')
    SQLALCHEMY_TRACK_MODIFICATIONS = False

    # Site identity
    SITE_NAME = os.environ.get('SITE_NAME') or 'PIB Vila Canaan'
    SITE_DESCRIPTION = 'A church that loves God and serves people'
    SITE_URL = os.environ.get('SITE_URL') or 'https://pibvilacanaan.com.br'

    # Outbound e-mail (Resend HTTP API)
    RESEND_API_KEY = os.environ.get('RESEND_API_KEY') or ''
    RESEND_API_URL = 'https://api.resend.com/emails'
    MAIL_FROM = os.environ.get('MAIL_FROM') or 'PIB Vila Canaan <onboarding@resend.dev>'
    CONTACT_EMAIL = os.environ.get('CONTACT_EMAIL') or 'contato@pibvilacanaan.com.br'
    MAIL_TIMEOUT = 10

    # Object storage
    STORAGE_BACKEND = os.environ.get('STORAGE_BACKEND') or 'local'
    STORAGE_LOCAL_ROOT = os.environ.get('STORAGE_LOCAL_ROOT') or os.path.join(basedir, 'instance', 'uploads')
    GCS_PROJECT = os.environ.get('GCS_PROJECT')
    GCS_KEY_FILE = os.environ.get('GCS_KEY_FILE')
    BUCKET_EVENTS = os.environ.get('BUCKET_EVENTS') or 'eventos'
    BUCKET_GALLERY = os.environ.get('BUCKET_GALLERY') or 'galeria'
    BUCKET_TEAM = os.environ.get('BUCKET_TEAM') or 'equipe'

    # Image uploads
    MAX_IMAGE_SIZE = 5 * 1024 * 1024
    ALLOWED_IMAGE_TYPES = ('image/jpeg', 'image/jpg', 'image/png', 'image/webp')
    IMAGE_MAX_WIDTH = 1920
    IMAGE_QUALITY = 0.8
    MAX_CONTENT_LENGTH = 8 * 1024 * 1024

    # Contact form rate limiting (requests per window, per client IP)
    CONTACT_RATE_LIMIT = 3
    CONTACT_RATE_WINDOW = 3600

    # Number of reverse proxies in front of the app whose X-Forwarded-For is trusted
    PROXY_COUNT = int(os.environ.get('PROXY_COUNT') or 0)

    # Forms
    WTF_CSRF_ENABLED = True
    PASSWORD_RESET_MAX_AGE = 3600

    # Feature flags
    USE_EDGE_AUTH = _flag('USE_EDGE_AUTH', True)
    USE_RATE_LIMITING = _flag('USE_RATE_LIMITING', True)
    DEBUG_MODE = _flag('DEBUG_MODE', False)


class TestConfig(Config):
    """Testing configuration"""
    TESTING = True
    SQLALCHEMY_DATABASE_URI = 'sqlite:///:memory:'
    STORAGE_BACKEND = 'local'
    RESEND_API_KEY = 'test-key'
    WTF_CSRF_ENABLED = False
    PROXY_COUNT = 0
    USE_EDGE_AUTH = True
    USE_RATE_LIMITING = True
    DEBUG_MODE = False


def validate_production_flags(app):
    """Log insecure flag combinations outside debug and testing."""
    if app.debug or app.testing:
        return
    if not app.config.get('USE_EDGE_AUTH'):
        logger.error('USE_EDGE_AUTH is disabled in production; /admin is not protected at the edge')
    if app.config.get('DEBUG_MODE'):
        logger.warning('DEBUG_MODE is enabled in production')
