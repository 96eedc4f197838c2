import io

import pytest
from PIL import Image
from werkzeug.security import generate_password_hash

from church_site import create_app
from church_site.config import TestConfig
from church_site.errors import StorageError
from church_site.extensions import db
from church_site.models import Administrator, User


class MemoryStorage:
    """Object storage kept in a dict; flip the fail_* flags to simulate outages."""

    def __init__(self):
        self.objects = {}
        self.removed = []
        self.fail_upload = False
        self.fail_remove = False

    def public_url(self, bucket, path):
        return f'https://storage.test/{bucket}/{path}'

    def upload(self, bucket, path, data, content_type=None):
        if self.fail_upload:
            raise StorageError('Upload failed: bucket unavailable')
        self.objects[(bucket, path)] = (data, content_type)
        return self.public_url(bucket, path)

    def remove(self, bucket, path):
        if self.fail_remove:
            raise StorageError('Delete failed: permission denied')
        self.removed.append((bucket, path))
        return self.objects.pop((bucket, path), None) is not None


@pytest.fixture()
def app(tmp_path):
    class Config(TestConfig):
        STORAGE_LOCAL_ROOT = str(tmp_path / 'uploads')

    app = create_app(Config)
    with app.app_context():
        yield app
        db.session.remove()
        db.drop_all()


@pytest.fixture()
def client(app):
    return app.test_client()


@pytest.fixture()
def storage(app):
    fake = MemoryStorage()
    app.extensions['object_storage'] = fake
    return fake


@pytest.fixture()
def notes():
    """Collects controller notifications instead of flashing them."""
    messages = []

    def notify(message, category='info'):
        messages.append((category, message))

    notify.messages = messages
    return notify


@pytest.fixture()
def make_user(app):
    def factory(email='admin@church.test', password='s3cret-pass', role='admin',
                admin_row=True, active=True):
        user = User(email=email, password_hash=generate_password_hash(password),
                    user_metadata={'role': role} if role else {})
        db.session.add(user)
        db.session.flush()
        if admin_row:
            db.session.add(Administrator(user_id=user.id, name='Pastor', active=active))
        db.session.commit()
        return user
    return factory


@pytest.fixture()
def login(client):
    def do_login(email='admin@church.test', password='s3cret-pass', follow_redirects=False):
        return client.post('/login/admin', data={'email': email, 'password': password},
                           follow_redirects=follow_redirects)
    return do_login


@pytest.fixture()
def admin_client(client, make_user, login):
    make_user()
    r = login()
    assert r.status_code == 302
    return client


@pytest.fixture()
def make_image():
    def build(fmt='JPEG', size=(64, 48), color=(200, 30, 30)):
        mode = 'RGBA' if fmt == 'PNG' else 'RGB'
        buf = io.BytesIO()
        Image.new(mode, size, color).save(buf, format=fmt)
        return buf.getvalue()
    return build
