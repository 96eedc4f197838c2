"""
Object storage backends

Both backends expose the same three calls the media lifecycle needs:
upload(bucket, path, data, content_type) -> public URL, remove(bucket, path)
and public_url(bucket, path). Every public URL starts with
public_url(bucket, ''), which is how a stored URL is traced back to its object.
"""

from __future__ import annotations

import logging
import os
from typing import Optional
from urllib.parse import quote

from flask import current_app
from google.api_core.exceptions import GoogleAPIError, NotFound
from google.cloud import storage
from google.oauth2 import service_account

from church_site.errors import StorageError

logger = logging.getLogger(__name__)

GCS_PUBLIC_HOST = 'https://storage.googleapis.com'
UPLOAD_CACHE_SECONDS = 3600


class LocalStorage:
    """Buckets as directories under `root`, served by the /media route."""

    def __init__(self, root: str, url_prefix: str = '/media'):
        self.root = os.path.abspath(root)
        self.url_prefix = url_prefix.rstrip('/')

    def _file_path(self, bucket: str, path: str) -> str:
        normalized = str(path or '').strip().lstrip('/')
        if not bucket or not normalized or '..' in normalized.split('/') or '..' == bucket:
            raise StorageError(f'Invalid object path: {bucket}/{path}')
        return os.path.join(self.root, bucket, *normalized.split('/'))

    def public_url(self, bucket: str, path: str) -> str:
        return f"{self.url_prefix}/{bucket}/{quote(path.lstrip('/'), safe='/')}"

    def upload(self, bucket: str, path: str, data: bytes, content_type: Optional[str] = None) -> str:
        target = self._file_path(bucket, path)
        try:
            os.makedirs(os.path.dirname(target), exist_ok=True)
            with open(target, 'wb') as fh:
                fh.write(data)
        except OSError as e:
            raise StorageError(f'Upload failed: {e}') from e
        logger.info('Stored object bucket=%s path=%s bytes=%d', bucket, path, len(data))
        return self.public_url(bucket, path)

    def remove(self, bucket: str, path: str) -> bool:
        target = self._file_path(bucket, path)
        try:
            os.remove(target)
        except FileNotFoundError:
            return False
        except OSError as e:
            raise StorageError(f'Delete failed: {e}') from e
        logger.info('Removed object bucket=%s path=%s', bucket, path)
        return True


class GCSStorage:
    """Google Cloud Storage, one GCS bucket per site bucket name."""

    def __init__(self, project: Optional[str] = None, key_file: Optional[str] = None):
        self.project = project
        self.key_file = key_file
        self._client = None

    def _credentials(self):
        # Prefer an explicit service-account key; fall back to ADC.
        if self.key_file and os.path.exists(self.key_file):
            return service_account.Credentials.from_service_account_file(self.key_file)
        return None

    @property
    def client(self) -> storage.Client:
        if self._client is None:
            creds = self._credentials()
            if creds is not None:
                self._client = storage.Client(credentials=creds, project=self.project or creds.project_id)
            else:
                self._client = storage.Client(project=self.project)
        return self._client

    def public_url(self, bucket: str, path: str) -> str:
        return f"{GCS_PUBLIC_HOST}/{bucket}/{quote(path.lstrip('/'), safe='/')}"

    def upload(self, bucket: str, path: str, data: bytes, content_type: Optional[str] = None) -> str:
        blob = self.client.bucket(bucket).blob(path)
        blob.cache_control = f'public, max-age={UPLOAD_CACHE_SECONDS}'
        try:
            blob.upload_from_string(data, content_type=content_type)
        except GoogleAPIError as e:
            raise StorageError(f'Upload failed: {e}') from e
        logger.info('Uploaded object bucket=%s path=%s bytes=%d', bucket, path, len(data))
        return self.public_url(bucket, path)

    def remove(self, bucket: str, path: str) -> bool:
        blob = self.client.bucket(bucket).blob(path)
        try:
            blob.delete()
        except NotFound:
            return False
        except GoogleAPIError as e:
            raise StorageError(f'Delete failed: {e}') from e
        logger.info('Removed object bucket=%s path=%s', bucket, path)
        return True


def init_storage(app):
    backend = app.config.get('STORAGE_BACKEND', 'local')
    if backend == 'gcs':
        instance = GCSStorage(project=app.config.get('GCS_PROJECT'),
                              key_file=app.config.get('GCS_KEY_FILE'))
    elif backend == 'local':
        instance = LocalStorage(app.config['STORAGE_LOCAL_ROOT'])
    else:
        raise ValueError(f'Unknown STORAGE_BACKEND: {backend}')
    app.extensions['object_storage'] = instance
    return instance


def get_storage():
    return current_app.extensions['object_storage']
