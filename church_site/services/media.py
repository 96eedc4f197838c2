"""
Media attachment lifecycle

Images are optimized and uploaded before the owning record is saved; the
record only stores the resulting URL. When a record stops referencing an
object it owns (replaced, deleted, or the event completed) the object is
removed from storage on a best-effort basis: failures are logged and never
undo the record change.
"""

from __future__ import annotations

import io
import logging
import secrets
import time
from urllib.parse import unquote

from flask import current_app
from PIL import Image, ImageOps, UnidentifiedImageError

from church_site.errors import StorageError, StoreError, ValidationError
from church_site.services.storage import get_storage

logger = logging.getLogger(__name__)


FORMATS = {
    'JPEG': ('image/jpeg', 'jpg'),
    'PNG': ('image/png', 'png'),
    'WEBP': ('image/webp', 'webp'),
}


def optimize_image(data: bytes, max_width: int = 1920, quality: float = 0.8):
    """Downscale to `max_width` and re-encode in the source format.

    Returns (bytes, content_type, extension).
    """
    try:
        image_raw = Image.open(io.BytesIO(data))
        image_raw.load()
    except (UnidentifiedImageError, OSError) as e:
        raise ValidationError({'image': 'The file is not a readable image'}) from e

    fmt = image_raw.format
    if fmt not in FORMATS:
        raise ValidationError({'image': 'Only JPG, PNG and WebP images are allowed'})

    image = ImageOps.exif_transpose(image_raw)
    width, height = image.size
    if width > max_width:
        new_height = max(1, int(round(height * max_width / width)))
        image = image.resize((max_width, new_height), Image.Resampling.LANCZOS)

    if fmt == 'JPEG' and image.mode not in ('RGB', 'L'):
        image = image.convert('RGB')

    output = io.BytesIO()
    if fmt == 'PNG':
        image.save(output, format='PNG', optimize=True)
    else:
        image.save(output, format=fmt, quality=int(round(quality * 100)))
    content_type, ext = FORMATS[fmt]
    return output.getvalue(), content_type, ext


def has_file(upload) -> bool:
    return bool(upload is not None and getattr(upload, 'filename', ''))


def prepare_upload(upload):
    """Validate an uploaded file (type and size) and optimize it."""
    config = current_app.config
    mimetype = (getattr(upload, 'mimetype', '') or '').lower()
    if mimetype not in config['ALLOWED_IMAGE_TYPES']:
        logger.error('Rejected upload type=%s', mimetype)
        raise ValidationError({'image': 'Only JPG, PNG and WebP images are allowed'})

    data = upload.read()
    if len(data) > config['MAX_IMAGE_SIZE']:
        logger.error('Rejected upload size=%d bytes', len(data))
        raise ValidationError({'image': 'The image must be at most 5MB'})

    return optimize_image(data, max_width=config['IMAGE_MAX_WIDTH'],
                          quality=config['IMAGE_QUALITY'])


def new_object_path(ext: str) -> str:
    return f'{int(time.time() * 1000)}-{secrets.token_hex(6)}.{ext}'


def object_path(url, bucket, storage=None):
    """Path of an object this site stores in `bucket`, or None for foreign URLs.

    Only URLs under the storage's own public prefix for the bucket count as
    managed, so a look-alike path on another host is left alone.
    """
    text = str(url or '').strip()
    if not text:
        return None
    storage = storage or get_storage()
    prefix = storage.public_url(bucket, '')
    if not text.startswith(prefix):
        return None
    path = unquote(text[len(prefix):].split('?', 1)[0])
    return path or None


def purge_reference(url, bucket, storage=None) -> bool:
    """Remove the object behind `url` if this site owns it. Never raises."""
    storage = storage or get_storage()
    path = object_path(url, bucket, storage)
    if path is None:
        logger.debug('Not a managed object, leaving it alone url=%s', url)
        return False
    try:
        removed = storage.remove(bucket, path)
    except StorageError as e:
        logger.warning('Could not remove object bucket=%s path=%s: %s', bucket, path, e.message)
        return False
    if not removed:
        logger.warning('Object already missing bucket=%s path=%s', bucket, path)
    return removed


def attach_and_save(controller, record, fields, bucket, url_field,
                    upload=None, pasted_url=None, storage=None) -> bool:
    """Save a record together with its image.

    A chosen file wins over a pasted URL. Without either, the image field is
    left as it is. A pasted URL may not point at another managed object in
    `bucket`. After a successful save, the object previously referenced by
    the record is removed if it belongs to `bucket`.
    """
    storage = storage or get_storage()
    fields = dict(fields)
    previous = (record or {}).get(url_field)
    uploaded_path = None

    if has_file(upload):
        data, content_type, ext = prepare_upload(upload)
        uploaded_path = new_object_path(ext)
        try:
            fields[url_field] = storage.upload(bucket, uploaded_path, data, content_type)
        except StorageError as e:
            logger.error('Image upload failed bucket=%s: %s', bucket, e.message)
            controller.notify('Could not upload the image', 'danger')
            controller.show_errors({'image': 'Could not upload the image'}, fields, record)
            return False
    elif pasted_url:
        pasted_url = pasted_url.strip()
        # a managed object belongs to exactly one record
        if pasted_url != previous and object_path(pasted_url, bucket, storage) is not None:
            raise ValidationError({url_field: 'Paste an external image URL or upload a file'})
        fields[url_field] = pasted_url
    else:
        fields.pop(url_field, None)

    if record:
        saved = controller.update(record['id'], fields)
    else:
        saved = controller.create(fields)

    if not saved:
        if uploaded_path:
            try:
                storage.remove(bucket, uploaded_path)
            except StorageError as e:
                logger.warning('Could not remove orphaned upload path=%s: %s', uploaded_path, e.message)
        return False

    current = fields.get(url_field, previous)
    if previous and current != previous:
        purge_reference(previous, bucket, storage)
    return True


def complete_and_purge(controller, record, bucket, url_field='image_url', storage=None) -> bool:
    """Mark an event completed, clear its image and remove the object."""
    if record.get('completed'):
        controller.notify('This event is already completed', 'info')
        return False

    try:
        controller.store.update(controller.collection, record['id'],
                                {'completed': True, url_field: None})
    except StoreError as e:
        logger.error('Could not complete %s id=%s: %s', controller.collection, record['id'], e.message)
        controller.notify(f'Could not complete the event: {e.message}', 'danger')
        return False

    previous = record.get(url_field)
    if previous and not purge_reference(previous, bucket, storage):
        logger.warning('Event completed but its image was not removed url=%s', previous)

    controller.notify('Event completed successfully!', 'success')
    controller.refresh()
    return True


def delete_with_media(controller, record, bucket, url_field, storage=None) -> bool:
    """Delete an already-confirmed record, then its managed image."""
    deleted = controller.delete(record['id'], '')
    if deleted and record.get(url_field):
        purge_reference(record[url_field], bucket, storage)
    return deleted
