import io
from datetime import date

import pytest
from PIL import Image
from werkzeug.datastructures import FileStorage

from church_site.errors import ValidationError
from church_site.services.crud import CrudController
from church_site.services.media import (
    attach_and_save, complete_and_purge, delete_with_media, object_path, optimize_image,
)
from church_site.services.storage import LocalStorage
from church_site.services.store import record_store

EVENT = {
    'title': 'Youth retreat',
    'description': 'A weekend retreat for the youth group.',
    'start_date': date(2026, 7, 10),
    'time': '08:00',
    'location': 'Camp Canaan',
}


def _upload(data, filename='photo.jpg', content_type='image/jpeg'):
    return FileStorage(stream=io.BytesIO(data), filename=filename, content_type=content_type)


def _events(notes):
    controller = CrudController('events', notify=notes)
    controller.refresh()
    return controller


def _create_event(**extra):
    return record_store.create('events', {**EVENT, **extra})


def test_optimize_downscales_and_keeps_format(make_image):
    data, content_type, ext = optimize_image(make_image('PNG', size=(4000, 1000)), max_width=1920)
    image = Image.open(io.BytesIO(data))
    assert image.format == 'PNG'
    assert image.size == (1920, 480)
    assert (content_type, ext) == ('image/png', 'png')


def test_optimize_keeps_small_images_size(make_image):
    data, content_type, ext = optimize_image(make_image('WEBP', size=(300, 200)))
    image = Image.open(io.BytesIO(data))
    assert image.format == 'WEBP'
    assert image.size == (300, 200)
    assert ext == 'webp'


def test_optimize_rejects_non_images():
    with pytest.raises(ValidationError) as exc:
        optimize_image(b'not an image')
    assert 'image' in exc.value.errors


def test_object_path(app, storage):
    assert object_path('https://storage.test/eventos/abc.jpg', 'eventos') == 'abc.jpg'
    assert object_path('https://storage.test/eventos/2026/abc.jpg?v=2', 'eventos') == '2026/abc.jpg'
    assert object_path('https://images.example.com/abc.jpg', 'eventos') is None
    assert object_path('https://cdn.other-site.org/eventos/poster.jpg', 'eventos') is None
    assert object_path('https://storage.test/galeria/abc.jpg', 'eventos') is None
    assert object_path(None, 'eventos') is None


def test_object_path_local_backend(tmp_path):
    local = LocalStorage(str(tmp_path))
    assert object_path('/media/eventos/2026/abc.jpg?v=2', 'eventos', local) == '2026/abc.jpg'
    assert object_path('https://example.org/media/eventos/abc.jpg', 'eventos', local) is None


def test_attach_upload_stores_optimized_image(app, storage, notes, make_image):
    original = make_image('JPEG', size=(2400, 1200))
    controller = _events(notes)

    assert attach_and_save(controller, None, dict(EVENT), 'eventos', 'image_url',
                           upload=_upload(original), pasted_url='https://ignored.example/x.jpg')

    saved = record_store.list('events')[0]
    path = object_path(saved['image_url'], 'eventos')
    data, content_type = storage.objects[('eventos', path)]
    image = Image.open(io.BytesIO(data))
    assert image.format == 'JPEG'
    assert image.size == (1920, 960)
    assert data != original
    assert content_type == 'image/jpeg'


def test_attach_replacing_upload_removes_old_object(app, storage, notes, make_image):
    storage.objects[('eventos', 'old.jpg')] = (b'old', 'image/jpeg')
    row = _create_event(image_url='https://storage.test/eventos/old.jpg')
    controller = _events(notes)

    assert attach_and_save(controller, row, dict(EVENT), 'eventos', 'image_url',
                           upload=_upload(make_image()))

    assert ('eventos', 'old.jpg') in storage.removed
    assert record_store.get('events', row['id'])['image_url'] != row['image_url']


def test_attach_pasted_url_removes_superseded_managed_object(app, storage, notes):
    storage.objects[('eventos', 'old.jpg')] = (b'old', 'image/jpeg')
    row = _create_event(image_url='https://storage.test/eventos/old.jpg')
    controller = _events(notes)

    assert attach_and_save(controller, row, dict(EVENT), 'eventos', 'image_url',
                           pasted_url='https://images.example.com/new.jpg')

    assert record_store.get('events', row['id'])['image_url'] == 'https://images.example.com/new.jpg'
    assert storage.removed == [('eventos', 'old.jpg')]


def test_attach_without_image_keeps_reference(app, storage, notes):
    row = _create_event(image_url='https://storage.test/eventos/keep.jpg')
    controller = _events(notes)

    fields = {**EVENT, 'title': 'Renamed retreat', 'image_url': None}
    assert attach_and_save(controller, row, fields, 'eventos', 'image_url')

    saved = record_store.get('events', row['id'])
    assert saved['title'] == 'Renamed retreat'
    assert saved['image_url'] == 'https://storage.test/eventos/keep.jpg'
    assert storage.removed == []


def test_attach_upload_failure_keeps_form_open(app, storage, notes, make_image):
    storage.fail_upload = True
    controller = _events(notes)

    assert attach_and_save(controller, None, dict(EVENT), 'eventos', 'image_url',
                           upload=_upload(make_image())) is False

    assert record_store.count('events') == 0
    assert controller.modal == 'create'
    assert 'image' in controller.errors
    assert notes.messages[-1] == ('danger', 'Could not upload the image')


def test_attach_failed_save_removes_fresh_upload(app, storage, notes, make_image):
    controller = _events(notes)
    fields = {'title': 'Missing the rest'}

    assert attach_and_save(controller, None, fields, 'eventos', 'image_url',
                           upload=_upload(make_image())) is False

    assert storage.objects == {}
    assert len(storage.removed) == 1


def test_attach_rejects_wrong_type(app, storage, notes):
    controller = _events(notes)
    with pytest.raises(ValidationError):
        attach_and_save(controller, None, dict(EVENT), 'eventos', 'image_url',
                        upload=_upload(b'%PDF-1.4', 'doc.pdf', 'application/pdf'))
    assert storage.objects == {}


def test_complete_clears_image_and_removes_object(app, storage, notes):
    storage.objects[('eventos', 'abc.jpg')] = (b'img', 'image/jpeg')
    row = _create_event(image_url='https://storage.test/eventos/abc.jpg')
    controller = _events(notes)

    assert complete_and_purge(controller, row, 'eventos') is True

    saved = record_store.get('events', row['id'])
    assert saved['completed'] is True
    assert saved['image_url'] is None
    assert storage.removed == [('eventos', 'abc.jpg')]
    assert notes.messages[-1] == ('success', 'Event completed successfully!')


def test_complete_stands_when_removal_fails(app, storage, notes):
    storage.fail_remove = True
    row = _create_event(image_url='https://storage.test/eventos/abc.jpg')
    controller = _events(notes)

    assert complete_and_purge(controller, row, 'eventos') is True
    saved = record_store.get('events', row['id'])
    assert saved['completed'] is True
    assert saved['image_url'] is None


def test_complete_twice_is_informational(app, storage, notes):
    row = _create_event(completed=True)
    controller = _events(notes)
    assert complete_and_purge(controller, row, 'eventos') is False
    assert notes.messages == [('info', 'This event is already completed')]


def test_delete_with_media_ignores_foreign_urls(app, storage, notes):
    row = _create_event(image_url='https://images.example.com/poster.jpg')
    controller = _events(notes)
    assert delete_with_media(controller, row, 'eventos', 'image_url') is True
    assert record_store.count('events') == 0
    assert storage.removed == []


def test_delete_with_media_removes_managed_object(app, storage, notes):
    storage.objects[('eventos', 'p.jpg')] = (b'img', 'image/jpeg')
    row = _create_event(image_url='https://storage.test/eventos/p.jpg')
    controller = _events(notes)
    assert delete_with_media(controller, row, 'eventos', 'image_url') is True
    assert storage.objects == {}


def test_attach_rejects_another_records_managed_url(app, storage, notes):
    storage.objects[('eventos', 'theirs.jpg')] = (b'img', 'image/jpeg')
    theirs = _create_event(image_url='https://storage.test/eventos/theirs.jpg')
    mine = _create_event(title='Choir night')
    controller = _events(notes)

    with pytest.raises(ValidationError) as exc:
        attach_and_save(controller, mine, dict(EVENT), 'eventos', 'image_url',
                        pasted_url='https://storage.test/eventos/theirs.jpg')

    assert 'image_url' in exc.value.errors
    assert record_store.get('events', mine['id'])['image_url'] is None
    assert record_store.get('events', theirs['id'])['image_url'] == 'https://storage.test/eventos/theirs.jpg'
    assert ('eventos', 'theirs.jpg') in storage.objects


def test_attach_keeps_own_managed_url_when_resubmitted(app, storage, notes):
    row = _create_event(image_url='https://storage.test/eventos/mine.jpg')
    controller = _events(notes)
    assert attach_and_save(controller, row, dict(EVENT), 'eventos', 'image_url',
                           pasted_url='https://storage.test/eventos/mine.jpg')
    assert storage.removed == []


def test_delete_ignores_lookalike_path_on_other_host(app, storage, notes):
    storage.objects[('eventos', 'poster.jpg')] = (b'img', 'image/jpeg')
    row = _create_event(image_url='https://cdn.other-site.org/eventos/poster.jpg')
    controller = _events(notes)
    assert delete_with_media(controller, row, 'eventos', 'image_url') is True
    assert storage.removed == []
    assert ('eventos', 'poster.jpg') in storage.objects


def test_local_storage_roundtrip(tmp_path):
    local = LocalStorage(str(tmp_path))
    url = local.upload('galeria', '123-ab.png', b'png-bytes', 'image/png')
    assert url == '/media/galeria/123-ab.png'
    assert (tmp_path / 'galeria' / '123-ab.png').read_bytes() == b'png-bytes'
    assert local.remove('galeria', '123-ab.png') is True
    assert local.remove('galeria', '123-ab.png') is False
