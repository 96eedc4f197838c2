import io
import re
from datetime import date, timedelta

from church_site.services.store import record_store


def _event(title, start, **extra):
    return record_store.create('events', {
        'title': title,
        'description': 'Everyone is welcome to join us.',
        'start_date': start,
        'time': '19:30',
        'location': 'Main hall',
        **extra,
    })


def _study(title, archived=False, category='Doctrine'):
    return record_store.create('studies', {
        'title': title,
        'book': 'Psalms',
        'reference': '23:1',
        'verse_text': 'The Lord is my shepherd, I lack nothing.',
        'content': 'Trusting the shepherd every day.',
        'category': category,
        'study_date': date(2026, 2, 1),
        'archived': archived,
    })


def test_public_pages_render(client):
    for path in ('/', '/about', '/events', '/studies', '/gallery', '/contact'):
        r = client.get(path)
        assert r.status_code == 200, path


def test_home_shows_active_verse_and_upcoming_events(client):
    record_store.create('featured_verses', {
        'book': 'Philippians', 'reference': '4:13',
        'text': 'I can do all this through him who gives me strength.', 'active': True,
    })
    _event('Future concert', date.today() + timedelta(days=7))
    _event('Finished picnic', date.today() + timedelta(days=3), completed=True)
    _event('Old meeting', date.today() - timedelta(days=30))

    body = client.get('/').get_data(as_text=True)
    assert 'Philippians 4:13' in body
    assert 'Future concert' in body
    assert 'Finished picnic' not in body
    assert 'Old meeting' not in body


def test_events_page_splits_completed(client):
    _event('Open event', date(2026, 8, 1))
    _event('Done event', date(2026, 1, 1), completed=True)
    body = client.get('/events').get_data(as_text=True)
    upcoming, past = body.split('Past events')
    assert 'Open event' in upcoming
    assert 'Done event' in past


def test_studies_hide_archived_and_filter(client):
    _study('Current study')
    _study('Old study', archived=True)
    _study('Youth study', category='Youth')

    body = client.get('/studies?category=Doctrine').get_data(as_text=True)
    current, archive = body.split('Archive')
    assert 'Current study' in current
    assert 'Youth study' not in current
    assert 'Old study' in archive


def test_sitemap(client):
    r = client.get('/sitemap.xml')
    assert r.status_code == 200
    assert r.mimetype == 'application/xml'
    body = r.get_data(as_text=True)
    assert '<loc>https://pibvilacanaan.com.br/events</loc>' in body


def test_local_media_is_served(app, client):
    storage = app.extensions['object_storage']
    url = storage.upload('eventos', 'x.png', b'fake-png', 'image/png')
    r = client.get(url)
    assert r.status_code == 200
    assert r.data == b'fake-png'


def test_admin_verse_activation_flow(admin_client):
    r = admin_client.post('/admin/verses', data={
        'book': 'John', 'reference': '3:16',
        'text': 'For God so loved the world that he gave his one and only Son',
        'active': 'yes',
    })
    assert r.status_code == 302
    r = admin_client.post('/admin/verses', data={
        'book': 'Psalms', 'reference': '46:1',
        'text': 'God is our refuge and strength, an ever-present help in trouble.',
        'active': 'yes',
    })
    assert r.status_code == 302

    active = record_store.list('featured_verses', filters={'active': True})
    assert [v['reference'] for v in active] == ['46:1']

    john = record_store.list('featured_verses', filters={'reference': '3:16'})[0]
    admin_client.post(f"/admin/verses/{john['id']}/toggle")
    active = record_store.list('featured_verses', filters={'active': True})
    assert [v['id'] for v in active] == [john['id']]


def test_admin_validation_errors_keep_form_open(admin_client):
    r = admin_client.post('/admin/events', data={'title': 'x'})
    assert r.status_code == 400
    body = r.get_data(as_text=True)
    assert 'Title must be at least 3 characters' in body
    assert 'Start date is required' in body
    assert record_store.count('events') == 0


def test_admin_event_upload_complete_and_delete(admin_client, storage, make_image):
    r = admin_client.post('/admin/events', data={
        'title': 'Harvest festival',
        'description': 'Food, music and fellowship for all ages.',
        'start_date': '2026-09-20',
        'time': '16:00',
        'location': 'Church yard',
        'image': (io.BytesIO(make_image()), 'poster.jpg', 'image/jpeg'),
    }, content_type='multipart/form-data')
    assert r.status_code == 302

    event = record_store.list('events')[0]
    assert event['image_url'].startswith('https://storage.test/eventos/')
    assert len(storage.objects) == 1

    # completion asks first
    r = admin_client.post(f"/admin/events/{event['id']}/complete")
    assert r.status_code == 200
    assert 'Mark this event as completed?' in r.get_data(as_text=True)
    assert record_store.get('events', event['id'])['completed'] is False

    r = admin_client.post(f"/admin/events/{event['id']}/complete", data={'confirmed': 'yes'})
    assert r.status_code == 302
    done = record_store.get('events', event['id'])
    assert done['completed'] is True
    assert done['image_url'] is None
    assert storage.objects == {}

    r = admin_client.post(f"/admin/events/{event['id']}/delete", data={'confirmed': 'yes'})
    assert r.status_code == 302
    assert record_store.count('events') == 0


def test_admin_delete_requires_confirmation(admin_client):
    study = _study('Keep me')
    r = admin_client.post(f"/admin/studies/{study['id']}/delete")
    assert r.status_code == 200
    assert 'Are you sure you want to delete this item?' in r.get_data(as_text=True)
    assert record_store.count('studies') == 1

    admin_client.post(f"/admin/studies/{study['id']}/delete", data={'confirmed': 'yes'})
    assert record_store.count('studies') == 0


def test_admin_study_archive_toggle(admin_client):
    study = _study('Archivable')
    admin_client.post(f"/admin/studies/{study['id']}/archive")
    assert record_store.get('studies', study['id'])['archived'] is True
    admin_client.post(f"/admin/studies/{study['id']}/archive")
    assert record_store.get('studies', study['id'])['archived'] is False


def test_admin_gallery_needs_an_image(admin_client, storage):
    r = admin_client.post('/admin/gallery', data={'title': 'Baptism', 'category': 'Services'})
    assert r.status_code == 400
    assert 'Select an image or paste its URL' in r.get_data(as_text=True)

    r = admin_client.post('/admin/gallery', data={
        'title': 'Baptism', 'category': 'Services', 'url': 'https://images.example.com/b.jpg',
    })
    assert r.status_code == 302
    assert record_store.list('gallery')[0]['url'] == 'https://images.example.com/b.jpg'


def test_admin_team_member_with_photo(admin_client, storage, make_image):
    r = admin_client.post('/admin/team', data={
        'name': 'Pastor Joao',
        'position': 'Senior pastor',
        'description': 'Leads the church since 2010.',
        'active': 'yes',
        'photo': (io.BytesIO(make_image('PNG')), 'joao.png', 'image/png'),
    }, content_type='multipart/form-data')
    assert r.status_code == 302
    member = record_store.list('team_members')[0]
    assert member['photo_url'].startswith('https://storage.test/equipe/')

    admin_client.post(f"/admin/team/{member['id']}/delete", data={'confirmed': 'yes'})
    assert record_store.count('team_members') == 0
    assert storage.objects == {}


def test_admin_settings_upsert(admin_client):
    data = {
        'name': 'PIB Vila Canaan',
        'address': 'Rua das Flores, 123 - Vila Canaan',
        'phone': '(11) 3456-7890',
        'email': 'contato@pibvilacanaan.com.br',
    }
    assert admin_client.post('/admin/settings', data=data).status_code == 302
    assert admin_client.post('/admin/settings', data={**data, 'phone': '(11) 98765-4321'}).status_code == 302
    rows = record_store.list('church_info')
    assert len(rows) == 1
    assert rows[0]['phone'] == '(11) 98765-4321'

    r = admin_client.post('/admin/settings', data={**data, 'email': 'x@mailinator.com'})
    assert r.status_code == 400
    assert 'Email domain not allowed' in r.get_data(as_text=True)


def test_dashboard_counts(admin_client):
    _study('Counted')
    admin_client.post('/admin/studies', data={
        'title': 'Faith', 'book': 'Hebrews', 'reference': '11:1',
        'verse_text': 'Now faith is confidence in what we hope for',
        'content': 'What faith looks like in daily life.',
        'category': 'Doctrine', 'study_date': '2026-04-01',
    })
    body = admin_client.get('/admin/dashboard').get_data(as_text=True)
    assert 'id="count-studies">2<' in body


def test_completed_event_takes_no_new_image(admin_client, storage, make_image):
    event = _event('Past concert', date(2026, 1, 10), completed=True)
    r = admin_client.post(f"/admin/events/{event['id']}", data={
        'title': 'Past concert',
        'description': 'Everyone is welcome to join us.',
        'start_date': '2026-01-10',
        'time': '19:30',
        'location': 'Main hall',
        'image_url': 'https://images.example.com/new.jpg',
        'image': (io.BytesIO(make_image()), 'poster.jpg', 'image/jpeg'),
    }, content_type='multipart/form-data')
    assert r.status_code == 302
    assert record_store.get('events', event['id'])['image_url'] is None
    assert storage.objects == {}

    body = admin_client.get(f"/admin/events?edit={event['id']}").get_data(as_text=True)
    assert 'name="image"' not in body


def test_admin_post_needs_csrf_token(app, admin_client):
    app.config['WTF_CSRF_ENABLED'] = True
    study = _study('Guarded')

    r = admin_client.post(f"/admin/studies/{study['id']}/delete", data={'confirmed': 'yes'})
    assert r.status_code == 400
    assert record_store.count('studies') == 1

    page = admin_client.get('/admin/studies').get_data(as_text=True)
    token = re.search(r'name="csrf_token" value="([^"]+)"', page).group(1)
    r = admin_client.post(f"/admin/studies/{study['id']}/delete",
                          data={'confirmed': 'yes', 'csrf_token': token})
    assert r.status_code == 302
    assert record_store.count('studies') == 0


def test_contact_api_is_exempt_from_csrf(app, client, monkeypatch):
    app.config['WTF_CSRF_ENABLED'] = True
    monkeypatch.setattr('church_site.public.routes.send_email', lambda **kwargs: ('msg_1', None))
    r = client.post('/api/contact', json={
        'name': 'Maria Souza', 'email': 'maria.souza@gmail.com',
        'subject': 'Visit', 'message': 'Can I visit on Sunday morning?',
    })
    assert r.status_code == 200
