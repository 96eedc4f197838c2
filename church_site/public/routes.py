"""
Public Routes

Visitor pages, the contact form endpoints, the sitemap and locally stored
media.
"""

import logging
from datetime import date

from flask import (
    Response, abort, current_app, flash, jsonify, redirect, render_template, request,
    send_from_directory, url_for,
)
from markupsafe import escape

from church_site.errors import RateLimitError, ValidationError
from church_site.extensions import csrf
from church_site.models import GALLERY_CATEGORIES
from church_site.public import public_bp
from church_site.public.services import (
    UPCOMING_ON_HOME, get_church_info, get_featured_verse, get_gallery, get_open_events,
    get_past_events, get_studies, get_study_categories, get_team, get_upcoming_events,
)
from church_site.services.mailer import send_email
from church_site.services.ratelimit import client_ip
from church_site.services.storage import LocalStorage, get_storage
from church_site.validation import contact_form

logger = logging.getLogger(__name__)

SITEMAP_PAGES = (
    ('public.home', 'daily', '1.0'),
    ('public.about', 'monthly', '0.8'),
    ('public.studies', 'weekly', '0.9'),
    ('public.events', 'weekly', '0.9'),
    ('public.gallery', 'weekly', '0.7'),
    ('public.contact', 'monthly', '0.6'),
)


@public_bp.route('/')
def home():
    """Home page with the verse of the week and the next events"""
    return render_template('public/home.html',
                           verse=get_featured_verse(),
                           events=get_upcoming_events(limit=UPCOMING_ON_HOME))


@public_bp.route('/about')
def about():
    return render_template('public/about.html', church=get_church_info(), team=get_team())


@public_bp.route('/events')
def events():
    return render_template('public/events.html',
                           upcoming=get_open_events(), past=get_past_events())


@public_bp.route('/studies')
def studies():
    category = request.args.get('category', '').strip() or None
    current = get_studies(archived=False, category=category)
    return render_template('public/studies.html',
                           featured=current[0] if current and not category else None,
                           studies=current,
                           archived=get_studies(archived=True),
                           categories=get_study_categories(),
                           category=category)


@public_bp.route('/gallery')
def gallery():
    category = request.args.get('category', '').strip() or None
    if category not in GALLERY_CATEGORIES:
        category = None
    return render_template('public/gallery.html', photos=get_gallery(category),
                           categories=GALLERY_CATEGORIES, category=category)


@public_bp.route('/contact', methods=['GET', 'POST'])
def contact():
    """Contact page; the HTML form posts here, scripts use /api/contact."""
    if request.method == 'POST':
        body, status, headers = handle_contact(request.form)
        if status == 200:
            flash('Message sent! We will get back to you soon.', 'success')
            return redirect(url_for('public.contact'))
        flash(body['error'], 'danger')
        return render_template('public/contact.html', church=get_church_info(),
                               form=request.form, errors=body.get('details', {})), status, headers

    return render_template('public/contact.html', church=get_church_info(), form={}, errors={})


@public_bp.route('/api/contact', methods=['POST'])
@csrf.exempt
def contact_api():
    data = request.get_json(silent=True)
    if not isinstance(data, dict):
        return jsonify({'error': 'Invalid data'}), 400
    body, status, headers = handle_contact(data)
    return jsonify(body), status, headers


def handle_contact(data):
    """Rate limit, validate and e-mail a contact message.

    Returns (json_body, status, headers).
    """
    try:
        if current_app.config.get('USE_RATE_LIMITING', True):
            ip = client_ip()
            try:
                current_app.extensions['contact_limiter'].hit(ip)
            except RateLimitError as e:
                logger.warning('Rate limit exceeded ip=%s context=contact', ip)
                return {'error': e.message}, 429, {'Retry-After': str(e.retry_after)}

        try:
            fields = contact_form(data)
        except ValidationError as e:
            logger.warning('Contact validation failed fields=%s', ','.join(sorted(e.errors)))
            return {'error': 'Invalid data', 'details': e.errors}, 400, {}

        config = current_app.config
        html = render_template('email/contact.html', **fields)
        message_id, error = send_email(
            sender=config['MAIL_FROM'],
            to=config['CONTACT_EMAIL'],
            reply_to=fields['email'],
            subject=f"Website contact - {escape(fields['subject'])}",
            html=html,
        )
        if error:
            logger.error('Could not send contact e-mail: %s', error)
            return {'error': 'Could not send the message. Please try again.'}, 500, {}

        logger.info('Contact e-mail sent id=%s email=%s', message_id, fields['email'])
        return {'success': True}, 200, {}
    except Exception:
        logger.exception('Unexpected error in contact handler')
        return {'error': 'Internal server error'}, 500, {}


@public_bp.route('/sitemap.xml')
def sitemap():
    base_url = current_app.config['SITE_URL'].rstrip('/')
    today = date.today().isoformat()
    entries = [
        {'loc': base_url + url_for(endpoint), 'lastmod': today,
         'changefreq': freq, 'priority': priority}
        for endpoint, freq, priority in SITEMAP_PAGES
    ]
    xml = render_template('sitemap.xml', entries=entries)
    return Response(xml, mimetype='application/xml')


@public_bp.route('/media/<bucket>/<path:path>')
def media(bucket, path):
    """Serve objects kept by the local storage backend."""
    storage = get_storage()
    if not isinstance(storage, LocalStorage):
        abort(404)
    return send_from_directory(storage.root, f'{bucket}/{path}')
