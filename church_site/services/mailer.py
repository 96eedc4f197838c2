"""
Outbound e-mail through the Resend HTTP API
"""

import logging

import requests
from flask import current_app

logger = logging.getLogger(__name__)


def send_email(sender, to, reply_to, subject, html):
    """Send one message. Returns (message_id, error_message)."""
    config = current_app.config
    payload = {
        'from': sender,
        'to': [to] if isinstance(to, str) else list(to),
        'reply_to': reply_to,
        'subject': subject,
        'html': html,
    }
    headers = {'Authorization': f"Bearer {config['RESEND_API_KEY']}"}

    try:
        resp = requests.post(config['RESEND_API_URL'], json=payload, headers=headers,
                             timeout=config['MAIL_TIMEOUT'])
    except requests.exceptions.Timeout:
        return None, 'Request timed out'
    except requests.exceptions.RequestException as e:
        return None, str(e)

    if resp.status_code >= 400:
        try:
            message = resp.json().get('message') or resp.text
        except ValueError:
            message = resp.text
        return None, f'Resend error {resp.status_code}: {message}'

    return resp.json().get('id'), None
