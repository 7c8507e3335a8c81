"""
Transactional email for sponsors and team captains, sent through the Resend
HTTP API.

Sending never raises into the caller: a disabled or unconfigured sender logs
and reports success, and provider failures are logged and reported as False.
Registration state is already committed by the time any email goes out.
"""
import logging
from html import escape

import requests
from flask import current_app

from backend.models import EventYear

logger = logging.getLogger(__name__)

SPONSOR_WELCOME = 'sponsor_welcome'
CAPTAIN_CODE = 'captain_code'
TEAM_CONFIRMATION = 'team_confirmation'

_PAYMENT_LABELS = {
    'online': 'Online Payment (coming soon)',
    'check': 'Check',
    'invoice': 'Invoice / ACH',
    'venmo': 'Venmo',
    'paypal': 'PayPal',
}
_EVENT_LABELS = {
    'friday': 'Friday Florida Scramble',
    'sat_sun': 'Saturday-Sunday 2-Man Best Ball',
}


def format_price(amount):
    return f'${int(amount or 0):,}'


def payment_label(method):
    return _PAYMENT_LABELS.get(method, method or '')


def _layout(title, subtitle, body):
    tournament = escape(current_app.config.get('TOURNAMENT_NAME', ''))
    return (
        '<!DOCTYPE html><html><head><meta charset="utf-8"></head>'
        '<body style="font-family: sans-serif; line-height: 1.6; color: #333; '
        'max-width: 600px; margin: 0 auto; padding: 20px;">'
        f'<div style="text-align: center;"><h1 style="color: #166534;">{escape(title)}</h1>'
        f'<p style="color: #666;">{escape(subtitle)}</p></div>'
        f'{body}'
        '<hr style="border: none; border-top: 1px solid #e5e7eb; margin: 32px 0;">'
        f'<p style="color: #999; font-size: 12px; text-align: center;">{tournament}'
        ' - Supporting Navy SEAL Families</p>'
        '</body></html>'
    )


def _tournament_title():
    cfg = current_app.config
    return f"{cfg.get('TOURNAMENT_NAME', '')} {_event_year()}".strip()


def _event_year():
    event_year = EventYear.query.filter_by(is_active=True).first()
    return event_year.year if event_year else ''


def sponsor_welcome_email(data):
    included = int(data.get('included_entries') or 0)
    benefits = ''.join(f'<li>{escape(str(b))}</li>' for b in data.get('benefits') or [])
    body = [
        f"<p>Dear {escape(data.get('contact_name', ''))},</p>",
        f"<p>Thank you for registering <strong>{escape(data.get('sponsor_name', ''))}</strong>"
        f' as a sponsor for the {escape(_tournament_title())}.</p>',
        '<h2 style="color: #166534;">Your Sponsorship Package</h2>',
        f"<p><strong>{escape(data.get('package_name', ''))}</strong> - "
        f"{format_price(data.get('package_price'))}</p>",
        f'<ul>{benefits}</ul>',
    ]
    if included > 0:
        noun = 'entry' if included == 1 else 'entries'
        body.append(
            f'<h2 style="color: #166534;">Team Entry Management</h2>'
            f'<p>Your package includes {included} team {noun}. Use your sponsorship portal'
            ' to send invite links to your team captains:</p>'
            f"<p><a href=\"{escape(data.get('edit_url', ''))}\">Manage Team Entries</a></p>"
        )
    method = data.get('payment_method')
    if method == 'online':
        body.append('<p>You selected online payment. We will send a payment link when it is ready.</p>')
    else:
        body.append(
            f'<p>You selected <strong>{escape(payment_label(method))}</strong> as your payment method.'
            f" Please include \"{escape(data.get('sponsor_name', ''))}\" in your payment memo.</p>"
        )
    return {
        'subject': f'Thank You for Your {_tournament_title()} Sponsorship',
        'html': _layout(_tournament_title(), 'Thank you for your sponsorship!', ''.join(body)),
    }


def captain_code_email(data):
    body = (
        f"<p><strong>{escape(data.get('sponsor_name', ''))}</strong> has invited you to register"
        f' a team for the {escape(_tournament_title())}.</p>'
        f"<p>Your registration code: <strong style=\"font-family: monospace;\">"
        f"{escape(data.get('code', ''))}</strong></p>"
        f"<p><a href=\"{escape(data.get('redeem_url', ''))}\">Register Your Team</a></p>"
    )
    return {
        'subject': f'Your {_tournament_title()} Team Registration Link',
        'html': _layout(_tournament_title(), "You're invited to play", body),
    }


def team_confirmation_email(data):
    event_type = data.get('event_type', '')
    body = (
        f"<p>Hi {escape(data.get('captain_name') or 'Captain')},</p>"
        f"<p>Your team <strong>{escape(data.get('team_name') or 'Unnamed Team')}</strong> is registered"
        f' for the {escape(_EVENT_LABELS.get(event_type, event_type))}.</p>'
        f"<p>Sponsored by {escape(data.get('sponsor_name', ''))}.</p>"
    )
    return {
        'subject': f'Team Registration Confirmed - {_tournament_title()}',
        'html': _layout(_tournament_title(), 'Registration confirmed', body),
    }


_TEMPLATES = {
    SPONSOR_WELCOME: sponsor_welcome_email,
    CAPTAIN_CODE: captain_code_email,
    TEAM_CONFIRMATION: team_confirmation_email,
}


def render_email(template_type, data):
    renderer = _TEMPLATES.get(template_type)
    if renderer is None:
        raise ValueError(f'Unknown email type: {template_type}')
    return renderer(data or {})


def send_email(template_type, to, data):
    """Render and send one email. Returns True on success or skip, False on failure."""
    content = render_email(template_type, data)
    cfg = current_app.config

    if not cfg.get('EMAIL_ENABLED', True):
        logger.info('Email sending is disabled; skipped %s to %s', template_type, to)
        return True

    api_key = cfg.get('RESEND_API_KEY')
    if not api_key:
        logger.warning(
            'RESEND_API_KEY not configured; skipped %s to %s (%s)',
            template_type, to, content['subject'],
        )
        return True

    try:
        response = requests.post(
            cfg['RESEND_API_URL'],
            json={
                'from': cfg['EMAIL_FROM_ADDRESS'],
                'to': [to],
                'subject': content['subject'],
                'html': content['html'],
            },
            headers={'Authorization': f'Bearer {api_key}'},
            timeout=cfg.get('EMAIL_TIMEOUT_SECONDS', 10.0),
        )
        response.raise_for_status()
    except requests.RequestException:
        logger.exception('Failed to send %s email to %s', template_type, to)
        return False

    logger.info('Sent %s email to %s', template_type, to)
    return True


def notify(template_type, to, data):
    """Fire-and-forget wrapper used after registration state is committed."""
    if not to:
        return False
    try:
        return send_email(template_type, to, data)
    except Exception:
        logger.exception('Unexpected error building %s email for %s', template_type, to)
        return False
