"""Sponsor sign-up, the token-gated sponsor portal, and sponsorship packages."""
import logging
import secrets

from flask import current_app

from backend.app import db
from backend.errors import (
    RegistrationError,
    NOT_FOUND,
    SPONSOR_NOT_FOUND,
    VALIDATION_ERROR,
)
from backend.models import (
    PAYMENT_METHODS, PAYMENT_STATUSES, SEAL_PLAY_OPTIONS,
    Sponsor, SponsorCredit, SponsorshipPackage, Team,
)
from backend.services import credit_ledger
from backend.services.email_service import CAPTAIN_CODE, SPONSOR_WELCOME, notify
from backend.services.event_years import active_event_year_or_raise
from backend.services.transactions import commit_or_raise, flush_or_raise

logger = logging.getLogger(__name__)

_SPONSOR_REQUIRED_FIELDS = ('company_name', 'contact_name', 'contact_email', 'package_id', 'payment_method')


def _clean(value):
    return str(value or '').strip()


def _public_url(path):
    base = str(current_app.config.get('PUBLIC_BASE_URL') or '').rstrip('/')
    return f'{base}{path}'


def sponsor_portal_url(sponsor):
    return _public_url(f'/sponsor/edit?token={sponsor.access_token}')


def redeem_url(code):
    return _public_url(f'/redeem/{code}')


def new_access_token():
    return secrets.token_urlsafe(24)


# ── Packages ──────────────────────────────────────────────────────────

def get_package(package_id):
    try:
        package = db.session.get(SponsorshipPackage, int(package_id))
    except (TypeError, ValueError):
        package = None
    if package is None:
        raise RegistrationError('Package not found', NOT_FOUND)
    return package


def list_packages(event_year_id, active_only=True):
    query = SponsorshipPackage.query.filter_by(event_year_id=event_year_id)
    if active_only:
        query = query.filter_by(is_active=True)
    return query.order_by(SponsorshipPackage.display_order.asc(), SponsorshipPackage.id.asc()).all()


def is_package_available(package):
    if not package.is_active:
        return False
    if not package.max_sponsors:
        return True
    taken = Sponsor.query.filter_by(package_id=package.id).count()
    return taken < package.max_sponsors


def _apply_package_fields(package, data):
    if 'name' in data:
        name = _clean(data.get('name'))
        if not name:
            raise RegistrationError('Package name is required', VALIDATION_ERROR)
        package.name = name
    for field in ('price', 'included_entries', 'dinner_tables', 'display_order', 'max_sponsors'):
        if field in data:
            try:
                value = int(data.get(field) or 0)
            except (TypeError, ValueError):
                raise RegistrationError(f'{field} must be a number', VALIDATION_ERROR)
            if value < 0:
                raise RegistrationError(f'{field} cannot be negative', VALIDATION_ERROR)
            setattr(package, field, value)
    if 'seal_play' in data:
        seal_play = _clean(data.get('seal_play') or 'none').lower()
        if seal_play not in SEAL_PLAY_OPTIONS:
            raise RegistrationError('Invalid SEAL play option', VALIDATION_ERROR)
        package.seal_play = seal_play
    if 'benefits' in data:
        benefits = data.get('benefits') or []
        if not isinstance(benefits, list):
            raise RegistrationError('Benefits must be a list', VALIDATION_ERROR)
        package.benefits = [_clean(b) for b in benefits if _clean(b)]
    if 'is_active' in data:
        package.is_active = bool(data.get('is_active'))


def create_package(data):
    event_year = active_event_year_or_raise()
    if not _clean(data.get('name')) or data.get('price') is None:
        raise RegistrationError('Name and price are required', VALIDATION_ERROR)
    max_order = db.session.query(db.func.max(SponsorshipPackage.display_order)).filter(
        SponsorshipPackage.event_year_id == event_year.id
    ).scalar() or 0
    package = SponsorshipPackage(event_year_id=event_year.id, display_order=max_order + 1)
    _apply_package_fields(package, {k: v for k, v in data.items() if k != 'display_order'})
    db.session.add(package)
    commit_or_raise('create package')
    return package


def update_package(package_id, data):
    package = get_package(package_id)
    try:
        _apply_package_fields(package, data)
    except RegistrationError:
        db.session.rollback()
        raise
    commit_or_raise('update package')
    return package


def delete_package(package_id):
    package = get_package(package_id)
    if Sponsor.query.filter_by(package_id=package.id).count():
        # Sponsors keep pointing at their package, so retire it instead.
        package.is_active = False
        commit_or_raise('deactivate package')
        return False
    db.session.delete(package)
    commit_or_raise('delete package')
    return True


# ── Sponsors ──────────────────────────────────────────────────────────

def register_sponsor(data):
    """Create a sponsor and the credit pool its package includes.

    The welcome email goes out after the commit; a failed send is logged only.
    """
    if not isinstance(data, dict) or any(not _clean(data.get(f)) for f in _SPONSOR_REQUIRED_FIELDS):
        raise RegistrationError('Missing required fields', VALIDATION_ERROR)
    payment_method = _clean(data.get('payment_method')).lower()
    if payment_method not in PAYMENT_METHODS:
        raise RegistrationError('Invalid payment method', VALIDATION_ERROR)

    event_year = active_event_year_or_raise()
    try:
        package = get_package(data.get('package_id'))
    except RegistrationError:
        raise RegistrationError('Invalid sponsorship package', VALIDATION_ERROR)
    if not package.is_active or package.event_year_id != event_year.id:
        raise RegistrationError('Invalid sponsorship package', VALIDATION_ERROR)
    if not is_package_available(package):
        raise RegistrationError(
            'This sponsorship package is no longer available. Please select a different package.',
            VALIDATION_ERROR,
        )

    sponsor = Sponsor(
        event_year_id=event_year.id,
        name=_clean(data.get('company_name')),
        contact_name=_clean(data.get('contact_name')),
        contact_email=_clean(data.get('contact_email')),
        package_id=package.id,
        payment_method=payment_method,
        payment_status='pending_online' if payment_method == 'online' else 'pending_offline',
        total_credits=package.included_entries,
        access_token=new_access_token(),
    )
    try:
        db.session.add(sponsor)
        flush_or_raise('create sponsor')
        credit_ledger.issue_credits(sponsor.id, package.included_entries, commit=False)
        commit_or_raise('create sponsor')
    except RegistrationError:
        db.session.rollback()
        raise
    logger.info('Sponsor %s registered with %d credits', sponsor.id, sponsor.total_credits)

    edit_url = sponsor_portal_url(sponsor)
    notify(SPONSOR_WELCOME, sponsor.contact_email, {
        'sponsor_name': sponsor.name,
        'contact_name': sponsor.contact_name,
        'package_name': package.name,
        'package_price': package.price,
        'included_entries': package.included_entries,
        'benefits': package.benefits,
        'payment_method': payment_method,
        'edit_url': edit_url,
    })
    return sponsor, edit_url


def get_sponsor(sponsor_id):
    sponsor = db.session.get(Sponsor, sponsor_id)
    if sponsor is None:
        raise RegistrationError('Sponsor not found', SPONSOR_NOT_FOUND)
    return sponsor


def sponsor_by_token(token):
    token = _clean(token)
    sponsor = Sponsor.query.filter_by(access_token=token).first() if token else None
    if sponsor is None:
        raise RegistrationError('Sponsor not found', SPONSOR_NOT_FOUND)
    return sponsor


def sponsor_portal(sponsor):
    """Sponsor details plus each credit with the redeeming team's name."""
    credits = SponsorCredit.query.filter_by(sponsor_id=sponsor.id).order_by(
        SponsorCredit.created_at.asc(), SponsorCredit.id.asc()
    ).all()
    team_ids = [c.redeemed_by_team_id for c in credits if c.redeemed_by_team_id]
    team_names = {}
    if team_ids:
        for team in Team.query.filter(Team.id.in_(team_ids)).all():
            team_names[team.id] = team.team_name or 'Unnamed Team'

    data = sponsor.to_dict()
    data['package'] = sponsor.package.to_dict() if sponsor.package else None
    data['credits'] = []
    for credit in credits:
        item = credit.to_dict()
        item['team_name'] = team_names.get(credit.redeemed_by_team_id)
        data['credits'].append(item)
    return data


def _sponsor_credit(sponsor, credit_id):
    credit = db.session.get(SponsorCredit, credit_id)
    if credit is None:
        raise RegistrationError('Credit not found', NOT_FOUND)
    if credit.sponsor_id != sponsor.id:
        # Do not reveal credits that belong to another sponsor.
        raise RegistrationError('Credit not found', NOT_FOUND)
    return credit


def update_portal_credit(sponsor, credit_id, data):
    """Record a captain email and optionally send that captain their code."""
    credit = _sponsor_credit(sponsor, credit_id)
    if 'captain_email' in data:
        credit_ledger.update_credit_captain(credit.id, data.get('captain_email'))
    invite_sent = False
    if data.get('send_invite'):
        invite_sent = send_captain_invite(sponsor, credit)
    elif data.get('email_sent'):
        credit_ledger.mark_invite_sent(credit.id)
    return credit, invite_sent


def send_captain_invite(sponsor, credit):
    if not credit.captain_email:
        raise RegistrationError('Captain email is required to send an invite', VALIDATION_ERROR)
    if credit.redeemed_by_team_id is not None:
        raise RegistrationError('This code has already been used', VALIDATION_ERROR)
    sent = notify(CAPTAIN_CODE, credit.captain_email, {
        'sponsor_name': sponsor.name,
        'code': credit.redemption_code,
        'redeem_url': redeem_url(credit.redemption_code),
    })
    if sent:
        credit_ledger.mark_invite_sent(credit.id)
    return sent


def _apply_sponsor_fields(sponsor, data):
    for field in ('name', 'contact_name', 'contact_email'):
        if field in data:
            value = _clean(data.get(field))
            if field == 'name' and not value:
                raise RegistrationError('Sponsor name is required', VALIDATION_ERROR)
            setattr(sponsor, field, value)
    if 'payment_status' in data:
        status = _clean(data.get('payment_status')).lower()
        if status not in PAYMENT_STATUSES:
            raise RegistrationError('Invalid payment status', VALIDATION_ERROR)
        sponsor.payment_status = status


def update_sponsor(sponsor_id, data):
    """Admin edit of sponsor fields; ``total_credits`` resizes the credit pool."""
    sponsor = get_sponsor(sponsor_id)
    issued = []
    try:
        _apply_sponsor_fields(sponsor, data)
        if 'total_credits' in data:
            issued = credit_ledger.resize_pool(sponsor.id, data.get('total_credits'), commit=False)
        commit_or_raise('update sponsor')
    except RegistrationError:
        db.session.rollback()
        raise
    return sponsor, issued


def delete_sponsor(sponsor_id):
    sponsor = get_sponsor(sponsor_id)
    if Team.query.filter_by(sponsor_id=sponsor.id).count():
        raise RegistrationError('Sponsor has registered teams and cannot be deleted', VALIDATION_ERROR)
    db.session.delete(sponsor)
    commit_or_raise('delete sponsor')
