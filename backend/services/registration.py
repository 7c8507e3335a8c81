"""Team registration: open (self-pay) entries and sponsor-code entries.

Both flows create the team, upsert its players and, for code entries, redeem
the sponsor credit inside one transaction. Anything that fails before the
commit rolls the whole registration back. The confirmation email is sent
only after the commit and its outcome never affects the result.
"""
import logging

from flask import current_app

from backend.app import db
from backend.errors import (
    RegistrationError,
    FRIDAY_REQUIRES_SPONSOR,
    NOT_FOUND,
    SPONSOR_NOT_FOUND,
    VALIDATION_ERROR,
)
from backend.models import (
    EVENT_TYPES, GHIN_NONE, PLAYER_ROLES, SESSION_PREFS,
    Player, Sponsor, Team, TeamPlayer,
)
from backend.services import credit_ledger
from backend.services.email_service import TEAM_CONFIRMATION, notify
from backend.services.event_years import active_event_year_or_raise
from backend.services.player_cache import get_player_cache
from backend.services.transactions import commit_or_raise, flush_or_raise
from backend.time_utils import utcnow_naive

logger = logging.getLogger(__name__)


def _clean(value):
    return str(value or '').strip()


def sat_sun_price(member_count=0):
    cfg = current_app.config
    try:
        members = max(0, int(member_count or 0))
    except (TypeError, ValueError):
        members = 0
    return cfg.get('SAT_SUN_BASE_PRICE', 500) - members * cfg.get('MEMBER_DISCOUNT', 50)


def build_open_registration_notes(data):
    parts = ['Open registration']
    if data.get('entry_fee') is not None:
        parts.append(f"Entry fee: ${data.get('entry_fee')}")
    if data.get('payment_method'):
        parts.append(f"Payment: {data.get('payment_method')}")
    if data.get('member_count'):
        parts.append(f"Sun Willows members: {data.get('member_count')}")
    return '. '.join(parts)


def player_names_for_email(players):
    names = []
    for entry in players or []:
        if not isinstance(entry, dict):
            continue
        first, last = _clean(entry.get('first_name')), _clean(entry.get('last_name'))
        if first and last:
            names.append(f'{first} {last}')
    return names


def _validate_registration(data):
    if not isinstance(data, dict):
        raise RegistrationError('Invalid registration payload', VALIDATION_ERROR)
    event_type = _clean(data.get('event_type')).lower()
    captain_email = _clean(data.get('captain_email'))
    players = data.get('players')
    if not event_type or not captain_email or not isinstance(players, list) or not players:
        raise RegistrationError('Missing required fields', VALIDATION_ERROR)
    if event_type not in EVENT_TYPES:
        raise RegistrationError('Invalid event type', VALIDATION_ERROR)

    session_pref = _clean(data.get('session_pref') or 'none').lower()
    if session_pref not in SESSION_PREFS:
        raise RegistrationError('Invalid session preference', VALIDATION_ERROR)
    return event_type, captain_email, session_pref, players


def create_or_get_player(entry):
    """Return the player id for a roster entry, creating the player if needed.

    Entries without a first and last name are skipped (None). For an existing
    player a GHIN number is only filled in when none is on file.
    """
    if not isinstance(entry, dict):
        return None
    first_name = _clean(entry.get('first_name'))
    last_name = _clean(entry.get('last_name'))
    if not first_name or not last_name:
        return None

    ghin = _clean(entry.get('ghin'))
    existing_id = entry.get('existing_player_id')
    if existing_id:
        try:
            player = db.session.get(Player, int(existing_id))
        except (TypeError, ValueError):
            player = None
        if player is None:
            raise RegistrationError('Selected player not found', VALIDATION_ERROR)
        if ghin and ghin != GHIN_NONE and not player.has_ghin:
            player.ghin = ghin
        return player.id

    player = Player(
        first_name=first_name,
        last_name=last_name,
        suffix=_clean(entry.get('suffix')) or None,
        email=_clean(entry.get('email')) or None,
        phone=_clean(entry.get('phone')) or None,
        ghin=ghin or GHIN_NONE,
    )
    db.session.add(player)
    flush_or_raise('create player')
    return player.id


def _link_players(team, entries):
    linked = []
    for entry in entries:
        player_id = create_or_get_player(entry)
        if player_id is None or player_id in linked:
            continue
        role = _clean(entry.get('role') or 'player')
        db.session.add(TeamPlayer(
            team_id=team.id,
            player_id=player_id,
            role=role if role in PLAYER_ROLES else 'player',
        ))
        linked.append(player_id)
    return linked


def _new_team(event_year_id, event_type, session_pref, data, notes=''):
    team = Team(
        event_year_id=event_year_id,
        event_type=event_type,
        team_name=_clean(data.get('team_name')) or None,
        sponsor_id=None,
        credit_id=None,
        session_pref=session_pref,
        notes=notes,
    )
    db.session.add(team)
    flush_or_raise('create team')
    return team


def register_open_team(data):
    """Register a self-pay Sat/Sun team. Friday entries need a sponsor code."""
    event_type, _captain_email, session_pref, players = _validate_registration(data)
    if event_type == 'friday':
        raise RegistrationError(
            'Friday entries require a sponsor code. Open registration is only '
            'available for the Saturday/Sunday event.',
            FRIDAY_REQUIRES_SPONSOR,
        )

    event_year = active_event_year_or_raise()
    try:
        team = _new_team(
            event_year.id, event_type, session_pref, data,
            notes=build_open_registration_notes(data),
        )
        _link_players(team, players)
        commit_or_raise('register team')
    except RegistrationError:
        db.session.rollback()
        raise

    get_player_cache(current_app).invalidate()
    logger.info('Open registration created team %s', team.id)
    return {'team_id': team.id}


def register_with_code(data, code):
    """Register a sponsored team by redeeming one of the sponsor's credits."""
    event_type, captain_email, session_pref, players = _validate_registration(data)
    credit = credit_ledger.validate_code(code)
    sponsor = db.session.get(Sponsor, credit.sponsor_id)
    if sponsor is None:
        raise RegistrationError('Sponsor not found', SPONSOR_NOT_FOUND)

    try:
        team = _new_team(sponsor.event_year_id, event_type, session_pref, data)
        _link_players(team, players)
        credit_ledger.redeem_credit(credit.id, team.id, captain_email, commit=False)
        commit_or_raise('register team')
    except RegistrationError:
        db.session.rollback()
        raise

    get_player_cache(current_app).invalidate()
    logger.info('Team %s registered with sponsor credit %s', team.id, credit.id)

    names = player_names_for_email(players)
    notify(TEAM_CONFIRMATION, captain_email, {
        'team_name': team.team_name,
        'captain_name': _clean(data.get('captain_name')) or (names[0] if names else ''),
        'event_type': event_type,
        'sponsor_name': sponsor.name,
        'players': names,
    })
    return {'team_id': team.id, 'sponsor_name': sponsor.name}


def _get_team(team_id):
    team = db.session.get(Team, team_id)
    if team is None:
        raise RegistrationError('Team not found', NOT_FOUND)
    return team


def replace_roster(team, roster):
    """Swap a team's player links wholesale for ``[{player_id, role}]``."""
    TeamPlayer.query.filter_by(team_id=team.id).delete()
    db.session.expire(team, ['players'])
    seen = set()
    for item in roster or []:
        try:
            player_id = int(item.get('player_id'))
        except (AttributeError, TypeError, ValueError):
            raise RegistrationError('Invalid player id', VALIDATION_ERROR)
        if player_id in seen:
            continue
        if db.session.get(Player, player_id) is None:
            raise RegistrationError(f'Player {player_id} not found', VALIDATION_ERROR)
        role = _clean(item.get('role') or 'player')
        db.session.add(TeamPlayer(
            team_id=team.id, player_id=player_id,
            role=role if role in PLAYER_ROLES else 'player',
        ))
        seen.add(player_id)


def update_team(team_id, data):
    team = _get_team(team_id)
    try:
        if 'team_name' in data:
            team.team_name = _clean(data.get('team_name')) or None
        if 'session_pref' in data:
            session_pref = _clean(data.get('session_pref')).lower()
            if session_pref not in SESSION_PREFS:
                raise RegistrationError('Invalid session preference', VALIDATION_ERROR)
            team.session_pref = session_pref
        if 'notes' in data:
            team.notes = str(data.get('notes') or '')
        if 'players' in data:
            if not isinstance(data.get('players'), list):
                raise RegistrationError('Players must be a list', VALIDATION_ERROR)
            replace_roster(team, data['players'])
        commit_or_raise('update team')
    except RegistrationError:
        db.session.rollback()
        raise
    return team


def withdraw_team(team_id):
    """Soft-delete a team and hand its sponsor credit back to the pool.

    ``team.credit_id`` is kept so a reinstated team can reclaim the same
    credit if nobody else has taken it.
    """
    team = _get_team(team_id)
    restored = False
    if team.withdrawn_at is None:
        team.withdrawn_at = utcnow_naive()
        if team.credit_id is not None:
            restored = credit_ledger.restore_credit(team.credit_id, team_id=team.id, commit=False)
        commit_or_raise('withdraw team')
        logger.info('Team %s withdrawn (credit restored: %s)', team.id, restored)
    return team, restored


def reinstate_team(team_id):
    team = _get_team(team_id)
    if team.withdrawn_at is None:
        return team
    credit_ledger.reclaim_credit(team, commit=False)
    team.withdrawn_at = None
    commit_or_raise('restore team')
    return team


def delete_team(team_id):
    team = _get_team(team_id)
    if team.credit_id is not None:
        credit_ledger.restore_credit(team.credit_id, team_id=team.id, commit=False)
    db.session.delete(team)
    commit_or_raise('delete team')
    logger.info('Team %s permanently deleted', team_id)
