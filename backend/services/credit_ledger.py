"""Sponsor credit pool bookkeeping.

Each sponsor owns a pool of SponsorCredit rows, one per team entry, each with
a unique redemption code. A credit is available while ``redeemed_by_team_id``
is NULL and redeemed once a team claims it.

Redemption and release are single conditional UPDATE statements, so two
captains racing on the same code cannot both win: the loser sees zero
affected rows and gets CODE_ALREADY_USED. The team side of the link
(``team.sponsor_id`` / ``team.credit_id``) is written in the same call.
"""
import logging

from flask import current_app
from sqlalchemy import select, update

from backend.app import db
from backend.errors import (
    RegistrationError,
    CANNOT_REDUCE_BELOW_USED,
    CODE_ALREADY_USED,
    INVALID_CODE,
    NOT_FOUND,
    SPONSOR_NOT_FOUND,
    VALIDATION_ERROR,
)
from backend.models import Sponsor, SponsorCredit, Team
from backend.services.codes import generate_redemption_codes
from backend.services.transactions import commit_or_raise, flush_or_raise
from backend.time_utils import utcnow_naive

logger = logging.getLogger(__name__)


def normalize_code(raw_code):
    return str(raw_code or '').strip().upper()


def credits_used(sponsor_id):
    return SponsorCredit.query.filter(
        SponsorCredit.sponsor_id == sponsor_id,
        SponsorCredit.redeemed_by_team_id.isnot(None),
    ).count()


def available_credits(sponsor_id):
    return SponsorCredit.query.filter(
        SponsorCredit.sponsor_id == sponsor_id,
        SponsorCredit.redeemed_by_team_id.is_(None),
    ).order_by(SponsorCredit.id.asc()).all()


def _unique_codes(count):
    prefix = current_app.config.get('TOURNAMENT_CODE_PREFIX', 'FROG')
    codes = []
    while len(codes) < count:
        batch = [
            code for code in generate_redemption_codes(count - len(codes), prefix)
            if code not in codes
        ]
        taken = {
            row[0] for row in db.session.query(SponsorCredit.redemption_code).filter(
                SponsorCredit.redemption_code.in_(batch)
            )
        }
        codes.extend(code for code in batch if code not in taken)
    return codes


def issue_credits(sponsor_id, count, commit=True):
    """Create ``count`` available credits for a sponsor.

    Does not touch ``sponsor.total_credits``.
    """
    if count <= 0:
        return []
    credits = [
        SponsorCredit(sponsor_id=sponsor_id, redemption_code=code, captain_email=None)
        for code in _unique_codes(count)
    ]
    db.session.add_all(credits)
    if commit:
        commit_or_raise('create redemption codes')
    else:
        flush_or_raise('create redemption codes')
    logger.info('Issued %d credits for sponsor %s', len(credits), sponsor_id)
    return credits


def validate_code(raw_code):
    """Return the available credit for a code.

    This is only a read; ``redeem_credit`` re-checks availability atomically.
    """
    code = normalize_code(raw_code)
    credit = SponsorCredit.query.filter_by(redemption_code=code).first() if code else None
    if credit is None:
        raise RegistrationError('Invalid redemption code', INVALID_CODE)
    if credit.redeemed_by_team_id is not None:
        raise RegistrationError('This code has already been used', CODE_ALREADY_USED)
    return credit


def _get_team(team_id):
    team = db.session.get(Team, team_id)
    if team is None:
        raise RegistrationError('Team not found', NOT_FOUND)
    return team


def redeem_credit(credit_id, team_id, captain_email, commit=True):
    """Claim a credit for a team and link the team back to it.

    Calling again with the same team is a no-op; any other team gets
    CODE_ALREADY_USED. An unknown team is rejected before anything is written.
    """
    team = _get_team(team_id)
    result = db.session.execute(
        update(SponsorCredit)
        .where(
            SponsorCredit.id == credit_id,
            SponsorCredit.redeemed_by_team_id.is_(None),
        )
        .values(
            redeemed_by_team_id=team.id,
            redeemed_at=utcnow_naive(),
            captain_email=captain_email,
        )
        .execution_options(synchronize_session=False)
    )
    credit = db.session.get(SponsorCredit, credit_id, populate_existing=True)
    if credit is None:
        raise RegistrationError('Invalid redemption code', INVALID_CODE)
    if result.rowcount == 0 and credit.redeemed_by_team_id != team.id:
        db.session.rollback()
        raise RegistrationError('This code has already been used', CODE_ALREADY_USED)

    team.sponsor_id = credit.sponsor_id
    team.credit_id = credit.id
    if commit:
        commit_or_raise('redeem credit')
    if result.rowcount:
        logger.info('Credit %s redeemed by team %s', credit_id, team.id)
    return credit


def restore_credit(credit_id, team_id=None, commit=True):
    """Make a redeemed credit available again.

    With ``team_id`` the release only happens while that team still holds the
    credit. Captain email and invite history are kept. Returns True when a
    row was released.
    """
    statement = update(SponsorCredit).where(SponsorCredit.id == credit_id)
    if team_id is not None:
        statement = statement.where(SponsorCredit.redeemed_by_team_id == team_id)
    result = db.session.execute(
        statement.values(redeemed_by_team_id=None, redeemed_at=None)
        .execution_options(synchronize_session=False)
    )
    credit = db.session.get(SponsorCredit, credit_id, populate_existing=True)
    if credit is None:
        raise RegistrationError('Credit not found', NOT_FOUND)
    if commit:
        commit_or_raise('restore credit')
    return result.rowcount > 0


def reclaim_credit(team, commit=True):
    """Re-attach a reinstated team to the credit it originally redeemed."""
    if team.credit_id is None:
        return None
    result = db.session.execute(
        update(SponsorCredit)
        .where(
            SponsorCredit.id == team.credit_id,
            (SponsorCredit.redeemed_by_team_id.is_(None))
            | (SponsorCredit.redeemed_by_team_id == team.id),
        )
        .values(redeemed_by_team_id=team.id, redeemed_at=utcnow_naive())
        .execution_options(synchronize_session=False)
    )
    if result.rowcount == 0:
        db.session.rollback()
        raise RegistrationError(
            'Sponsor credit has been used by another team. Cannot restore.',
            CODE_ALREADY_USED,
        )
    credit = db.session.get(SponsorCredit, team.credit_id, populate_existing=True)
    if commit:
        commit_or_raise('reclaim credit')
    return credit


def resize_pool(sponsor_id, new_total, commit=True):
    """Grow or shrink a sponsor's pool to ``new_total`` credits.

    Shrinking deletes the newest unused credits and never touches a redeemed
    one, or one still referenced by a withdrawn team. Returns the codes
    issued when growing.
    """
    sponsor = db.session.get(Sponsor, sponsor_id)
    if sponsor is None:
        raise RegistrationError('Sponsor not found', SPONSOR_NOT_FOUND)
    try:
        new_total = int(new_total)
    except (TypeError, ValueError):
        raise RegistrationError('Total credits must be a number', VALIDATION_ERROR)
    if new_total < 0:
        raise RegistrationError('Total credits cannot be negative', VALIDATION_ERROR)

    used = credits_used(sponsor_id)
    if new_total < used:
        raise RegistrationError(
            f'Cannot reduce credits below {used} (already used)',
            CANNOT_REDUCE_BELOW_USED,
        )

    current = SponsorCredit.query.filter_by(sponsor_id=sponsor_id).count()
    issued = []
    if new_total < current:
        to_remove = current - new_total
        held_by_teams = select(Team.credit_id).where(Team.credit_id.isnot(None))
        candidates = [
            row[0] for row in db.session.query(SponsorCredit.id).filter(
                SponsorCredit.sponsor_id == sponsor_id,
                SponsorCredit.redeemed_by_team_id.is_(None),
                SponsorCredit.id.notin_(held_by_teams),
            ).order_by(SponsorCredit.created_at.desc(), SponsorCredit.id.desc()).limit(to_remove)
        ]
        deleted = 0
        if len(candidates) == to_remove:
            deleted = SponsorCredit.query.filter(
                SponsorCredit.id.in_(candidates),
                SponsorCredit.redeemed_by_team_id.is_(None),
            ).delete(synchronize_session=False)
        if deleted != to_remove:
            db.session.rollback()
            raise RegistrationError(
                'Not enough unused credits to remove', CANNOT_REDUCE_BELOW_USED,
            )
    elif new_total > current:
        issued = issue_credits(sponsor_id, new_total - current, commit=False)

    sponsor.total_credits = new_total
    db.session.expire(sponsor, ['credits'])
    if commit:
        commit_or_raise('update sponsor credits')
    logger.info(
        'Resized credit pool for sponsor %s from %d to %d', sponsor_id, current, new_total,
    )
    return [credit.redemption_code for credit in issued]


def mark_invite_sent(credit_id, commit=True):
    credit = db.session.get(SponsorCredit, credit_id)
    if credit is None:
        raise RegistrationError('Credit not found', NOT_FOUND)
    credit.email_sent_at = utcnow_naive()
    if commit:
        commit_or_raise('mark invite sent')
    return credit


def update_credit_captain(credit_id, captain_email, commit=True):
    credit = db.session.get(SponsorCredit, credit_id)
    if credit is None:
        raise RegistrationError('Credit not found', NOT_FOUND)
    credit.captain_email = (captain_email or '').strip() or None
    if commit:
        commit_or_raise('update captain email')
    return credit
