import json
from backend.app import db
from backend.time_utils import utcnow_naive, isoformat_or_none


def _safe_json(raw_value, fallback=None):
    if fallback is None:
        fallback = {}
    if not raw_value:
        return fallback
    try:
        return json.loads(raw_value)
    except (TypeError, ValueError):
        return fallback


GHIN_NONE = 'NONE'
EVENT_TYPES = ('friday', 'sat_sun')
SESSION_PREFS = ('am', 'pm', 'none')
PLAYER_ROLES = ('player', 'seal_guest')
PAYMENT_METHODS = ('online', 'check', 'invoice', 'venmo', 'paypal')
PAYMENT_STATUSES = ('pending_online', 'pending_offline', 'paid')
SEAL_PLAY_OPTIONS = ('none', 'one', 'both')


class EventYear(db.Model):
    id = db.Column(db.Integer, primary_key=True)
    year = db.Column(db.Integer, unique=True, nullable=False)
    start_date = db.Column(db.Date, nullable=True)
    end_date = db.Column(db.Date, nullable=True)
    is_active = db.Column(db.Boolean, default=False, nullable=False)

    def to_dict(self):
        return {
            'id': self.id, 'year': self.year,
            'start_date': isoformat_or_none(self.start_date),
            'end_date': isoformat_or_none(self.end_date),
            'is_active': self.is_active,
        }


class SponsorshipPackage(db.Model):
    id = db.Column(db.Integer, primary_key=True)
    event_year_id = db.Column(db.Integer, db.ForeignKey('event_year.id'), nullable=False)
    name = db.Column(db.String(200), nullable=False)
    price = db.Column(db.Integer, nullable=False, default=0)
    included_entries = db.Column(db.Integer, nullable=False, default=0)
    dinner_tables = db.Column(db.Integer, nullable=False, default=0)
    seal_play = db.Column(db.String(10), nullable=False, default='none')  # none, one, both
    benefits_json = db.Column(db.Text, default='[]')
    display_order = db.Column(db.Integer, nullable=False, default=0)
    max_sponsors = db.Column(db.Integer, nullable=False, default=0)  # 0 = unlimited
    is_active = db.Column(db.Boolean, default=True, nullable=False)
    created_at = db.Column(db.DateTime, default=lambda: utcnow_naive())

    @property
    def benefits(self):
        value = _safe_json(self.benefits_json, fallback=[])
        return value if isinstance(value, list) else []

    @benefits.setter
    def benefits(self, value):
        self.benefits_json = json.dumps([str(item) for item in (value or [])])

    def to_dict(self):
        return {
            'id': self.id, 'event_year_id': self.event_year_id,
            'name': self.name, 'price': self.price,
            'included_entries': self.included_entries,
            'dinner_tables': self.dinner_tables, 'seal_play': self.seal_play,
            'benefits': self.benefits, 'display_order': self.display_order,
            'max_sponsors': self.max_sponsors, 'is_active': self.is_active,
            'created_at': isoformat_or_none(self.created_at),
        }


class Sponsor(db.Model):
    id = db.Column(db.Integer, primary_key=True)
    event_year_id = db.Column(db.Integer, db.ForeignKey('event_year.id'), nullable=False)
    name = db.Column(db.String(200), nullable=False)
    contact_name = db.Column(db.String(200), default='')
    contact_email = db.Column(db.String(200), default='')
    package_id = db.Column(db.Integer, db.ForeignKey('sponsorship_package.id'), nullable=True)
    payment_method = db.Column(db.String(20), default='check')
    payment_status = db.Column(db.String(20), default='pending_offline')
    total_credits = db.Column(db.Integer, nullable=False, default=0)
    # Capability token for the sponsor portal; not a user id.
    access_token = db.Column(db.String(64), unique=True, nullable=False, index=True)
    created_at = db.Column(db.DateTime, default=lambda: utcnow_naive())

    package = db.relationship('SponsorshipPackage', backref='sponsors')
    credits = db.relationship(
        'SponsorCredit', backref='sponsor', lazy='select',
        cascade='all, delete-orphan', order_by='SponsorCredit.id',
    )

    @property
    def credits_used(self):
        return sum(1 for credit in self.credits if credit.redeemed_by_team_id is not None)

    def to_dict(self, include_token=False):
        data = {
            'id': self.id, 'event_year_id': self.event_year_id,
            'name': self.name, 'contact_name': self.contact_name,
            'contact_email': self.contact_email, 'package_id': self.package_id,
            'payment_method': self.payment_method,
            'payment_status': self.payment_status,
            'total_credits': self.total_credits,
            'credits_used': self.credits_used,
            'created_at': isoformat_or_none(self.created_at),
        }
        if include_token:
            data['access_token'] = self.access_token
        return data


class SponsorCredit(db.Model):
    """One team-registration slot, claimed with its redemption code."""
    id = db.Column(db.Integer, primary_key=True)
    sponsor_id = db.Column(db.Integer, db.ForeignKey('sponsor.id'), nullable=False, index=True)
    redemption_code = db.Column(db.String(32), unique=True, nullable=False)
    # Plain column: team.credit_id already points the other way.
    redeemed_by_team_id = db.Column(db.Integer, nullable=True, index=True)
    redeemed_at = db.Column(db.DateTime, nullable=True)
    captain_email = db.Column(db.String(200), nullable=True)
    email_sent_at = db.Column(db.DateTime, nullable=True)
    created_at = db.Column(db.DateTime, default=lambda: utcnow_naive())

    @property
    def is_available(self):
        return self.redeemed_by_team_id is None

    def to_dict(self):
        return {
            'id': self.id, 'sponsor_id': self.sponsor_id,
            'redemption_code': self.redemption_code,
            'redeemed_by_team_id': self.redeemed_by_team_id,
            'redeemed_at': isoformat_or_none(self.redeemed_at),
            'captain_email': self.captain_email,
            'email_sent_at': isoformat_or_none(self.email_sent_at),
            'created_at': isoformat_or_none(self.created_at),
        }


class Player(db.Model):
    id = db.Column(db.Integer, primary_key=True)
    first_name = db.Column(db.String(100), nullable=False)
    last_name = db.Column(db.String(100), nullable=False, index=True)
    suffix = db.Column(db.String(20), nullable=True)
    email = db.Column(db.String(200), nullable=True)
    phone = db.Column(db.String(40), nullable=True)
    ghin = db.Column(db.String(40), nullable=True, default=GHIN_NONE)
    handicap_raw = db.Column(db.Float, nullable=True)
    plays_yellow_tees = db.Column(db.Boolean, default=False, nullable=False)
    home_course = db.Column(db.String(200), nullable=True)
    last_handicap_update_at = db.Column(db.DateTime, nullable=True)
    created_at = db.Column(db.DateTime, default=lambda: utcnow_naive())

    team_links = db.relationship(
        'TeamPlayer', backref='player', cascade='all, delete-orphan',
    )

    @property
    def has_ghin(self):
        return bool(self.ghin) and self.ghin != GHIN_NONE

    def to_dict(self):
        return {
            'id': self.id, 'first_name': self.first_name,
            'last_name': self.last_name, 'suffix': self.suffix,
            'email': self.email, 'phone': self.phone, 'ghin': self.ghin,
            'handicap_raw': self.handicap_raw,
            'plays_yellow_tees': self.plays_yellow_tees,
            'home_course': self.home_course,
            'last_handicap_update_at': isoformat_or_none(self.last_handicap_update_at),
        }


class Team(db.Model):
    id = db.Column(db.Integer, primary_key=True)
    event_year_id = db.Column(db.Integer, db.ForeignKey('event_year.id'), nullable=False)
    event_type = db.Column(db.String(10), nullable=False)  # friday, sat_sun
    team_name = db.Column(db.String(200), nullable=True)
    sponsor_id = db.Column(db.Integer, db.ForeignKey('sponsor.id'), nullable=True)
    credit_id = db.Column(db.Integer, db.ForeignKey('sponsor_credit.id'), nullable=True)
    session_pref = db.Column(db.String(10), default='none')  # am, pm, none
    notes = db.Column(db.Text, default='')
    withdrawn_at = db.Column(db.DateTime, nullable=True)
    created_at = db.Column(db.DateTime, default=lambda: utcnow_naive())

    sponsor = db.relationship('Sponsor', backref='teams')
    credit = db.relationship('SponsorCredit', foreign_keys=[credit_id])
    players = db.relationship(
        'TeamPlayer', backref='team', cascade='all, delete-orphan',
        order_by='TeamPlayer.id',
    )

    @property
    def is_active(self):
        return self.withdrawn_at is None

    def to_dict(self):
        return {
            'id': self.id, 'event_year_id': self.event_year_id,
            'event_type': self.event_type, 'team_name': self.team_name,
            'sponsor_id': self.sponsor_id, 'credit_id': self.credit_id,
            'session_pref': self.session_pref, 'notes': self.notes,
            'withdrawn_at': isoformat_or_none(self.withdrawn_at),
            'created_at': isoformat_or_none(self.created_at),
            'sponsor': {'id': self.sponsor.id, 'name': self.sponsor.name} if self.sponsor else None,
            'credit': {
                'id': self.credit.id, 'redemption_code': self.credit.redemption_code,
            } if self.credit else None,
        }


class TeamPlayer(db.Model):
    id = db.Column(db.Integer, primary_key=True)
    team_id = db.Column(db.Integer, db.ForeignKey('team.id'), nullable=False, index=True)
    player_id = db.Column(db.Integer, db.ForeignKey('player.id'), nullable=False, index=True)
    role = db.Column(db.String(20), default='player', nullable=False)  # player, seal_guest

    __table_args__ = (
        db.UniqueConstraint('team_id', 'player_id', name='uq_team_player'),
    )

    def to_dict(self):
        return {'team_id': self.team_id, 'player_id': self.player_id, 'role': self.role}
