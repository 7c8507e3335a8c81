"""Tests for open and sponsor-code team registration."""
import pytest

from backend.app import db
from backend.errors import RegistrationError
from backend.models import Player, SponsorCredit, Team, TeamPlayer
from backend.services import credit_ledger, registration


def _first_code(sponsor):
    return credit_ledger.available_credits(sponsor.id)[0].redemption_code


def test_sat_sun_price_applies_member_discount(app):
    assert registration.sat_sun_price(0) == 500
    assert registration.sat_sun_price(2) == 400
    assert registration.sat_sun_price('bad') == 500


def test_open_registration_notes():
    notes = registration.build_open_registration_notes({
        'entry_fee': 450, 'payment_method': 'check', 'member_count': 1,
    })
    assert notes == 'Open registration. Entry fee: $450. Payment: check. Sun Willows members: 1'
    assert registration.build_open_registration_notes({}) == 'Open registration'


def test_open_registration_creates_team_and_players(client, event_year, registration_payload):
    res = client.post('/api/teams', json=registration_payload(payment_method='check', entry_fee=500))
    assert res.status_code == 201
    team = db.session.get(Team, res.get_json()['team_id'])
    assert team.sponsor_id is None
    assert team.credit_id is None
    assert team.notes.startswith('Open registration')
    assert [link.player.last_name for link in team.players] == ['Stone', 'Rivera']
    assert Player.query.filter_by(last_name='Rivera').first().ghin == 'NONE'


def test_open_registration_rejects_friday(client, event_year, registration_payload):
    res = client.post('/api/teams', json=registration_payload(event_type='friday'))
    assert res.status_code == 400
    assert res.get_json()['code'] == 'FRIDAY_REQUIRES_SPONSOR'
    assert Team.query.count() == 0


def test_open_registration_requires_fields(client, event_year, registration_payload):
    res = client.post('/api/teams', json=registration_payload(players=[]))
    assert res.status_code == 400
    assert res.get_json()['code'] == 'VALIDATION_ERROR'

    res = client.post('/api/teams', json=registration_payload(captain_email=''))
    assert res.get_json()['code'] == 'VALIDATION_ERROR'


def test_open_registration_without_event_year(client, registration_payload):
    res = client.post('/api/teams', json=registration_payload())
    assert res.status_code == 500
    assert res.get_json()['code'] == 'NO_ACTIVE_EVENT_YEAR'


def test_player_upsert_skips_blank_names_and_backfills_ghin(app, event_year):
    existing = Player(first_name='Alex', last_name='Stone', ghin='NONE')
    db.session.add(existing)
    db.session.commit()

    assert registration.create_or_get_player({'first_name': '', 'last_name': 'X'}) is None
    player_id = registration.create_or_get_player({
        'first_name': 'Alex', 'last_name': 'Stone',
        'existing_player_id': existing.id, 'ghin': '7654321',
    })
    assert player_id == existing.id
    assert db.session.get(Player, existing.id).ghin == '7654321'

    registration.create_or_get_player({
        'first_name': 'Alex', 'last_name': 'Stone',
        'existing_player_id': existing.id, 'ghin': '1111111',
    })
    assert db.session.get(Player, existing.id).ghin == '7654321'


def test_player_upsert_rejects_unknown_existing_id(app):
    with pytest.raises(RegistrationError) as exc:
        registration.create_or_get_player({
            'first_name': 'A', 'last_name': 'B', 'existing_player_id': 999,
        })
    assert exc.value.code == 'VALIDATION_ERROR'


def test_code_registration_redeems_credit(client, sponsor, registration_payload):
    code = _first_code(sponsor)
    res = client.post(f'/api/redeem/{code.lower()}', json=registration_payload(event_type='friday'))
    assert res.status_code == 201
    body = res.get_json()
    assert body['sponsor_name'] == 'Acme Builders'

    team = db.session.get(Team, body['team_id'])
    credit = SponsorCredit.query.filter_by(redemption_code=code).first()
    assert team.sponsor_id == sponsor.id
    assert team.credit_id == credit.id
    assert credit.redeemed_by_team_id == team.id
    assert credit.captain_email == 'captain@example.com'


def test_code_registration_rejects_reused_code(client, sponsor, registration_payload):
    code = _first_code(sponsor)
    assert client.post(f'/api/redeem/{code}', json=registration_payload()).status_code == 201

    res = client.post(f'/api/redeem/{code}', json=registration_payload(team_name='Late'))
    assert res.status_code == 409
    assert res.get_json()['code'] == 'CODE_ALREADY_USED'
    assert Team.query.count() == 1


def test_code_registration_rejects_unknown_code(client, sponsor, registration_payload):
    res = client.post('/api/redeem/FROG-2026-ZZZZ', json=registration_payload())
    assert res.status_code == 404
    assert res.get_json()['code'] == 'INVALID_CODE'


def test_lost_race_rolls_back_team_and_players(app, sponsor, event_year, registration_payload, monkeypatch):
    credit = credit_ledger.available_credits(sponsor.id)[0]
    rival = Team(event_year_id=event_year.id, event_type='sat_sun', team_name='Rival')
    db.session.add(rival)
    db.session.commit()
    rival_id = rival.id

    # The code passes validation, then another captain claims it first.
    validate = credit_ledger.validate_code

    def validate_then_lose(code):
        found = validate(code)
        credit_ledger.redeem_credit(found.id, rival_id, 'rival@example.com')
        return found

    monkeypatch.setattr(credit_ledger, 'validate_code', validate_then_lose)
    with pytest.raises(RegistrationError) as exc:
        registration.register_with_code(registration_payload(), credit.redemption_code)
    assert exc.value.code == 'CODE_ALREADY_USED'
    assert Team.query.count() == 1
    assert Player.query.count() == 0
    assert TeamPlayer.query.count() == 0


def test_confirmation_email_failure_does_not_fail_registration(
    client, sponsor, registration_payload, monkeypatch,
):
    from backend.services import email_service

    def boom(*args, **kwargs):
        raise RuntimeError('provider down')

    monkeypatch.setattr(email_service, 'send_email', boom)
    res = client.post(f'/api/redeem/{_first_code(sponsor)}', json=registration_payload())
    assert res.status_code == 201


def test_validate_endpoint(client, sponsor):
    code = _first_code(sponsor)
    res = client.get(f'/api/redeem/{code}/validate')
    assert res.status_code == 200
    assert res.get_json()['sponsor_name'] == 'Acme Builders'

    res = client.get('/api/redeem/FROG-2026-ZZZZ/validate')
    assert res.status_code == 404


def test_registration_invalidates_player_cache(client, event_year, registration_payload):
    assert client.get('/api/players/search?q=sto').get_json()['players'] == []
    client.post('/api/teams', json=registration_payload())
    names = [p['last_name'] for p in client.get('/api/players/search?q=sto').get_json()['players']]
    assert names == ['Stone']
