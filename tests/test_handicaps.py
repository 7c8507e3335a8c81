"""Tests for handicap, GHIN status and flight calculations."""
from datetime import datetime, timedelta

from backend.services.handicaps import (
    assign_flights, combined_handicap, format_handicap, ghin_status,
    playing_handicap, team_display_name,
)

NOW = datetime(2026, 9, 1, 12, 0, 0)


def _team(team_id, combined, event_type='sat_sun', withdrawn_at=None):
    return {
        'id': team_id, 'event_type': event_type,
        'withdrawn_at': withdrawn_at, 'combined_handicap': combined,
    }


def test_playing_handicap_adjusts_for_yellow_tees():
    assert playing_handicap({'handicap_raw': 12.4, 'plays_yellow_tees': False}) == 12.4
    assert playing_handicap({'handicap_raw': 12.0, 'plays_yellow_tees': True}) == 10.0
    assert playing_handicap({'handicap_raw': 1.0, 'plays_yellow_tees': True}) == -1.0
    assert playing_handicap({'handicap_raw': None, 'plays_yellow_tees': True}) is None


def test_ghin_status_missing_without_handicap_or_number():
    assert ghin_status({'handicap_raw': None, 'ghin': '123'}, now=NOW) == 'missing'
    assert ghin_status({'handicap_raw': 8.0, 'ghin': 'NONE'}, now=NOW) == 'missing'
    assert ghin_status({'handicap_raw': 8.0, 'ghin': ''}, now=NOW) == 'missing'


def test_ghin_status_fresh_boundary_uses_whole_days():
    player = {'handicap_raw': 8.0, 'ghin': '123'}
    player['last_handicap_update_at'] = NOW - timedelta(days=4, hours=23)
    assert ghin_status(player, now=NOW) == 'fresh'
    player['last_handicap_update_at'] = NOW - timedelta(days=5)
    assert ghin_status(player, now=NOW) == 'stale'


def test_ghin_status_without_timestamp_is_stale():
    assert ghin_status({'handicap_raw': 8.0, 'ghin': '123'}, now=NOW) == 'stale'


def test_ghin_status_accepts_iso_strings():
    player = {
        'handicap_raw': 8.0, 'ghin': '123',
        'last_handicap_update_at': (NOW - timedelta(days=1)).isoformat(),
    }
    assert ghin_status(player, now=NOW) == 'fresh'


def test_ghin_status_accepts_offset_timestamps():
    player = {
        'handicap_raw': 8.0, 'ghin': '123',
        'last_handicap_update_at': '2026-08-31T12:00:00+00:00',
    }
    assert ghin_status(player, now=NOW) == 'fresh'

    player['last_handicap_update_at'] = '2026-08-27T06:00:00-07:00'
    assert ghin_status(player, now=NOW) == 'fresh'
    player['last_handicap_update_at'] = '2026-08-27T03:00:00-08:00'
    assert ghin_status(player, now=NOW) == 'stale'


def test_combined_handicap_ignores_missing_values():
    assert combined_handicap([4, None, 6]) == 10
    assert combined_handicap([None, None]) is None
    assert combined_handicap([]) is None
    assert combined_handicap([0]) == 0


def test_flights_split_at_inclusive_median():
    flights = assign_flights([_team(1, 4), _team(2, 8), _team(3, 8), _team(4, 12)])
    assert flights == {1: 1, 2: 1, 3: 1, 4: 2}


def test_flights_split_even_without_ties():
    flights = assign_flights([_team(1, 20), _team(2, 5), _team(3, 10), _team(4, 15)])
    assert flights == {1: 2, 2: 1, 3: 1, 4: 2}


def test_single_team_uses_zero_cutoff():
    assert assign_flights([_team(1, 5)]) == {1: 2}
    assert assign_flights([_team(1, -1)]) == {1: 1}


def test_flights_skip_ineligible_teams():
    teams = [
        _team(1, 4),
        _team(2, 6),
        _team(3, 2, event_type='friday'),
        _team(4, 3, withdrawn_at=NOW),
        _team(5, None),
    ]
    assert assign_flights(teams) == {1: 1, 2: 2}
    assert assign_flights([]) == {}


def test_format_handicap():
    assert format_handicap(None) == '-'
    assert format_handicap(0) == '+0'
    assert format_handicap(7.5) == '+7.5'
    assert format_handicap(-2) == '-2'


def test_team_display_name_fallbacks():
    roster = [{'last_name': 'Stone'}, {'last_name': 'Rivera'}]
    assert team_display_name('Birdies', 'Acme', roster) == 'Birdies'
    assert team_display_name(None, 'Acme', roster) == 'Acme'
    assert team_display_name(None, None, roster) == 'Stone / Rivera'
    assert team_display_name(None, None, []) == 'Unnamed Team'
