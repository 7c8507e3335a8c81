"""Tests for player admin routes and the autocomplete directory cache."""
from backend.app import db
from backend.models import Player, TeamPlayer, Team
from backend.services.player_cache import PlayerDirectoryCache


class FakeClock:
    def __init__(self):
        self.now = 0.0

    def __call__(self):
        return self.now


def _add_player(first, last, **fields):
    player = Player(first_name=first, last_name=last, **fields)
    db.session.add(player)
    db.session.commit()
    return player


def test_cache_serves_snapshot_until_ttl(app):
    clock = FakeClock()
    cache = PlayerDirectoryCache(ttl_seconds=60, clock=clock)
    _add_player('Alex', 'Stone')
    assert [p['last_name'] for p in cache.players()] == ['Stone']

    _add_player('Jamie', 'Stoner')
    assert len(cache.players()) == 1

    clock.now = 61
    assert [p['last_name'] for p in cache.players()] == ['Stone', 'Stoner']


def test_cache_invalidate_forces_reload(app):
    cache = PlayerDirectoryCache(ttl_seconds=3600)
    assert cache.players() == []
    _add_player('Alex', 'Stone')
    cache.invalidate()
    assert len(cache.players()) == 1


def test_cache_search_matches_last_name(app):
    cache = PlayerDirectoryCache()
    _add_player('Alex', 'Stone')
    _add_player('Blair', 'Johnstone')
    _add_player('Casey', 'Rivera')

    assert cache.search('st') == []
    assert [p['last_name'] for p in cache.search('STON')] == ['Johnstone', 'Stone']
    assert len(cache.search('ston', limit=1)) == 1


def test_player_routes_require_admin(client):
    assert client.get('/api/players').status_code == 401
    assert client.post('/api/players', json={'first_name': 'A', 'last_name': 'B'}).status_code == 401


def test_create_update_delete_player(admin_client, client):
    res = admin_client.post('/api/players', json={
        'first_name': 'Alex', 'last_name': 'Stone', 'ghin': '1234567',
        'handicap_raw': '9.5', 'plays_yellow_tees': True,
    })
    assert res.status_code == 201
    player = res.get_json()['player']
    assert player['handicap_playing'] == 7.5
    assert player['ghin_status'] == 'fresh'
    assert [p['id'] for p in client.get('/api/players/search?q=sto').get_json()['players']] == [player['id']]

    res = admin_client.patch(f"/api/players/{player['id']}", json={'last_name': 'Stoneman'})
    assert res.get_json()['player']['last_name'] == 'Stoneman'
    results = client.get('/api/players/search?q=stoneman').get_json()['players']
    assert [p['last_name'] for p in results] == ['Stoneman']

    assert admin_client.patch(f"/api/players/{player['id']}", json={'handicap_raw': 'x'}).status_code == 400
    assert admin_client.delete(f"/api/players/{player['id']}").status_code == 200
    assert client.get('/api/players/search?q=stoneman').get_json()['players'] == []


def test_create_player_requires_names(admin_client):
    res = admin_client.post('/api/players', json={'first_name': 'Alex'})
    assert res.status_code == 400


def test_delete_player_removes_team_links(admin_client, event_year):
    player = _add_player('Alex', 'Stone')
    team = Team(event_year_id=event_year.id, event_type='sat_sun')
    db.session.add(team)
    db.session.flush()
    db.session.add(TeamPlayer(team_id=team.id, player_id=player.id))
    db.session.commit()

    assert admin_client.delete(f'/api/players/{player.id}').status_code == 200
    assert TeamPlayer.query.count() == 0
    assert admin_client.delete(f'/api/players/{player.id}').status_code == 404
