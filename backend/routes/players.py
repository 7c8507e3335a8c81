from flask import Blueprint, current_app, request, jsonify
from backend.app import db
from backend.models import GHIN_NONE, Player
from backend.auth_utils import admin_required
from backend.services.handicaps import player_summary
from backend.services.player_cache import get_player_cache
from backend.services.transactions import commit_or_raise
from backend.time_utils import utcnow_naive

players_bp = Blueprint('players', __name__)

_TEXT_FIELDS = ('suffix', 'email', 'phone', 'home_course')


def _fresh_days():
    return current_app.config.get('GHIN_FRESH_DAYS', 4)


def _summary(player):
    return player_summary(player, fresh_days=_fresh_days())


def _apply_player_fields(player, data):
    """Copy editable fields onto a player. Returns an error message or None."""
    for field in ('first_name', 'last_name'):
        if field in data:
            value = str(data.get(field) or '').strip()
            if not value:
                return 'First and last name are required'
            setattr(player, field, value)
    for field in _TEXT_FIELDS:
        if field in data:
            setattr(player, field, str(data.get(field) or '').strip() or None)
    if 'ghin' in data:
        player.ghin = str(data.get('ghin') or '').strip() or GHIN_NONE
    if 'plays_yellow_tees' in data:
        player.plays_yellow_tees = bool(data.get('plays_yellow_tees'))
    if 'handicap_raw' in data:
        raw = data.get('handicap_raw')
        if raw is None or raw == '':
            player.handicap_raw = None
        else:
            try:
                player.handicap_raw = float(raw)
            except (TypeError, ValueError):
                return 'Handicap must be a number'
        player.last_handicap_update_at = utcnow_naive()
    return None


def _get_player(player_id):
    return db.session.get(Player, player_id)


@players_bp.route('', methods=['GET'])
@admin_required
def list_players():
    players = Player.query.order_by(Player.last_name.asc(), Player.first_name.asc()).all()
    return jsonify({'players': [_summary(p) for p in players]})


@players_bp.route('/search', methods=['GET'])
def search_players():
    query = request.args.get('q', '')
    try:
        limit = min(max(int(request.args.get('limit', 10)), 1), 50)
    except (TypeError, ValueError):
        limit = 10
    return jsonify({'players': get_player_cache(current_app).search(query, limit=limit)})


@players_bp.route('', methods=['POST'])
@admin_required
def create_player():
    data = request.get_json(silent=True) or {}
    if not str(data.get('first_name') or '').strip() or not str(data.get('last_name') or '').strip():
        return jsonify({'error': 'First and last name are required'}), 400

    player = Player(first_name='', last_name='', ghin=GHIN_NONE)
    error = _apply_player_fields(player, data)
    if error:
        return jsonify({'error': error}), 400
    db.session.add(player)
    commit_or_raise('create player')
    get_player_cache(current_app).invalidate()
    return jsonify({'player': _summary(player)}), 201


@players_bp.route('/<int:player_id>', methods=['PATCH'])
@admin_required
def update_player(player_id):
    player = _get_player(player_id)
    if not player:
        return jsonify({'error': 'Player not found'}), 404

    data = request.get_json(silent=True) or {}
    error = _apply_player_fields(player, data)
    if error:
        db.session.rollback()
        return jsonify({'error': error}), 400
    commit_or_raise('update player')
    get_player_cache(current_app).invalidate()
    return jsonify({'player': _summary(player)})


@players_bp.route('/<int:player_id>', methods=['DELETE'])
@admin_required
def delete_player(player_id):
    player = _get_player(player_id)
    if not player:
        return jsonify({'error': 'Player not found'}), 404
    db.session.delete(player)
    commit_or_raise('delete player')
    get_player_cache(current_app).invalidate()
    return jsonify({'success': True})
