from flask import Blueprint, current_app, request, jsonify
from backend.models import EVENT_TYPES, Team
from backend.auth_utils import admin_required
from backend.services.event_years import active_event_year_or_raise
from backend.services.handicaps import summarize_teams, team_summary
from backend.services.registration import (
    delete_team, reinstate_team, register_open_team, sat_sun_price,
    update_team, withdraw_team,
)

teams_bp = Blueprint('teams', __name__)

TEAM_ACTIONS = ('restore', 'hard_delete')


def _fresh_days():
    return current_app.config.get('GHIN_FRESH_DAYS', 4)


@teams_bp.route('', methods=['GET'])
@admin_required
def list_teams():
    """Teams for the active year with rosters, handicaps and flights."""
    event_year = active_event_year_or_raise()
    query = Team.query.filter_by(event_year_id=event_year.id)

    event_type = str(request.args.get('event_type') or '').strip().lower()
    if event_type:
        if event_type not in EVENT_TYPES:
            return jsonify({'error': 'Invalid event type'}), 400
        query = query.filter_by(event_type=event_type)
    include_withdrawn = str(request.args.get('include_withdrawn') or '').lower() in {'1', 'true', 'yes'}
    if not include_withdrawn:
        query = query.filter(Team.withdrawn_at.is_(None))

    teams = query.order_by(Team.created_at.asc(), Team.id.asc()).all()
    return jsonify({
        'event_year': event_year.to_dict(),
        'teams': summarize_teams(teams, fresh_days=_fresh_days()),
    })


@teams_bp.route('/pricing', methods=['GET'])
def team_pricing():
    return jsonify({'sat_sun_price': sat_sun_price(request.args.get('member_count', 0))})


@teams_bp.route('', methods=['POST'])
def create_team():
    data = request.get_json(silent=True)
    if not data:
        return jsonify({'error': 'Request body is required'}), 400
    result = register_open_team(data)
    return jsonify({'success': True, **result}), 201


@teams_bp.route('/<int:team_id>', methods=['PATCH'])
@admin_required
def edit_team(team_id):
    data = request.get_json(silent=True) or {}
    team = update_team(team_id, data)
    return jsonify({'team': team_summary(team, fresh_days=_fresh_days())})


@teams_bp.route('/<int:team_id>', methods=['DELETE'])
@admin_required
def remove_team(team_id):
    team, restored = withdraw_team(team_id)
    return jsonify({
        'success': True,
        'team': team.to_dict(),
        'credit_restored': restored,
    })


@teams_bp.route('/<int:team_id>', methods=['POST'])
@admin_required
def team_action(team_id):
    data = request.get_json(silent=True) or {}
    action = str(data.get('action') or '').strip()
    if action not in TEAM_ACTIONS:
        return jsonify({'error': 'Invalid action'}), 400

    if action == 'restore':
        team = reinstate_team(team_id)
        return jsonify({'success': True, 'team': team.to_dict()})

    delete_team(team_id)
    return jsonify({'success': True})
