from flask import Blueprint, jsonify
from backend.services.event_years import active_event_year_or_raise

event_year_bp = Blueprint('event_year', __name__)


@event_year_bp.route('', methods=['GET'])
def get_event_year():
    return jsonify({'event_year': active_event_year_or_raise().to_dict()})
