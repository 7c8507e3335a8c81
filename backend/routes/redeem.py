from flask import Blueprint, request, jsonify
from backend.app import db
from backend.models import Sponsor
from backend.services.credit_ledger import validate_code
from backend.services.registration import register_with_code

redeem_bp = Blueprint('redeem', __name__)


@redeem_bp.route('/<code>/validate', methods=['GET'])
def validate_redemption_code(code):
    credit = validate_code(code)
    sponsor = db.session.get(Sponsor, credit.sponsor_id)
    return jsonify({
        'valid': True,
        'code': credit.redemption_code,
        'sponsor_name': sponsor.name if sponsor else None,
        'captain_email': credit.captain_email,
    })


@redeem_bp.route('/<code>', methods=['POST'])
def redeem_code(code):
    data = request.get_json(silent=True)
    if not data:
        return jsonify({'error': 'Request body is required'}), 400
    result = register_with_code(data, code)
    return jsonify({'success': True, **result}), 201
