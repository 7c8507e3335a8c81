from flask import Blueprint, request, jsonify
from backend.models import Sponsor
from backend.auth_utils import admin_required
from backend.services.event_years import active_event_year_or_raise
from backend.services.sponsors import (
    delete_sponsor, list_packages, register_sponsor, sponsor_by_token,
    sponsor_portal, update_portal_credit, update_sponsor,
)

sponsors_bp = Blueprint('sponsors', __name__)


def _admin_sponsor_payload(sponsor):
    data = sponsor.to_dict(include_token=True)
    data['package'] = sponsor.package.to_dict() if sponsor.package else None
    data['credits'] = [credit.to_dict() for credit in sponsor.credits]
    return data


@sponsors_bp.route('', methods=['GET'])
@admin_required
def list_sponsors():
    event_year = active_event_year_or_raise()
    sponsors = Sponsor.query.filter_by(event_year_id=event_year.id).order_by(
        Sponsor.created_at.asc(), Sponsor.id.asc()
    ).all()
    return jsonify({
        'sponsors': [_admin_sponsor_payload(s) for s in sponsors],
        'packages': [p.to_dict() for p in list_packages(event_year.id, active_only=False)],
    })


@sponsors_bp.route('', methods=['POST'])
def create_sponsor():
    data = request.get_json(silent=True)
    if not data:
        return jsonify({'error': 'Request body is required'}), 400
    sponsor, edit_url = register_sponsor(data)
    return jsonify({
        'success': True,
        'sponsor_id': sponsor.id,
        'edit_url': edit_url,
    }), 201


@sponsors_bp.route('/<int:sponsor_id>', methods=['PATCH'])
@admin_required
def edit_sponsor(sponsor_id):
    data = request.get_json(silent=True) or {}
    sponsor, issued = update_sponsor(sponsor_id, data)
    return jsonify({
        'sponsor': _admin_sponsor_payload(sponsor),
        'new_codes': issued,
    })


@sponsors_bp.route('/<int:sponsor_id>', methods=['DELETE'])
@admin_required
def remove_sponsor(sponsor_id):
    delete_sponsor(sponsor_id)
    return jsonify({'success': True})


@sponsors_bp.route('/<token>', methods=['GET'])
def get_sponsor_portal(token):
    sponsor = sponsor_by_token(token)
    return jsonify({'sponsor': sponsor_portal(sponsor)})


@sponsors_bp.route('/<token>/credits/<int:credit_id>', methods=['PATCH'])
def edit_portal_credit(token, credit_id):
    sponsor = sponsor_by_token(token)
    data = request.get_json(silent=True) or {}
    credit, invite_sent = update_portal_credit(sponsor, credit_id, data)
    return jsonify({
        'credit': credit.to_dict(),
        'invite_sent': invite_sent,
    })
