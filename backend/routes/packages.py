from flask import Blueprint, request, jsonify
from backend.auth_utils import admin_required, is_admin_request
from backend.services.event_years import active_event_year_or_raise
from backend.services.sponsors import (
    create_package, delete_package, is_package_available, list_packages,
    update_package,
)

packages_bp = Blueprint('packages', __name__)


def _package_payload(package):
    data = package.to_dict()
    data['is_available'] = is_package_available(package)
    return data


@packages_bp.route('', methods=['GET'])
def get_packages():
    """Active packages for the sign-up form; admins may ask for all of them."""
    event_year = active_event_year_or_raise()
    include_inactive = (
        str(request.args.get('all') or '').lower() in {'1', 'true', 'yes'}
        and is_admin_request()
    )
    packages = list_packages(event_year.id, active_only=not include_inactive)
    return jsonify({'packages': [_package_payload(p) for p in packages]})


@packages_bp.route('', methods=['POST'])
@admin_required
def add_package():
    data = request.get_json(silent=True)
    if not data:
        return jsonify({'error': 'Request body is required'}), 400
    package = create_package(data)
    return jsonify({'package': _package_payload(package)}), 201


@packages_bp.route('/<int:package_id>', methods=['PATCH'])
@admin_required
def edit_package(package_id):
    data = request.get_json(silent=True) or {}
    package = update_package(package_id, data)
    return jsonify({'package': _package_payload(package)})


@packages_bp.route('/<int:package_id>', methods=['DELETE'])
@admin_required
def remove_package(package_id):
    deleted = delete_package(package_id)
    return jsonify({'success': True, 'deleted': deleted, 'deactivated': not deleted})
