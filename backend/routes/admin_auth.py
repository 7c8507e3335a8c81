from flask import Blueprint, current_app, request, jsonify
from backend.auth_utils import (
    ADMIN_COOKIE_NAME, admin_password_matches, admin_session_max_age,
    generate_admin_token, is_admin_request,
)

admin_auth_bp = Blueprint('admin_auth', __name__)


@admin_auth_bp.route('/auth', methods=['GET'])
def admin_status():
    return jsonify({'authenticated': is_admin_request()})


@admin_auth_bp.route('/auth', methods=['POST'])
def admin_login():
    data = request.get_json(silent=True) or {}
    if not data.get('password'):
        return jsonify({'error': 'Password is required'}), 400
    if not admin_password_matches(data.get('password')):
        return jsonify({'error': 'Invalid password'}), 401

    response = jsonify({'success': True})
    response.set_cookie(
        ADMIN_COOKIE_NAME,
        generate_admin_token(),
        max_age=admin_session_max_age(),
        httponly=True,
        secure=not (current_app.debug or current_app.testing),
        samesite='Lax',
        path='/',
    )
    return response


@admin_auth_bp.route('/auth', methods=['DELETE'])
def admin_logout():
    response = jsonify({'success': True})
    response.delete_cookie(ADMIN_COOKIE_NAME, path='/')
    return response
