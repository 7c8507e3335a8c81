import hmac
from datetime import datetime, timedelta, timezone
from functools import wraps
from flask import request, jsonify, current_app
import jwt

ADMIN_COOKIE_NAME = 'admin_auth'
_ADMIN_ROLE = 'admin'


def admin_password_matches(candidate):
    """Constant-time check of the shared admin password."""
    expected = str(current_app.config.get('ADMIN_PASSWORD') or '')
    provided = str(candidate or '')
    if not expected or not provided:
        return False
    return hmac.compare_digest(expected.encode('utf-8'), provided.encode('utf-8'))


def admin_session_max_age():
    return int(current_app.config.get('ADMIN_SESSION_HOURS', 72)) * 3600


def generate_admin_token():
    """Signed cookie value marking the browser as logged in to the admin area."""
    payload = {
        'role': _ADMIN_ROLE,
        'exp': datetime.now(timezone.utc) + timedelta(seconds=admin_session_max_age()),
    }
    return jwt.encode(payload, current_app.config['SECRET_KEY'], algorithm='HS256')


def _decode_admin_token(token):
    normalized = str(token or '').strip()
    if not normalized:
        return 'Authentication required'
    try:
        payload = jwt.decode(
            normalized, current_app.config['SECRET_KEY'], algorithms=['HS256']
        )
    except jwt.ExpiredSignatureError:
        return 'Session expired'
    except jwt.InvalidTokenError:
        return 'Invalid session'
    if payload.get('role') != _ADMIN_ROLE:
        return 'Invalid session'
    return None


def is_admin_request():
    return _decode_admin_token(request.cookies.get(ADMIN_COOKIE_NAME)) is None


def admin_required(f):
    """Decorator to require the admin cookie on a route."""
    @wraps(f)
    def decorated(*args, **kwargs):
        error = _decode_admin_token(request.cookies.get(ADMIN_COOKIE_NAME))
        if error:
            return jsonify({'error': error}), 401
        return f(*args, **kwargs)
    return decorated
