from flask import Flask, request, jsonify
from flask_sqlalchemy import SQLAlchemy
from flask_cors import CORS
from backend.config import config
from backend.errors import RegistrationError

db = SQLAlchemy()


def _parse_allowed_origins(raw_origins):
    if not raw_origins:
        return '*'

    if isinstance(raw_origins, (list, tuple, set)):
        cleaned = [origin for origin in raw_origins if origin]
        return cleaned or '*'

    raw_text = str(raw_origins).strip()
    if not raw_text or raw_text == '*':
        return '*'

    origins = [origin.strip() for origin in raw_text.split(',') if origin.strip()]
    return origins or '*'


def create_app(config_name='development'):
    app = Flask(__name__)
    app.config.from_object(config[config_name])

    allowed_origins = _parse_allowed_origins(app.config.get('CORS_ALLOWED_ORIGINS', '*'))
    if str(config_name).strip().lower() == 'production':
        secret_key = str(app.config.get('SECRET_KEY') or '').strip()
        if not secret_key or secret_key == 'dev-secret-key-change-in-prod':
            raise RuntimeError('SECRET_KEY must be set to a non-default value in production')
        if not str(app.config.get('ADMIN_PASSWORD') or '').strip():
            raise RuntimeError('ADMIN_PASSWORD must be set in production')
        if allowed_origins == '*':
            raise RuntimeError('CORS_ALLOWED_ORIGINS must be explicitly set in production')

    db.init_app(app)
    CORS(app, resources={r'/api/*': {'origins': allowed_origins}}, supports_credentials=True)

    @app.before_request
    def _enforce_origin_for_mutating_api_requests():
        if request.method in {'GET', 'HEAD', 'OPTIONS'}:
            return None
        if not request.path.startswith('/api/'):
            return None

        origin = str(request.headers.get('Origin') or '').strip()
        if not origin:
            return None

        configured_origins = _parse_allowed_origins(
            app.config.get('CORS_ALLOWED_ORIGINS', '*')
        )
        if configured_origins != '*' and origin not in configured_origins:
            return jsonify({'error': 'Invalid request origin'}), 403
        return None

    @app.errorhandler(RegistrationError)
    def _registration_error(err):
        return jsonify(err.to_dict()), err.status_code

    from backend.routes.admin_auth import admin_auth_bp
    from backend.routes.event_year import event_year_bp
    from backend.routes.players import players_bp
    from backend.routes.teams import teams_bp
    from backend.routes.sponsors import sponsors_bp
    from backend.routes.redeem import redeem_bp
    from backend.routes.packages import packages_bp

    app.register_blueprint(admin_auth_bp, url_prefix='/api/admin')
    app.register_blueprint(event_year_bp, url_prefix='/api/event-year')
    app.register_blueprint(players_bp, url_prefix='/api/players')
    app.register_blueprint(teams_bp, url_prefix='/api/teams')
    app.register_blueprint(sponsors_bp, url_prefix='/api/sponsors')
    app.register_blueprint(redeem_bp, url_prefix='/api/redeem')
    app.register_blueprint(packages_bp, url_prefix='/api/packages')

    with app.app_context():
        from backend import models  # noqa: F401
        db.create_all()

    return app
