import os

basedir = os.path.abspath(os.path.dirname(__file__))


def _env_bool(name, default=False):
    raw = os.environ.get(name)
    if raw is None:
        return default
    return str(raw).strip().lower() in {'1', 'true', 'yes', 'on'}


def _env_int(name, default):
    raw = os.environ.get(name)
    if raw is None:
        return default
    try:
        return int(raw)
    except (TypeError, ValueError):
        return default


def _env_float(name, default):
    raw = os.environ.get(name)
    if raw is None:
        return default
    try:
        return float(raw)
    except (TypeError, ValueError):
        return default


def _normalize_database_url(raw_url):
    if not raw_url:
        return raw_url
    if raw_url.startswith('postgres://'):
        return raw_url.replace('postgres://', 'postgresql://', 1)
    return raw_url


class BaseConfig:
    SECRET_KEY = os.environ.get('SECRET_KEY', 'dev-secret-key-change-in-prod')
    SQLALCHEMY_TRACK_MODIFICATIONS = False
    CORS_ALLOWED_ORIGINS = os.environ.get('CORS_ALLOWED_ORIGINS', '*')

    # Admin area is gated by one shared password.
    ADMIN_PASSWORD = os.environ.get('ADMIN_PASSWORD', '')
    ADMIN_SESSION_HOURS = _env_int('ADMIN_SESSION_HOURS', 72)

    TOURNAMENT_NAME = os.environ.get('TOURNAMENT_NAME', 'Frogman Classic')
    TOURNAMENT_CODE_PREFIX = os.environ.get('TOURNAMENT_CODE_PREFIX', 'FROG')
    PUBLIC_BASE_URL = os.environ.get('PUBLIC_BASE_URL', 'http://localhost:5001')
    SAT_SUN_BASE_PRICE = _env_int('SAT_SUN_BASE_PRICE', 500)
    MEMBER_DISCOUNT = _env_int('MEMBER_DISCOUNT', 50)
    GHIN_FRESH_DAYS = _env_int('GHIN_FRESH_DAYS', 4)
    PLAYER_CACHE_TTL_SECONDS = _env_float('PLAYER_CACHE_TTL_SECONDS', 300.0)

    EMAIL_ENABLED = _env_bool('EMAIL_ENABLED', True)
    RESEND_API_KEY = os.environ.get('RESEND_API_KEY', '')
    RESEND_API_URL = os.environ.get('RESEND_API_URL', 'https://api.resend.com/emails')
    EMAIL_FROM_ADDRESS = os.environ.get(
        'EMAIL_FROM_ADDRESS', 'Frogman Classic <noreply@frogmanclassic.com>'
    )
    EMAIL_TIMEOUT_SECONDS = _env_float('EMAIL_TIMEOUT_SECONDS', 10.0)


class DevelopmentConfig(BaseConfig):
    DEBUG = True
    SQLALCHEMY_DATABASE_URI = _normalize_database_url(
        os.environ.get(
            'DATABASE_URL',
            'sqlite:///' + os.path.join(basedir, '..', 'frogman_dev.db')
        )
    )


class TestingConfig(BaseConfig):
    TESTING = True
    SQLALCHEMY_DATABASE_URI = 'sqlite:///:memory:'
    ADMIN_PASSWORD = 'test-admin-password'
    EMAIL_ENABLED = False
    RESEND_API_KEY = ''


class ProductionConfig(BaseConfig):
    DEBUG = False
    SQLALCHEMY_DATABASE_URI = _normalize_database_url(os.environ.get('DATABASE_URL'))


config = {
    'development': DevelopmentConfig,
    'testing': TestingConfig,
    'production': ProductionConfig,
}
