"""WSGI entrypoint used by Gunicorn."""
import logging
import os

from backend.app import create_app
from backend.services.seeder import seed_event_year


def _env_bool(name, default=False):
    raw = os.environ.get(name)
    if raw is None:
        return default
    return str(raw).strip().lower() in {'1', 'true', 'yes', 'on'}


logging.basicConfig(
    level=os.environ.get('LOG_LEVEL', 'INFO').upper(),
    format='%(asctime)s %(levelname)s %(name)s: %(message)s',
)

config_name = os.environ.get('FLASK_ENV', 'production')
app = create_app(config_name)

if _env_bool('AUTO_SEED_EVENT_YEAR', False):
    with app.app_context():
        seeded = seed_event_year()
        if seeded:
            logging.getLogger(__name__).info('Seeded event year %s', seeded.year)
