import logging

from sqlalchemy.exc import SQLAlchemyError

from backend.app import db
from backend.errors import RegistrationError, UNKNOWN

logger = logging.getLogger(__name__)


def commit_or_raise(action):
    """Commit the session; storage failures become an UNKNOWN RegistrationError."""
    try:
        db.session.commit()
    except SQLAlchemyError as exc:
        db.session.rollback()
        logger.exception('Database error while trying to %s', action)
        raise RegistrationError(f'Failed to {action}', UNKNOWN) from exc


def flush_or_raise(action):
    try:
        db.session.flush()
    except SQLAlchemyError as exc:
        db.session.rollback()
        logger.exception('Database error while trying to %s', action)
        raise RegistrationError(f'Failed to {action}', UNKNOWN) from exc
