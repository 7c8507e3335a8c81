from backend.errors import RegistrationError, NO_ACTIVE_EVENT_YEAR
from backend.models import EventYear


def active_event_year():
    return EventYear.query.filter_by(is_active=True).order_by(EventYear.year.desc()).first()


def active_event_year_or_raise():
    event_year = active_event_year()
    if event_year is None:
        raise RegistrationError('No active event year found', NO_ACTIVE_EVENT_YEAR)
    return event_year
