from datetime import UTC, datetime


def utcnow_naive():
    """Return current UTC timestamp as naive datetime for DB timestamp columns."""
    return datetime.now(UTC).replace(tzinfo=None)


def whole_days_between(earlier, later):
    """Elapsed whole days from ``earlier`` to ``later``; partial days round down."""
    elapsed = (later - earlier).total_seconds()
    return int(elapsed // 86400)


def isoformat_or_none(value):
    return value.isoformat() if value else None


def as_naive_utc(value):
    """Parse ISO strings and convert offset-aware values to naive UTC."""
    if isinstance(value, str):
        value = datetime.fromisoformat(value)
    if value.tzinfo is not None:
        value = value.astimezone(UTC).replace(tzinfo=None)
    return value
