"""Seed an active event year and the default sponsorship packages."""
from datetime import date

from backend.app import db
from backend.models import EventYear, SponsorshipPackage

DEFAULT_PACKAGES = (
    {
        'name': 'Banner Sponsor', 'price': 500, 'included_entries': 0,
        'benefits': ['Banner on a hole'],
    },
    {
        'name': 'Hole Sponsor', 'price': 1000, 'included_entries': 1,
        'benefits': ['Banner on a hole', 'Entry for a team into ONE Frogman event'],
    },
    {
        'name': 'Event Sponsor', 'price': 1500, 'included_entries': 1,
        'benefits': ['Banner on a hole', 'Entry for a team into BOTH Frogman events'],
    },
    {
        'name': 'Hole Sponsor (w/ Dinner Table)', 'price': 2500, 'included_entries': 1,
        'dinner_tables': 1,
        'benefits': [
            'Banner on a hole',
            'Entry for a team into BOTH Frogman events',
            'Table for 10 at benefit dinner',
        ],
    },
    {
        'name': 'SEAL Sponsor', 'price': 7500, 'included_entries': 1,
        'dinner_tables': 1, 'seal_play': 'both',
        'benefits': [
            '3x5 ft banner on clubhouse',
            'Entry for a team into BOTH Frogman events',
            'Play with a SEAL for BOTH events (3 days)',
            'Table for 10 at benefit dinner',
        ],
    },
)


def seed_event_year(year=None, start_date=None, end_date=None):
    """Create an active event year and its packages only when none exist."""
    if EventYear.query.first():
        return None

    event_year = EventYear(
        year=year or date.today().year,
        start_date=start_date,
        end_date=end_date,
        is_active=True,
    )
    try:
        db.session.add(event_year)
        db.session.flush()
        for order, package in enumerate(DEFAULT_PACKAGES, start=1):
            row = SponsorshipPackage(
                event_year_id=event_year.id,
                name=package['name'],
                price=package['price'],
                included_entries=package['included_entries'],
                dinner_tables=package.get('dinner_tables', 0),
                seal_play=package.get('seal_play', 'none'),
                display_order=order,
            )
            row.benefits = package['benefits']
            db.session.add(row)
        db.session.commit()
    except Exception:
        db.session.rollback()
        raise

    return event_year
