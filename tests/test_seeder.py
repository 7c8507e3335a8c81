"""Tests for first-run event year seeding."""
from backend.models import EventYear, SponsorshipPackage
from backend.services.seeder import DEFAULT_PACKAGES, seed_event_year


def test_seed_creates_active_year_and_packages(app):
    event_year = seed_event_year(year=2026)
    assert event_year.is_active is True
    packages = SponsorshipPackage.query.order_by(SponsorshipPackage.display_order).all()
    assert len(packages) == len(DEFAULT_PACKAGES)
    assert packages[0].name == 'Banner Sponsor'
    assert packages[-1].seal_play == 'both'


def test_seed_is_noop_when_year_exists(app, event_year):
    assert seed_event_year(year=2027) is None
    assert EventYear.query.count() == 1
