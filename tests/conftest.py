import pytest
from backend.app import create_app, db


@pytest.fixture
def app():
    app = create_app('testing')
    with app.app_context():
        db.create_all()
        yield app
        db.session.remove()
        db.drop_all()


@pytest.fixture
def client(app):
    return app.test_client()


@pytest.fixture
def admin_client(app):
    """Test client holding a valid admin cookie."""
    client = app.test_client()
    res = client.post('/api/admin/auth', json={'password': app.config['ADMIN_PASSWORD']})
    assert res.status_code == 200
    return client


@pytest.fixture
def event_year(app):
    """Create the active event year."""
    from backend.models import EventYear
    event_year = EventYear(year=2026, is_active=True)
    db.session.add(event_year)
    db.session.commit()
    return event_year


@pytest.fixture
def package(event_year):
    """Create a package that includes two team entries."""
    from backend.models import SponsorshipPackage
    package = SponsorshipPackage(
        event_year_id=event_year.id, name='Hole Sponsor', price=1000,
        included_entries=2, display_order=1,
    )
    package.benefits = ['Banner on a hole']
    db.session.add(package)
    db.session.commit()
    return package


@pytest.fixture
def sponsor(event_year, package):
    """Create a sponsor with five available credits."""
    from backend.models import Sponsor
    from backend.services.credit_ledger import issue_credits
    sponsor = Sponsor(
        event_year_id=event_year.id, name='Acme Builders',
        contact_name='Pat Doe', contact_email='pat@acme.test',
        package_id=package.id, payment_method='check',
        payment_status='pending_offline', total_credits=5,
        access_token='test-access-token',
    )
    db.session.add(sponsor)
    db.session.commit()
    issue_credits(sponsor.id, 5)
    return sponsor


@pytest.fixture
def registration_payload():
    def build(**overrides):
        data = {
            'event_type': 'sat_sun',
            'captain_email': 'captain@example.com',
            'team_name': 'Birdie Hunters',
            'players': [
                {'first_name': 'Alex', 'last_name': 'Stone', 'ghin': '1234567'},
                {'first_name': 'Sam', 'last_name': 'Rivera'},
            ],
        }
        data.update(overrides)
        return data
    return build
