#!/usr/bin/env python3
"""Entry point for the Frogman Classic registration API."""
import logging
import os
from backend.app import create_app
from backend.services.seeder import seed_event_year

config_name = os.environ.get('FLASK_ENV', 'development')
logging.basicConfig(
    level=logging.DEBUG if config_name == 'development' else logging.INFO,
    format='%(asctime)s %(levelname)s %(name)s: %(message)s',
)
app = create_app(config_name)

# Seed the active event year on first run
with app.app_context():
    event_year = seed_event_year()
    if event_year:
        print(f"Seeded event year {event_year.year} with default sponsorship packages")

if __name__ == '__main__':
    port = int(os.environ.get('PORT', 5001))
    print(f"Frogman Classic API starting on http://localhost:{port}")
    app.run(host='0.0.0.0', port=port, debug=(config_name == 'development'))
