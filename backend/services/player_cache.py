"""In-process player directory used for registration-form autocomplete."""
import threading
import time

from backend.models import Player

MIN_QUERY_LENGTH = 3
DEFAULT_SEARCH_LIMIT = 10


def _directory_entry(player):
    return {
        'id': player.id,
        'first_name': player.first_name,
        'last_name': player.last_name,
        'suffix': player.suffix,
        'email': player.email,
        'phone': player.phone,
        'ghin': player.ghin,
    }


class PlayerDirectoryCache:
    """Snapshot of all players, reloaded after ``ttl_seconds`` or ``invalidate()``."""

    def __init__(self, ttl_seconds=300.0, clock=time.monotonic):
        self.ttl_seconds = ttl_seconds
        self._clock = clock
        self._lock = threading.Lock()
        self._players = None
        self._loaded_at = 0.0

    def _expired(self):
        if self._players is None:
            return True
        return self._clock() - self._loaded_at >= self.ttl_seconds

    def players(self):
        with self._lock:
            if self._expired():
                rows = Player.query.order_by(Player.last_name.asc(), Player.first_name.asc()).all()
                self._players = [_directory_entry(row) for row in rows]
                self._loaded_at = self._clock()
            return list(self._players)

    def invalidate(self):
        with self._lock:
            self._players = None

    def search(self, query, limit=DEFAULT_SEARCH_LIMIT):
        needle = str(query or '').strip().lower()
        if len(needle) < MIN_QUERY_LENGTH:
            return []
        matches = [p for p in self.players() if needle in (p['last_name'] or '').lower()]
        return matches[:limit]


def get_player_cache(app):
    cache = app.extensions.get('player_directory_cache')
    if cache is None:
        cache = PlayerDirectoryCache(ttl_seconds=app.config.get('PLAYER_CACHE_TTL_SECONDS', 300.0))
        app.extensions['player_directory_cache'] = cache
    return cache
