"""
Handicap and flight calculations for tournament teams.

- Playing handicap: raw GHIN index, minus 2 for players on the forward
  (yellow) tees.
- GHIN status: ``missing`` without a handicap or GHIN number, ``fresh`` when
  the index was refreshed within the last few whole days, otherwise ``stale``.
- Combined handicap: sum of the roster's playing handicaps, ignoring players
  without one. ``None`` (not 0) when nobody on the roster has a handicap.
- Flights: Sat/Sun teams sorted by combined handicap and split at the lower
  median value. The cutoff is inclusive, so every team tied with the median
  team lands in flight 1 even when that makes flight 1 the larger group.

Functions accept either model instances or plain dicts.
"""
from backend.time_utils import as_naive_utc, utcnow_naive, whole_days_between
from backend.models import GHIN_NONE

YELLOW_TEE_ADJUSTMENT = 2
DEFAULT_FRESH_DAYS = 4
FLIGHT_EVENT_TYPE = 'sat_sun'


def _field(obj, name, default=None):
    if isinstance(obj, dict):
        return obj.get(name, default)
    return getattr(obj, name, default)


def playing_handicap(player):
    raw = _field(player, 'handicap_raw')
    if raw is None:
        return None
    if _field(player, 'plays_yellow_tees'):
        return raw - YELLOW_TEE_ADJUSTMENT
    return raw


def ghin_status(player, now=None, fresh_days=DEFAULT_FRESH_DAYS):
    ghin = _field(player, 'ghin')
    if _field(player, 'handicap_raw') is None or not ghin or ghin == GHIN_NONE:
        return 'missing'

    last_update = _field(player, 'last_handicap_update_at')
    if last_update:
        last_update = as_naive_utc(last_update)
        now = as_naive_utc(now) if now else utcnow_naive()
        if whole_days_between(last_update, now) <= fresh_days:
            return 'fresh'
    return 'stale'


def combined_handicap(playing_handicaps):
    values = [value for value in playing_handicaps if value is not None]
    if not values:
        return None
    return sum(values)


def assign_flights(teams):
    """Map team id -> flight (1 or 2) for active Sat/Sun teams with a handicap."""
    eligible = [
        team for team in teams
        if _field(team, 'event_type') == FLIGHT_EVENT_TYPE
        and _field(team, 'withdrawn_at') is None
        and _field(team, 'combined_handicap') is not None
    ]
    if not eligible:
        return {}

    # sorted() is stable, so tied teams keep their input order.
    ordered = sorted(eligible, key=lambda team: _field(team, 'combined_handicap'))
    cutoff_index = len(ordered) // 2 - 1
    cutoff = _field(ordered[cutoff_index], 'combined_handicap') if cutoff_index >= 0 else 0

    flights = {}
    for team in ordered:
        flights[_field(team, 'id')] = 1 if _field(team, 'combined_handicap') <= cutoff else 2
    return flights


def format_handicap(value):
    if value is None:
        return '-'
    return f'+{value}' if value >= 0 else str(value)


def player_summary(player, now=None, fresh_days=DEFAULT_FRESH_DAYS):
    data = player.to_dict()
    data['handicap_playing'] = playing_handicap(player)
    data['ghin_status'] = ghin_status(player, now=now, fresh_days=fresh_days)
    return data


def team_display_name(team_name, sponsor_name, roster):
    if team_name:
        return team_name
    if sponsor_name:
        return sponsor_name
    if roster:
        return ' / '.join(member['last_name'] for member in roster)
    return 'Unnamed Team'


def team_summary(team, now=None, fresh_days=DEFAULT_FRESH_DAYS):
    """Serialize a team with its roster and combined handicap."""
    roster = []
    for link in team.players:
        if link.player is None:
            continue
        member = player_summary(link.player, now=now, fresh_days=fresh_days)
        member['role'] = link.role
        roster.append(member)

    data = team.to_dict()
    data['players'] = roster
    data['combined_handicap'] = combined_handicap(m['handicap_playing'] for m in roster)
    data['display_name'] = team_display_name(
        team.team_name, team.sponsor.name if team.sponsor else None, roster,
    )
    return data


def summarize_teams(teams, now=None, fresh_days=DEFAULT_FRESH_DAYS):
    summaries = [team_summary(team, now=now, fresh_days=fresh_days) for team in teams]
    flights = assign_flights(summaries)
    for summary in summaries:
        summary['flight'] = flights.get(summary['id'])
    return summaries
