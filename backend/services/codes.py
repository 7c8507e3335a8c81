"""Redemption code generation.

Codes look like ``FROG-2026-K7QX``: a short tournament prefix, the calendar
year, and four characters from an alphabet without I, O, 0 or 1 so captains
can type them from a printed invite without guessing.
"""
import secrets
from datetime import date

CODE_ALPHABET = 'ABCDEFGHJKLMNPQRSTUVWXYZ23456789'
CODE_SUFFIX_LENGTH = 4


def _random_suffix(length=CODE_SUFFIX_LENGTH):
    return ''.join(secrets.choice(CODE_ALPHABET) for _ in range(length))


def generate_redemption_code(prefix, year=None):
    if year is None:
        year = date.today().year
    return f'{prefix}-{int(year):04d}-{_random_suffix()}'


def generate_redemption_codes(count, prefix, year=None):
    """Return ``count`` codes that are unique within the batch.

    Duplicates are re-rolled. Uniqueness against codes already stored is the
    caller's job.
    """
    codes = []
    seen = set()
    while len(codes) < count:
        code = generate_redemption_code(prefix, year=year)
        if code in seen:
            continue
        seen.add(code)
        codes.append(code)
    return codes
