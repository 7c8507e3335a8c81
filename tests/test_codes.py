"""Tests for redemption code generation."""
import re
from datetime import date

from backend.services.codes import (
    CODE_ALPHABET, generate_redemption_code, generate_redemption_codes,
)

CODE_PATTERN = re.compile(r'^FROG-\d{4}-[ABCDEFGHJKLMNPQRSTUVWXYZ23456789]{4}$')


def test_code_format_uses_prefix_year_and_safe_alphabet():
    for _ in range(200):
        code = generate_redemption_code('FROG', year=2026)
        assert CODE_PATTERN.match(code)
        assert code.startswith('FROG-2026-')


def test_alphabet_excludes_ambiguous_characters():
    assert len(CODE_ALPHABET) == 32
    for ch in 'IO01':
        assert ch not in CODE_ALPHABET


def test_year_defaults_to_current_year():
    code = generate_redemption_code('FROG')
    assert code.split('-')[1] == str(date.today().year)


def test_batch_is_unique_and_sized():
    codes = generate_redemption_codes(150, 'FROG', year=2026)
    assert len(codes) == 150
    assert len(set(codes)) == 150


def test_batch_rerolls_duplicates(monkeypatch):
    from backend.services import codes as codes_module
    suffixes = iter(['AAAA', 'AAAA', 'BBBB', 'AAAA', 'CCCC'])
    monkeypatch.setattr(codes_module, '_random_suffix', lambda *a, **kw: next(suffixes))

    assert generate_redemption_codes(3, 'FROG', year=2026) == [
        'FROG-2026-AAAA', 'FROG-2026-BBBB', 'FROG-2026-CCCC',
    ]


def test_non_positive_count_returns_empty_list():
    assert generate_redemption_codes(0, 'FROG') == []
    assert generate_redemption_codes(-3, 'FROG') == []
