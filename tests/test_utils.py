"""Tests for credential generation, validation helpers and date helpers."""

import string
from datetime import datetime, timezone

from alpha_factory.auth.redirects import dashboard_path
from alpha_factory.utils.credentials import SYMBOLS, generate_password, generate_username
from alpha_factory.utils.dates import isoformat_ms, parse_datetime
from alpha_factory.utils.security import is_email, is_safe_filename, is_valid_phone, mask_secret, secrets_equal


def test_generate_username():
    username = generate_username("Ahmed Ali", "editor")

    assert username[:9] == "ahmedaedi"
    assert 100 <= int(username[9:]) <= 999


def test_generate_username_drops_non_latin_letters():
    username = generate_username("محمد Sam-1", "client")

    assert username.startswith("samcli")


def test_generate_password_has_all_character_classes():
    for _ in range(20):
        password = generate_password()
        assert len(password) == 12
        assert any(c in string.ascii_lowercase for c in password)
        assert any(c in string.ascii_uppercase for c in password)
        assert any(c in string.digits for c in password)
        assert any(c in SYMBOLS for c in password)


def test_is_email():
    assert is_email("user@example.com")
    assert not is_email("username")
    assert not is_email("a b@example.com")
    assert not is_email("")


def test_is_valid_phone():
    assert is_valid_phone("+966 (50) 123-4567")
    assert not is_valid_phone("phone")


def test_is_safe_filename():
    assert is_safe_filename("voice_1_2.webm")
    assert not is_safe_filename("../etc/passwd")
    assert not is_safe_filename("a/b.webm")
    assert not is_safe_filename("a\\b.webm")
    assert not is_safe_filename("")


def test_mask_secret():
    assert mask_secret("") == "Not set"
    assert mask_secret("abcdefghijklmnop") == "abcdefghij..."


def test_secrets_equal():
    assert secrets_equal("Bearer s3cret", "Bearer s3cret")
    assert not secrets_equal("Bearer s3cret", "Bearer é")
    assert not secrets_equal("123456", "١٢٣٤٥٦")


def test_parse_datetime():
    assert parse_datetime("2025-01-02") == datetime(2025, 1, 2, tzinfo=timezone.utc)
    assert parse_datetime("2025-01-02T03:04:05Z") == datetime(2025, 1, 2, 3, 4, 5, tzinfo=timezone.utc)
    assert parse_datetime("") is None
    assert parse_datetime("garbage") is None


def test_isoformat_ms():
    value = datetime(2025, 1, 2, 3, 4, 5, 678900, tzinfo=timezone.utc)

    assert isoformat_ms(value) == "2025-01-02T03:04:05.678Z"
    assert isoformat_ms(value.replace(tzinfo=None)) == "2025-01-02T03:04:05.678Z"


def test_dashboard_path():
    assert dashboard_path("owner") == "/admin"
    assert dashboard_path("admin") == "/admin"
    assert dashboard_path("reviewer") == "/reviewer"
    assert dashboard_path("supervisor") == "/"
    assert dashboard_path(None) == "/"
