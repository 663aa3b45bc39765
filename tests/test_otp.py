"""Tests for the Redis-backed verification code store."""

import pytest

from alpha_factory.auth.otp import OTP_TTL_SECONDS, OTPError, OTPStore, codes_match, otp_key


async def test_issue_generates_six_digit_code(otp_store, redis_client):
    code = await otp_store.issue("user@example.com")

    assert len(code) == 6
    assert code.isdigit()
    assert 100000 <= int(code) <= 999999
    assert await redis_client.get("otp:user@example.com") == code


async def test_code_expires_after_five_minutes(otp_store, redis_client):
    await otp_store.issue("user@example.com")

    ttl = await redis_client.ttl(otp_key("user@example.com"))
    assert 0 < ttl <= OTP_TTL_SECONDS


async def test_verify_is_case_insensitive_and_single_use(otp_store):
    """Test that a verified code is consumed."""
    code = await otp_store.issue("User@Example.com")

    await otp_store.verify("user@example.com", f" {code} ")

    with pytest.raises(OTPError, match="غير موجود"):
        await otp_store.verify("user@example.com", code)


async def test_new_code_replaces_previous(otp_store):
    first = await otp_store.issue("a@example.com")
    second = await otp_store.issue("a@example.com")

    if first != second:
        with pytest.raises(OTPError, match="غير صحيح"):
            await otp_store.verify("a@example.com", first)
    await otp_store.verify("a@example.com", second)


async def test_expired_code_is_rejected(otp_store, redis_client):
    code = await otp_store.issue("a@example.com")
    await redis_client.delete(otp_key("a@example.com"))

    with pytest.raises(OTPError, match="منتهي الصلاحية"):
        await otp_store.verify("a@example.com", code)


async def test_wrong_code_keeps_entry(otp_store):
    code = await otp_store.issue("a@example.com")
    wrong = "000000" if code != "000000" else "111111"

    with pytest.raises(OTPError):
        await otp_store.verify("a@example.com", wrong)

    await otp_store.verify("a@example.com", code)


async def test_non_ascii_code_is_wrong_code(otp_store):
    """Test that Arabic-Indic digits are rejected as a wrong code."""
    await otp_store.issue("a@example.com")

    with pytest.raises(OTPError, match="غير صحيح"):
        await otp_store.verify("a@example.com", "١٢٣٤٥٦")


async def test_discard(otp_store, redis_client):
    await otp_store.issue("a@example.com")

    await otp_store.discard("A@example.com")
    await otp_store.discard("missing@example.com")

    assert await redis_client.get(otp_key("a@example.com")) is None


def test_codes_match():
    assert codes_match("123456", " 123456 ")
    assert not codes_match("123456", "123457")
    assert not codes_match("123456", "é")


def test_store_uses_ttl_setting(redis_client):
    assert OTPStore(redis_client, ttl_seconds=60).ttl_seconds == 60
