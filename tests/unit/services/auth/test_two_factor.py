from datetime import datetime, timedelta
from urllib.parse import parse_qs, unquote, urlparse

import pyotp
import pytest

from turnstile.domain.services.auth.two_factor import (
    BACKUP_CODE_ALPHABET,
    TwoFactorService,
    normalize_backup_code,
)


def test_generate_secret_has_at_least_160_bits(two_factor_service):
    generated = two_factor_service.generate_secret("ada@example.com")

    assert len(generated.secret) == 32
    assert len(pyotp.TOTP(generated.secret).byte_secret()) >= 20


def test_provisioning_uri_embeds_issuer_and_account(two_factor_service):
    generated = two_factor_service.generate_secret("ada@example.com")

    parsed = urlparse(generated.provisioning_uri)
    query = parse_qs(parsed.query)
    assert parsed.scheme == "otpauth"
    assert parsed.netloc == "totp"
    assert unquote(parsed.path) == "/Turnstile:ada@example.com"
    assert query["secret"] == [generated.secret]
    assert query["issuer"] == ["Turnstile"]


def test_secrets_are_random(two_factor_service):
    first = two_factor_service.generate_secret("a@example.com")
    second = two_factor_service.generate_secret("a@example.com")

    assert first.secret != second.secret


def test_render_qr_returns_svg_data_url(two_factor_service):
    generated = two_factor_service.generate_secret("ada@example.com")

    data_url = two_factor_service.render_qr(generated.provisioning_uri)

    assert data_url.startswith("data:image/svg+xml;base64,")
    assert len(data_url) > 100


def test_verify_code_accepts_current_code(two_factor_service):
    secret = pyotp.random_base32()

    assert two_factor_service.verify_code(pyotp.TOTP(secret).now(), secret) is True


def test_verify_code_tolerates_clock_drift_within_window(two_factor_service):
    secret = pyotp.random_base32()
    previous = pyotp.TOTP(secret).at(datetime.now() - timedelta(seconds=30))

    assert two_factor_service.verify_code(previous, secret) is True


def test_verify_code_rejects_codes_outside_window(two_factor_service):
    secret = pyotp.random_base32()
    stale = pyotp.TOTP(secret).at(datetime.now() - timedelta(minutes=10))

    assert two_factor_service.verify_code(stale, secret) is False


@pytest.mark.parametrize("code", ["", "12345", "1234567", "abcdef", "12 34", None])
def test_verify_code_rejects_malformed_codes_before_checking(two_factor_service, mocker, code):
    spy = mocker.patch("turnstile.domain.services.auth.two_factor.pyotp.TOTP")

    assert two_factor_service.verify_code(code, pyotp.random_base32()) is False
    spy.assert_not_called()


def test_verify_code_with_undecodable_secret_is_false(two_factor_service):
    assert two_factor_service.verify_code("123456", "not base32!") is False


def test_generate_backup_codes_shape(two_factor_service):
    codes = two_factor_service.generate_backup_codes()

    assert len(codes) == 10
    assert len(set(codes)) == 10
    for code in codes:
        assert len(code) == 8
        assert set(code) <= set(BACKUP_CODE_ALPHABET)


def test_generate_backup_codes_custom_count():
    assert len(TwoFactorService(backup_code_count=3).generate_backup_codes()) == 3


@pytest.mark.asyncio
async def test_hashed_backup_codes_do_not_contain_plaintext(two_factor_service):
    codes = two_factor_service.generate_backup_codes(2)

    hashes = await two_factor_service.hash_backup_codes(codes)

    assert len(hashes) == 2
    assert all(code not in hashed for code, hashed in zip(codes, hashes))
    assert all(hashed.startswith("$2") for hashed in hashes)


@pytest.mark.asyncio
async def test_verify_backup_code_removes_matched_hash(two_factor_service):
    codes = two_factor_service.generate_backup_codes(3)
    hashes = await two_factor_service.hash_backup_codes(codes)

    outcome = await two_factor_service.verify_backup_code(codes[1], hashes)

    assert outcome.valid is True
    assert outcome.matched_hash == hashes[1]
    assert outcome.remaining_hashes == [hashes[0], hashes[2]]


@pytest.mark.asyncio
async def test_verify_backup_code_accepts_lowercase_and_dashes(two_factor_service):
    hashes = await two_factor_service.hash_backup_codes(["ABCD2345"])

    outcome = await two_factor_service.verify_backup_code("abcd-2345", hashes)

    assert outcome.valid is True
    assert outcome.remaining_hashes == []


@pytest.mark.asyncio
async def test_verify_backup_code_rejects_unknown_code(two_factor_service):
    hashes = await two_factor_service.hash_backup_codes(["ABCD2345"])

    outcome = await two_factor_service.verify_backup_code("ZZZZ9999", hashes)

    assert outcome.valid is False
    assert outcome.remaining_hashes == hashes
    assert outcome.matched_hash is None


@pytest.mark.asyncio
async def test_verify_backup_code_rejects_wrong_length_without_hashing(two_factor_service, mocker):
    verify = mocker.patch("turnstile.domain.services.auth.two_factor.verify_password_async")

    outcome = await two_factor_service.verify_backup_code("123456", ["$2b$04$hash"])

    assert outcome.valid is False
    verify.assert_not_called()


def test_normalize_backup_code():
    assert normalize_backup_code(" ab-cd 12 34 ") == "ABCD1234"
    assert normalize_backup_code(None) == ""
