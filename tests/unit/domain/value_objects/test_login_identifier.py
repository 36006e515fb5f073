import pytest

from turnstile.domain.value_objects.login_identifier import (
    LoginIdentifier,
    normalize_email,
    normalize_phone,
)


@pytest.mark.parametrize(
    "raw, expected",
    [
        ("(555) 123-4567", "5551234567"),
        ("+1 555 123 4567", "+15551234567"),
        ("555-123-4567", "5551234567"),
        ("5551234567", "5551234567"),
    ],
)
def test_normalize_phone_strips_spaces_dashes_and_parens(raw, expected):
    assert normalize_phone(raw) == expected


def test_normalize_phone_handles_missing_values():
    assert normalize_phone(None) is None
    assert normalize_phone(" - ") is None


def test_normalize_email_lowercases_and_trims():
    assert normalize_email("  Ada@Example.COM ") == "ada@example.com"


def test_parse_builds_both_forms():
    identifier = LoginIdentifier.parse(" Ada@Example.com ")

    assert identifier.email == "ada@example.com"
    assert identifier.raw == "Ada@Example.com"


def test_parse_rejects_blank_input():
    with pytest.raises(ValueError):
        LoginIdentifier.parse("   ")


def test_parse_does_not_treat_emails_as_phones():
    assert LoginIdentifier.parse("ada@example.com").phone is None


def test_parse_normalizes_phone_input():
    identifier = LoginIdentifier.parse("(555) 123-4567")

    assert identifier.phone == "5551234567"
