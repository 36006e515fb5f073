"""Login identifier normalization.

A login identifier is either an email address or a phone number. Phone
numbers are compared in a normalized form with spaces, dashes and
parentheses removed, so ``(555) 123-4567`` and ``5551234567`` match.
"""

import re
from dataclasses import dataclass
from typing import Optional

_PHONE_NOISE_RE = re.compile(r"[\s\-()]")


def normalize_phone(value: Optional[str]) -> Optional[str]:
    if value is None:
        return None
    normalized = _PHONE_NOISE_RE.sub("", value)
    return normalized or None


def normalize_email(value: str) -> str:
    return value.strip().lower()


@dataclass(frozen=True, slots=True)
class LoginIdentifier:
    """The email and phone forms of what the user typed into the login box."""

    raw: str
    email: str
    phone: Optional[str]

    @classmethod
    def parse(cls, raw: str) -> "LoginIdentifier":
        if not raw or not raw.strip():
            raise ValueError("Login identifier cannot be empty")
        stripped = raw.strip()
        phone = None if "@" in stripped else normalize_phone(stripped)
        return cls(raw=stripped, email=normalize_email(stripped), phone=phone)
