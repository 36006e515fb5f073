"""Duration strings such as ``15m`` or ``7d``.

This is the only place that turns a configured duration into a ``timedelta``.
Token ``exp`` claims, the session's cached ``token_expires_at``, revocation
TTLs and session TTLs all go through :func:`parse_duration`, so they can never
disagree about what ``"15m"`` means.
"""

import re
from datetime import timedelta
from typing import Final, Union

__all__ = ["parse_duration", "to_seconds"]

_DURATION_RE: Final = re.compile(r"^\s*(\d+)\s*([smhd])\s*$")

_UNIT_SECONDS: Final = {
    "s": 1,
    "m": 60,
    "h": 60 * 60,
    "d": 24 * 60 * 60,
}


def parse_duration(value: Union[str, int, timedelta]) -> timedelta:
    """Parse ``<int><unit>`` where unit is one of ``s``, ``m``, ``h``, ``d``.

    Integers are taken as seconds and ``timedelta`` values pass through.

    Raises:
        ValueError: If the value is malformed or not strictly positive.
    """
    if isinstance(value, timedelta):
        delta = value
    elif isinstance(value, bool):
        raise ValueError(f"Invalid duration: {value!r}")
    elif isinstance(value, int):
        delta = timedelta(seconds=value)
    else:
        match = _DURATION_RE.match(str(value))
        if not match:
            raise ValueError(
                f"Invalid duration: {value!r}. Expected a number followed by s, m, h or d."
            )
        amount, unit = match.groups()
        delta = timedelta(seconds=int(amount) * _UNIT_SECONDS[unit])

    if delta.total_seconds() <= 0:
        raise ValueError(f"Duration must be positive: {value!r}")
    return delta


def to_seconds(value: Union[str, int, timedelta]) -> int:
    """Whole seconds of a duration, as used for Redis expiries and cookie max-age."""
    return int(parse_duration(value).total_seconds())
