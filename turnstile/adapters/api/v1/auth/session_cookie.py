"""Session cookie handling.

The cookie carries only an opaque random id; everything else lives in the
server-side session record, and the id is always one the server minted: a
value presented by the client is never adopted. The cookie is always ``httpOnly``; ``secure`` and
``SameSite`` follow the environment.
"""

from fastapi import Response

from turnstile.core.config.settings import settings
from turnstile.domain.value_objects.duration import to_seconds


def set_session_cookie(response: Response, session_id: str) -> None:
    response.set_cookie(
        key=settings.SESSION_COOKIE_NAME,
        value=session_id,
        max_age=to_seconds(settings.SESSION_TTL),
        httponly=True,
        secure=settings.session_cookie_secure,
        samesite=settings.session_cookie_samesite,
        path="/",
    )


def clear_session_cookie(response: Response) -> None:
    response.delete_cookie(
        key=settings.SESSION_COOKIE_NAME,
        httponly=True,
        secure=settings.session_cookie_secure,
        samesite=settings.session_cookie_samesite,
        path="/",
    )
