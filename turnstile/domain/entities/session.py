"""Server-side session state.

A session record is exactly one of two shapes, discriminated by ``kind``:
``PendingTwoFactor`` after a password check on a 2FA account, or
``AuthenticatedSession`` once tokens have been issued. Writing one shape
replaces the other wholesale, so a record can never carry both.
"""

from datetime import datetime
from typing import Annotated, Literal, Union

from pydantic import BaseModel, ConfigDict, Field, TypeAdapter


class PendingTwoFactor(BaseModel):
    model_config = ConfigDict(frozen=True)

    kind: Literal["pending_two_factor"] = "pending_two_factor"
    temp_user_id: int
    temp_email: str
    two_factor_required: Literal[True] = True


class AuthenticatedSession(BaseModel):
    model_config = ConfigDict(frozen=True)

    kind: Literal["authenticated"] = "authenticated"
    user_id: int
    email: str
    role: str
    access_token: str
    refresh_token: str
    token_expires_at: datetime


SessionState = Annotated[
    Union[PendingTwoFactor, AuthenticatedSession], Field(discriminator="kind")
]

session_state_adapter: TypeAdapter[SessionState] = TypeAdapter(SessionState)
