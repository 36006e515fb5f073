"""Service interfaces for collaborators outside the auth core."""

from abc import ABC, abstractmethod

from turnstile.domain.value_objects.auth_result import ProviderProfile


class IProviderTokenVerifier(ABC):
    """Confirms that an OAuth provider really issued the supplied access token.

    ``provider_login`` calls this before touching any account. Implementations
    raise ``ProviderVerificationError`` to reject the login.
    """

    @abstractmethod
    async def verify(self, profile: ProviderProfile) -> None:
        raise NotImplementedError
