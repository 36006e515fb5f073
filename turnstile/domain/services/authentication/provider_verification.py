from structlog import get_logger

from turnstile.domain.interfaces.services import IProviderTokenVerifier
from turnstile.domain.value_objects.auth_result import ProviderProfile

logger = get_logger(__name__)


class TrustedProviderVerifier(IProviderTokenVerifier):
    """Accepts the provider identity as supplied by the caller.

    Suitable only when the caller has already verified the provider token
    (e.g. a trusted frontend completing the OAuth code exchange server-side).
    Replace with a verifier that calls the provider's token-info endpoint to
    close that trust gap.
    """

    async def verify(self, profile: ProviderProfile) -> None:
        logger.debug(
            "Provider token accepted without remote verification",
            provider=profile.provider,
        )
