"""Auth orchestrator.

Composes the credential store, token service, TOTP service, revocation
service and session state manager into the authentication flows, and owns
every state transition::

    Anonymous -> CredentialsVerified -> TwoFactorRequired | Authenticated
    TwoFactorRequired -> Authenticated | Rejected

Each operation takes the opaque session id the caller presented and returns a
result object carrying the new session state. Entering ``TwoFactorRequired`` or
``Authenticated`` always discards the presented id and stores the state under
a newly minted one, returned in the result; rejections are raised as members of the
closed ``TurnstileError`` taxonomy.
"""

from typing import Iterable, Optional, Union

from structlog import get_logger

from turnstile.core.exceptions import (
    AccountConflictError,
    AuthenticationRequiredError,
    DuplicateUserError,
    InternalFailureError,
    InvalidCredentialsError,
    InvalidPasswordError,
    InvalidRefreshTokenError,
    InvalidSessionError,
    InvalidTwoFactorCodeError,
    InvalidVerificationCodeError,
    TokenInvalidError,
    TokenRevokedError,
    TurnstileError,
    TwoFactorAlreadyEnabledError,
    TwoFactorSetupNotInitiatedError,
    UserNotFoundError,
)
from turnstile.domain.entities.session import AuthenticatedSession
from turnstile.domain.entities.user import Role, User
from turnstile.domain.interfaces.repositories import ICredentialRepository
from turnstile.domain.interfaces.services import IProviderTokenVerifier
from turnstile.domain.services.auth.revocation import TokenRevocationService
from turnstile.domain.services.auth.session import SessionStateManager
from turnstile.domain.services.auth.token import TokenService
from turnstile.domain.services.auth.two_factor import TwoFactorService
from turnstile.domain.services.authentication.provider_verification import (
    TrustedProviderVerifier,
)
from turnstile.domain.value_objects.auth_result import (
    AuthResult,
    ProviderProfile,
    TwoFactorChallenge,
    TwoFactorSetup,
)
from turnstile.domain.value_objects.jwt_token import TokenClaims
from turnstile.domain.value_objects.login_identifier import (
    LoginIdentifier,
    normalize_email,
    normalize_phone,
)
from turnstile.utils.security import (
    dummy_verify_async,
    hash_password_async,
    verify_password_async,
)

logger = get_logger(__name__)


class AuthOrchestrator:
    """Runs the register / login / 2FA / refresh / logout / provider-login flows.

    Attributes:
        credentials (ICredentialRepository): Credential store.
        tokens (TokenService): Token signing and verification.
        two_factor (TwoFactorService): TOTP and backup codes.
        revocations (TokenRevocationService): Revocation registry access.
        sessions (SessionStateManager): Per-session state.
        provider_verifier (IProviderTokenVerifier): OAuth token check.
    """

    def __init__(
        self,
        credentials: ICredentialRepository,
        token_service: TokenService,
        two_factor: TwoFactorService,
        revocations: TokenRevocationService,
        sessions: SessionStateManager,
        provider_verifier: Optional[IProviderTokenVerifier] = None,
    ):
        self.credentials = credentials
        self.tokens = token_service
        self.two_factor = two_factor
        self.revocations = revocations
        self.sessions = sessions
        self.provider_verifier = provider_verifier or TrustedProviderVerifier()

    # ------------------------------------------------------------------
    # Password flows
    # ------------------------------------------------------------------

    async def register(
        self,
        session_id: Optional[str],
        name: str,
        email: str,
        password: str,
        role: Role = Role.USER,
        phone: Optional[str] = None,
    ) -> AuthResult:
        """Create a password credential and authenticate it straight away."""
        email = normalize_email(email)
        if await self.credentials.find_by_email(email) is not None:
            logger.info("Registration rejected, email already registered")
            raise DuplicateUserError()

        user = User(
            name=name,
            email=email,
            phone=normalize_phone(phone),
            hashed_password=await hash_password_async(password),
            role=role,
        )
        user = await self.credentials.create(user)
        logger.info("User registered", user_id=user.id)
        return await self._issue_tokens(session_id, user)

    async def login(
        self, session_id: Optional[str], identifier: str, password: str
    ) -> Union[AuthResult, TwoFactorChallenge]:
        """Verify a password and either authenticate or start the 2FA step.

        Every failure raises the same ``InvalidCredentialsError``.
        """
        try:
            login_id = LoginIdentifier.parse(identifier)
        except ValueError as exc:
            raise InvalidCredentialsError() from exc

        user = await self.credentials.find_by_email_or_phone(login_id.email, login_id.phone)
        if user is None or not user.has_password:
            await dummy_verify_async()
            logger.info("Login failed", reason="unknown_identifier")
            raise InvalidCredentialsError()

        if not await verify_password_async(password, user.hashed_password):
            logger.info("Login failed", reason="password_mismatch", user_id=user.id)
            raise InvalidCredentialsError()

        if user.two_factor_enabled and user.two_factor_secret:
            session_id = await self.sessions.rotate(session_id)
            pending = await self.sessions.begin_pending_2fa(session_id, user.id, user.email)
            logger.info("Login requires two-factor authentication", user_id=user.id)
            return TwoFactorChallenge(session_id=session_id, session=pending)

        logger.info("Login succeeded", user_id=user.id)
        return await self._issue_tokens(session_id, user)

    async def verify_two_factor_login(self, session_id: Optional[str], code: str) -> AuthResult:
        """Complete a pending login with a TOTP code, or a backup code as a last resort."""
        pending = await self.sessions.read_pending_2fa(session_id)

        user = await self.credentials.find_by_id(pending.temp_user_id)
        if user is None or not user.two_factor_secret:
            await self.sessions.destroy(session_id)
            logger.warning("Pending two-factor session no longer valid", user_id=pending.temp_user_id)
            raise InvalidSessionError()

        if self.two_factor.verify_code(code, user.two_factor_secret):
            logger.info("Two-factor login verified", user_id=user.id, method="totp")
            return await self._issue_tokens(session_id, user)

        outcome = await self.two_factor.verify_backup_code(code, user.two_factor_backup_codes)
        if not outcome.valid:
            logger.info("Two-factor login rejected", user_id=user.id)
            raise InvalidTwoFactorCodeError()

        # The reduced set must be stored before the code counts as used.
        if not await self.credentials.consume_backup_code(user.id, outcome.matched_hash):
            logger.warning("Backup code consumed concurrently", user_id=user.id)
            raise InvalidTwoFactorCodeError()
        user.two_factor_backup_codes = outcome.remaining_hashes
        logger.info(
            "Two-factor login verified",
            user_id=user.id,
            method="backup_code",
            remaining_backup_codes=len(outcome.remaining_hashes),
        )
        return await self._issue_tokens(session_id, user, used_backup_code=True)

    # ------------------------------------------------------------------
    # Two-factor enrollment
    # ------------------------------------------------------------------

    async def setup_two_factor(self, user_id: int) -> TwoFactorSetup:
        """Generate and store a new secret and backup codes; 2FA stays disabled."""
        user = await self._require_user(user_id)
        if user.two_factor_enabled:
            raise TwoFactorAlreadyEnabledError()

        generated = self.two_factor.generate_secret(user.email)
        qr_code_url = self.two_factor.render_qr(generated.provisioning_uri)
        backup_codes = self.two_factor.generate_backup_codes()
        hashed_codes = await self.two_factor.hash_backup_codes(backup_codes)

        await self.credentials.update_by_id(
            user.id,
            two_factor_secret=generated.secret,
            two_factor_backup_codes=hashed_codes,
            two_factor_enabled=False,
        )
        logger.info("Two-factor setup initiated", user_id=user.id)
        return TwoFactorSetup(
            secret=generated.secret,
            provisioning_uri=generated.provisioning_uri,
            qr_code_url=qr_code_url,
            backup_codes=backup_codes,
        )

    async def verify_two_factor_setup(self, user_id: int, code: str) -> User:
        """Confirm the stored secret with a live code and enable 2FA."""
        user = await self._require_user(user_id)
        if not user.two_factor_secret:
            raise TwoFactorSetupNotInitiatedError()
        if not self.two_factor.verify_code(code, user.two_factor_secret):
            logger.info("Two-factor setup verification failed", user_id=user.id)
            raise InvalidVerificationCodeError()

        updated = await self.credentials.update_by_id(user.id, two_factor_enabled=True)
        logger.info("Two-factor authentication enabled", user_id=user.id)
        return updated or user

    async def disable_two_factor(self, user_id: int, password: str) -> User:
        """Re-check the password, then clear the secret, backup codes and flag."""
        user = await self._require_user(user_id)
        if not user.has_password or not await verify_password_async(
            password, user.hashed_password
        ):
            logger.info("Two-factor disable rejected", user_id=user.id)
            raise InvalidPasswordError()

        updated = await self.credentials.update_by_id(
            user.id,
            two_factor_enabled=False,
            two_factor_secret=None,
            two_factor_backup_codes=[],
        )
        logger.info("Two-factor authentication disabled", user_id=user.id)
        return updated or user

    # ------------------------------------------------------------------
    # Token lifecycle
    # ------------------------------------------------------------------

    async def refresh(self, session_id: Optional[str], refresh_token: str) -> AuthResult:
        """Rotate a refresh token: revoke the presented one, then mint a new pair.

        The old token is revoked before anything is issued, and a failed
        revocation (already spent) rejects the call. Every failure surfaces as
        ``InvalidRefreshTokenError``.
        """
        try:
            if await self.revocations.is_revoked(refresh_token):
                raise TokenRevokedError()
            payload = self.tokens.verify_refresh(refresh_token)
            user = await self.credentials.find_by_id(payload.user_id)
            if user is None:
                raise UserNotFoundError()
            await self.revocations.revoke_consumed(refresh_token, payload.expires_at)
        except TurnstileError as exc:
            logger.info("Token refresh rejected", reason=exc.code)
            raise InvalidRefreshTokenError() from exc
        except Exception as exc:
            logger.error("Token refresh failed unexpectedly", error_type=type(exc).__name__)
            raise InvalidRefreshTokenError() from exc

        logger.info("Refresh token rotated", user_id=user.id)
        return await self._issue_tokens(session_id, user)

    async def logout(self, session_id: Optional[str], extra_tokens: Iterable[str] = ()) -> None:
        """Revoke the session's cached tokens (and any presented ones), then destroy it.

        Malformed tokens never make logout fail; only store failures surface,
        as ``InternalFailureError``.
        """
        try:
            state = await self.sessions.read(session_id)
            candidates = list(extra_tokens)
            if isinstance(state, AuthenticatedSession):
                candidates = [state.access_token, state.refresh_token, *candidates]

            seen = set()
            for token in candidates:
                if not token or token in seen:
                    continue
                seen.add(token)
                await self.revocations.best_effort_revoke(token)

            await self.sessions.destroy(session_id)
        except TurnstileError as exc:
            logger.error("Logout failed", reason=exc.code)
            raise InternalFailureError("Failed to logout") from exc

        logger.info(
            "User logged out",
            user_id=state.user_id if isinstance(state, AuthenticatedSession) else None,
            revoked_tokens=len(seen),
        )

    # ------------------------------------------------------------------
    # Provider login
    # ------------------------------------------------------------------

    async def provider_login(self, session_id: Optional[str], profile: ProviderProfile) -> AuthResult:
        """Log in with an OAuth identity, linking or creating the account as needed.

        Linking only ever attaches a provider to an account that has none; an
        account already bound to a provider is never re-linked.
        """
        await self.provider_verifier.verify(profile)
        email = normalize_email(profile.email)

        user = await self.credentials.find_by_provider(profile.provider, profile.provider_id)
        if user is not None:
            if profile.avatar_url and profile.avatar_url != user.avatar_url:
                user = await self.credentials.update_by_id(user.id, avatar_url=profile.avatar_url)
        else:
            existing = await self.credentials.find_by_email(email)
            if existing is not None and existing.is_provider_linked:
                logger.warning(
                    "Provider login conflicts with linked account",
                    provider=profile.provider,
                    linked_provider=existing.provider,
                )
                raise AccountConflictError()
            if existing is not None:
                changes = {"provider": profile.provider, "provider_id": profile.provider_id}
                if profile.avatar_url and profile.avatar_url != existing.avatar_url:
                    changes["avatar_url"] = profile.avatar_url
                user = await self.credentials.update_by_id(existing.id, **changes)
                logger.info("Provider linked to account", user_id=existing.id, provider=profile.provider)
            else:
                user = await self.credentials.create(
                    User(
                        name=profile.name,
                        email=email,
                        role=Role.USER,
                        provider=profile.provider,
                        provider_id=profile.provider_id,
                        avatar_url=profile.avatar_url,
                    )
                )
                logger.info("User created from provider", user_id=user.id, provider=profile.provider)

        if user is None:
            raise InternalFailureError("Failed to authenticate user")
        return await self._issue_tokens(session_id, user)

    # ------------------------------------------------------------------
    # Current user
    # ------------------------------------------------------------------

    async def resolve_current_user(
        self, session_id: Optional[str], bearer_token: Optional[str]
    ) -> User:
        """Authenticate a request by session first, then by bearer access token."""
        state = await self.sessions.read(session_id)
        if isinstance(state, AuthenticatedSession):
            user = await self.credentials.find_by_id(state.user_id)
            if user is not None:
                return user

        if not bearer_token:
            raise AuthenticationRequiredError()
        if await self.revocations.is_revoked(bearer_token):
            raise TokenRevokedError()
        payload = self.tokens.verify_access(bearer_token)
        user = await self.credentials.find_by_id(payload.user_id)
        if user is None:
            raise TokenInvalidError()
        return user

    # ------------------------------------------------------------------
    # Helpers
    # ------------------------------------------------------------------

    async def _require_user(self, user_id: int) -> User:
        user = await self.credentials.find_by_id(user_id)
        if user is None:
            raise UserNotFoundError()
        return user

    async def _issue_tokens(
        self, session_id: Optional[str], user: User, used_backup_code: bool = False
    ) -> AuthResult:
        """Mint a pair, cache it in a session under a fresh id and return both."""
        if user.id is None:
            logger.error("Token issuance requested for user without id")
            raise InternalFailureError("Failed to authenticate user")

        role = user.role.value if isinstance(user.role, Role) else str(user.role)
        pair = self.tokens.issue_pair(TokenClaims(sub=str(user.id), email=user.email, role=role))
        session_id = await self.sessions.rotate(session_id)
        session = await self.sessions.complete_authentication(
            session_id,
            user.id,
            user.email,
            role,
            pair,
            pair.expires_at,
        )
        return AuthResult(
            user=user,
            tokens=pair,
            session_id=session_id,
            session=session,
            used_backup_code=used_backup_code,
        )
