"""TOTP and backup-code service.

Secrets are 32 base32 characters (160 bits, the RFC 4226 recommended key
size). Codes are checked against the current time step plus ``window`` steps
either side to tolerate clock drift. Backup codes are 8 uppercase
alphanumeric characters drawn from :mod:`secrets`; they are returned in
plaintext exactly once and persisted only as bcrypt hashes.
"""

import base64
import io
import secrets
import string
from dataclasses import dataclass, field
from typing import List, Optional, Sequence

import pyotp
import qrcode
import qrcode.image.svg
from structlog import get_logger

from turnstile.core.config.settings import settings
from turnstile.utils.security import hash_password_async, verify_password_async

logger = get_logger(__name__)

SECRET_LENGTH = 32
TOTP_DIGITS = 6
BACKUP_CODE_LENGTH = 8
BACKUP_CODE_ALPHABET = string.ascii_uppercase + string.digits


@dataclass(frozen=True)
class GeneratedSecret:
    secret: str
    provisioning_uri: str


@dataclass(frozen=True)
class BackupCodeVerification:
    """Outcome of checking a submitted backup code.

    ``remaining_hashes`` is the stored set minus the matched entry; the caller
    must persist it before treating the code as used.
    """

    valid: bool
    remaining_hashes: List[str] = field(default_factory=list)
    matched_hash: Optional[str] = None


class TwoFactorService:
    def __init__(
        self,
        issuer: Optional[str] = None,
        valid_window: Optional[int] = None,
        backup_code_count: Optional[int] = None,
    ):
        self.issuer = issuer or settings.TWO_FACTOR_ISSUER
        self.valid_window = settings.TOTP_VALID_WINDOW if valid_window is None else valid_window
        self.backup_code_count = backup_code_count or settings.BACKUP_CODE_COUNT

    def generate_secret(self, account_label: str) -> GeneratedSecret:
        secret = pyotp.random_base32(length=SECRET_LENGTH)
        uri = pyotp.TOTP(secret).provisioning_uri(name=account_label, issuer_name=self.issuer)
        return GeneratedSecret(secret=secret, provisioning_uri=uri)

    @staticmethod
    def render_qr(provisioning_uri: str) -> str:
        """Render the provisioning URI as an SVG QR code inside a data URL."""
        image = qrcode.make(provisioning_uri, image_factory=qrcode.image.svg.SvgPathImage)
        buffer = io.BytesIO()
        image.save(buffer)
        encoded = base64.b64encode(buffer.getvalue()).decode("ascii")
        return f"data:image/svg+xml;base64,{encoded}"

    def verify_code(self, code: str, secret: str, window: Optional[int] = None) -> bool:
        """Check a TOTP code, allowing ``window`` steps of drift either way.

        Codes that are not exactly six digits are rejected before any HMAC is
        computed.
        """
        candidate = (code or "").strip().replace(" ", "")
        if len(candidate) != TOTP_DIGITS or not candidate.isdigit():
            return False
        if not secret:
            return False
        try:
            return pyotp.TOTP(secret).verify(
                candidate, valid_window=self.valid_window if window is None else window
            )
        except ValueError:
            # Undecodable base32 secret.
            logger.warning("Stored TOTP secret could not be decoded")
            return False

    def generate_backup_codes(self, count: Optional[int] = None) -> List[str]:
        total = count or self.backup_code_count
        return [
            "".join(secrets.choice(BACKUP_CODE_ALPHABET) for _ in range(BACKUP_CODE_LENGTH))
            for _ in range(total)
        ]

    async def hash_backup_codes(self, codes: Sequence[str]) -> List[str]:
        return [await hash_password_async(code) for code in codes]

    async def verify_backup_code(
        self, submitted: str, hashes: Sequence[str]
    ) -> BackupCodeVerification:
        candidate = normalize_backup_code(submitted)
        if len(candidate) != BACKUP_CODE_LENGTH or not hashes:
            return BackupCodeVerification(valid=False, remaining_hashes=list(hashes))

        for index, stored in enumerate(hashes):
            if await verify_password_async(candidate, stored):
                remaining = list(hashes[:index]) + list(hashes[index + 1:])
                return BackupCodeVerification(
                    valid=True, remaining_hashes=remaining, matched_hash=stored
                )
        return BackupCodeVerification(valid=False, remaining_hashes=list(hashes))


def normalize_backup_code(code: Optional[str]) -> str:
    """Upper-case and drop the separators people type (spaces, dashes)."""
    return (code or "").strip().upper().replace("-", "").replace(" ", "")
