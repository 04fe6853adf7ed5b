"""
Push-queue signature verification.

The queue signs every delivery with a short-lived HS256 JWT carried in the
signature header. The token binds the delivery to the URL the queue called
(``sub``) and to a SHA-256 digest of the exact request body (``body``).
Two keys may be valid at once so signing keys can rotate without downtime.
"""

import base64
import hashlib
import hmac
from typing import Any

from jose import jwt
from jose.exceptions import JWTError

from jobrelay.config.logging import get_logger
from jobrelay.v1.core.exceptions import AuthenticationError, ConfigurationError

logger = get_logger(__name__)

SIGNATURE_ISSUER = "Upstash"
SIGNATURE_ALGORITHM = "HS256"


def body_digest(body: bytes) -> str:
    """Unpadded base64url SHA-256 digest of the raw body."""
    digest = hashlib.sha256(body).digest()
    return base64.urlsafe_b64encode(digest).decode("ascii").rstrip("=")


class SignatureVerifier:
    """Verifies queue signatures against the current and next signing keys."""

    def __init__(
        self,
        current_key: str | None,
        next_key: str | None = None,
        clock_tolerance_s: int = 0,
    ):
        self.keys = [key for key in (current_key, next_key) if key]
        self.clock_tolerance_s = clock_tolerance_s

    def verify(self, signature: str, body: bytes, url: str) -> dict[str, Any]:
        """
        Verify a delivery signature.

        Args:
            signature: Value of the signature header
            body: Raw request body, byte for byte as received
            url: URL the queue was asked to call

        Returns:
            The verified token claims

        Raises:
            ConfigurationError: No signing key is configured
            AuthenticationError: The signature does not verify with any key
        """
        if not self.keys:
            raise ConfigurationError("No queue signing key configured")
        if not signature:
            raise AuthenticationError("Missing queue signature")

        last_reason = "invalid signature"
        for key in self.keys:
            try:
                return self._verify_with_key(key, signature, body, url)
            except JWTError as e:
                last_reason = str(e) or "invalid signature"
            except AuthenticationError as e:
                last_reason = e.message

        logger.warning("Queue signature rejected", reason=last_reason, url=url)
        raise AuthenticationError(
            "Invalid queue signature", details={"reason": last_reason}
        )

    def _verify_with_key(
        self, key: str, signature: str, body: bytes, url: str
    ) -> dict[str, Any]:
        claims = jwt.decode(
            signature,
            key,
            algorithms=[SIGNATURE_ALGORITHM],
            issuer=SIGNATURE_ISSUER,
            options={
                "verify_aud": False,
                "require_exp": True,
                "leeway": self.clock_tolerance_s,
            },
        )

        if claims.get("sub") != url:
            raise AuthenticationError("signature url mismatch")

        expected = body_digest(body)
        received = str(claims.get("body", "")).rstrip("=")
        if not hmac.compare_digest(expected, received):
            raise AuthenticationError("signature body hash mismatch")

        return claims
