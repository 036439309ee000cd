"""HMAC-SHA256 signing utilities for sealed tokens."""
from __future__ import annotations

import hashlib
import hmac

from profile_seal.core.errors import ConfigurationError


def _require_secret(secret: str | None) -> bytes:
    if not secret:
        raise ConfigurationError("HMAC signing secret is not configured")
    return secret.encode("utf-8")


def sign(secret: str | None, message: str) -> str:
    """Compute an HMAC-SHA256 signature.

    Args:
        secret: Shared signing secret. Must be non-empty.
        message: Text to sign; its UTF-8 bytes are authenticated.

    Returns:
        Lowercase hex digest (64 characters).

    Raises:
        ConfigurationError: If `secret` is missing or empty.
    """
    return hmac.new(_require_secret(secret), message.encode("utf-8"), hashlib.sha256).hexdigest()


def verify(secret: str | None, message: str, signature_hex: object) -> bool:
    """Return True if `signature_hex` is the HMAC of `message` under `secret`."""
    expected = sign(secret, message)
    if not isinstance(signature_hex, str):
        return False
    return hmac.compare_digest(expected.encode("ascii"), signature_hex.encode("utf-8"))
