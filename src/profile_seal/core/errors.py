"""Error taxonomy for the sealing protocol.

Every request-level failure carries a stable machine-readable `code` and the
HTTP status it maps to. `ConfigurationError` deliberately sits outside the
`SealError` hierarchy: it signals a broken deployment, not a bad request.
"""

from __future__ import annotations

HTTP_BAD_REQUEST = 400
HTTP_FORBIDDEN = 403
HTTP_SERVICE_UNAVAILABLE = 503


class ConfigurationError(RuntimeError):
    """Raised when the service is missing required configuration."""


class SealError(Exception):
    """Base class for failures surfaced verbatim to the caller."""

    status_code: int = HTTP_BAD_REQUEST
    tampered: bool = False

    def __init__(self, code: str, detail: str | None = None) -> None:
        self.code = code
        self.detail = detail
        super().__init__(f"[{code}] {detail}" if detail else code)

    def to_body(self) -> dict[str, object]:
        """Render the error as the JSON body returned to clients."""
        body: dict[str, object] = {"ok": False, "error": self.code}
        if self.tampered:
            body["tampered"] = True
        return body


class MalformedRequestError(SealError):
    """Request body is not JSON or lacks required fields."""

    def __init__(self, code: str = "bad_json", detail: str | None = None) -> None:
        super().__init__(code, detail)


class NonceInvalidError(SealError):
    """Nonce is unknown, already redeemed, or evicted by the store."""

    def __init__(self, detail: str | None = None) -> None:
        super().__init__("nonce_invalid", detail)


class NonceExpiredError(SealError):
    """Nonce exists but its logical validity window has passed."""

    def __init__(self, detail: str | None = None) -> None:
        super().__init__("nonce_expired", detail)


class BotSuspectedError(SealError):
    """Bot verification rejected the request or could not be completed."""

    status_code = HTTP_FORBIDDEN

    def __init__(self, detail: str | None = None) -> None:
        super().__init__("bot_suspected", detail)


class PayloadValidationError(SealError):
    """Submission failed structural or check-digit validation."""


class TokenFormatError(SealError):
    """Token does not start with the expected literal prefix."""

    def __init__(self, detail: str | None = None) -> None:
        super().__init__("invalid_token_format", detail)


class TokenParseError(SealError):
    """Token body could not be decoded into a sealed record."""

    def __init__(self, detail: str | None = None) -> None:
        super().__init__("token_parse_failed", detail)


class SignatureInvalidError(SealError):
    """Recomputed signature does not match the one carried by the token."""

    tampered = True

    def __init__(self, detail: str | None = None) -> None:
        super().__init__("signature_invalid", detail)


class NonceStoreUnavailableError(SealError):
    """The nonce store could not be reached within its timeout."""

    status_code = HTTP_SERVICE_UNAVAILABLE

    def __init__(self, detail: str | None = None) -> None:
        super().__init__("nonce_store_unavailable", detail)
