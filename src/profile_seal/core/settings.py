"""Application settings and configuration.

Settings are loaded from environment variables (or a `.env` file) with
defaults matching the production deployment. Only the API dependency layer
reads the module-level `settings` instance; core and service classes take
their configuration as explicit constructor arguments.
"""

from pydantic import Field, model_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    # Application metadata
    app_name: str = Field(default="WhosTheDumbass Anti-Tamper API", alias="APP_NAME")
    app_version: str = Field(default="2.2", alias="APP_VERSION")
    debug: bool = Field(default=False, alias="DEBUG")
    log_level: str = Field(default="INFO", alias="LOG_LEVEL")

    # Signing secret; absence is fatal for seal/unseal, not for import
    hmac_secret: str | None = Field(default=None, alias="HMAC_SECRET")

    # Nonce ledger
    nonce_validity_seconds: int = Field(default=120, alias="NONCE_VALIDITY_SECONDS")
    nonce_store_ttl_seconds: int = Field(default=180, alias="NONCE_STORE_TTL_SECONDS")
    nonce_store_url: str | None = Field(default=None, alias="NONCE_STORE_URL")
    nonce_store_timeout_seconds: float = Field(default=2.0, alias="NONCE_STORE_TIMEOUT_SECONDS")
    nonce_key_prefix: str = Field(default="nonce:", alias="NONCE_KEY_PREFIX")

    # Sealed token envelope
    token_prefix: str = Field(default="DNA2::", alias="TOKEN_PREFIX")
    token_version: int = Field(default=1, alias="TOKEN_VERSION")

    # Turnstile bot verification (unset secret bypasses the check)
    turnstile_secret: str | None = Field(default=None, alias="TURNSTILE_SECRET")
    turnstile_verify_url: str = Field(
        default="https://challenges.cloudflare.com/turnstile/v0/siteverify",
        alias="TURNSTILE_VERIFY_URL",
    )
    turnstile_timeout_seconds: float = Field(default=5.0, alias="TURNSTILE_TIMEOUT_SECONDS")

    # CORS configuration for the browser client
    cors_origins: list[str] = Field(default=["*"], alias="CORS_ORIGINS")
    cors_allow_methods: list[str] = Field(
        default=["GET", "POST", "OPTIONS"],
        alias="CORS_ALLOW_METHODS",
    )
    cors_allow_headers: list[str] = Field(default=["content-type"], alias="CORS_ALLOW_HEADERS")

    model_config = SettingsConfigDict(
        env_file=".env",
        validate_assignment=True,
        extra="ignore",
    )

    @model_validator(mode="after")
    def _check_nonce_windows(self) -> "Settings":
        # Store retention must outlive the logical window so the timestamp
        # check, not store expiry, decides validity.
        if self.nonce_store_ttl_seconds <= self.nonce_validity_seconds:
            raise ValueError("NONCE_STORE_TTL_SECONDS must exceed NONCE_VALIDITY_SECONDS")
        return self

    @property
    def signing_configured(self) -> bool:
        """Return True if a non-empty signing secret is available."""
        return bool(self.hmac_secret)


settings = Settings()
