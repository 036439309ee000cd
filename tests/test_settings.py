# tests/test_settings.py
import pytest
from pydantic import ValidationError

from profile_seal.core.settings import Settings


def test_defaults_match_nonce_windows(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.delenv("NONCE_VALIDITY_SECONDS", raising=False)
    monkeypatch.delenv("NONCE_STORE_TTL_SECONDS", raising=False)
    config = Settings(_env_file=None)
    assert config.nonce_validity_seconds == 120
    assert config.nonce_store_ttl_seconds == 180
    assert config.token_prefix == "DNA2::"


def test_environment_overrides(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv("HMAC_SECRET", "from-env")
    monkeypatch.setenv("TURNSTILE_TIMEOUT_SECONDS", "1.5")
    monkeypatch.setenv("NONCE_STORE_URL", "redis://cache:6379/2")
    config = Settings(_env_file=None)
    assert config.hmac_secret == "from-env"
    assert config.signing_configured is True
    assert config.turnstile_timeout_seconds == 1.5
    assert config.nonce_store_url == "redis://cache:6379/2"


def test_store_ttl_must_exceed_validity(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv("NONCE_VALIDITY_SECONDS", "180")
    monkeypatch.setenv("NONCE_STORE_TTL_SECONDS", "180")
    with pytest.raises(ValidationError):
        Settings(_env_file=None)


def test_empty_secret_is_not_configured(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv("HMAC_SECRET", "")
    assert Settings(_env_file=None).signing_configured is False
