"""Dependency providers wiring settings into the sealing services."""

from __future__ import annotations

from typing import Annotated

from fastapi import Depends

from profile_seal.core.settings import settings
from profile_seal.services.nonce_ledger import MemoryNonceStore, NonceLedger, RedisNonceStore
from profile_seal.services.sealing import SealingService
from profile_seal.services.turnstile import BotVerifier, TurnstileVerifier


class _NonceLedgerSingleton:
    """Process-wide ledger; the in-memory store must be shared across requests."""

    _instance: NonceLedger | None = None

    @classmethod
    def get_instance(cls) -> NonceLedger:
        if cls._instance is None:
            if settings.nonce_store_url:
                store = RedisNonceStore.from_url(
                    settings.nonce_store_url,
                    timeout_seconds=settings.nonce_store_timeout_seconds,
                )
            else:
                store = MemoryNonceStore()
            cls._instance = NonceLedger(
                store,
                validity_seconds=settings.nonce_validity_seconds,
                store_ttl_seconds=settings.nonce_store_ttl_seconds,
                key_prefix=settings.nonce_key_prefix,
            )
        return cls._instance


def get_nonce_ledger() -> NonceLedger:
    """Return the shared nonce ledger."""
    return _NonceLedgerSingleton.get_instance()


def get_bot_verifier() -> BotVerifier:
    return TurnstileVerifier(
        settings.turnstile_secret,
        verify_url=settings.turnstile_verify_url,
        timeout_seconds=settings.turnstile_timeout_seconds,
    )


NonceLedgerDep = Annotated[NonceLedger, Depends(get_nonce_ledger)]
BotVerifierDep = Annotated[BotVerifier, Depends(get_bot_verifier)]


def get_sealing_service(ledger: NonceLedgerDep, bot_verifier: BotVerifierDep) -> SealingService:
    """Build a sealing service; raises ConfigurationError without a secret."""
    return SealingService(
        secret=settings.hmac_secret,
        ledger=ledger,
        bot_verifier=bot_verifier,
        token_prefix=settings.token_prefix,
        token_version=settings.token_version,
    )


SealingServiceDep = Annotated[SealingService, Depends(get_sealing_service)]
