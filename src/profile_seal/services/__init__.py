"""Service layer for the sealing protocol."""

from .nonce_ledger import IssuedNonce, MemoryNonceStore, NonceLedger, RedisNonceStore
from .sealing import SealedResult, SealingService, UnsealedResult
from .turnstile import BotVerifier, TurnstileVerifier
from .validator import PayloadValidator, Submission

__all__ = [
    "BotVerifier",
    "IssuedNonce",
    "MemoryNonceStore",
    "NonceLedger",
    "PayloadValidator",
    "RedisNonceStore",
    "SealedResult",
    "SealingService",
    "Submission",
    "TurnstileVerifier",
    "UnsealedResult",
]
