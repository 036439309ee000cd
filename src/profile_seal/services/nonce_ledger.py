"""Single-use nonce ledger backed by an expiring key-value store."""

from __future__ import annotations

import logging
import secrets
import time
from collections.abc import Callable
from dataclasses import dataclass
from threading import Lock
from typing import Any, Protocol

import redis

from profile_seal.core.errors import NonceStoreUnavailableError

logger = logging.getLogger(__name__)

NONCE_ENTROPY_BYTES = 16
MILLISECONDS_PER_SECOND = 1000

Clock = Callable[[], float]


class NonceStore(Protocol):
    """Minimal key-value contract the ledger relies on."""

    def put_if_absent(self, key: str, value: str, ttl_seconds: int) -> bool: ...

    def take(self, key: str) -> str | None: ...


class MemoryNonceStore:
    """In-process store with lazy TTL expiry.

    A single lock covers every read-modify-write, so concurrent `take` calls
    for one key see the value at most once.
    """

    def __init__(self, clock: Clock = time.time) -> None:
        self._clock = clock
        self._entries: dict[str, tuple[str, float]] = {}
        self._lock = Lock()

    def _purge(self, now: float) -> None:
        stale = [key for key, (_, deadline) in self._entries.items() if deadline <= now]
        for key in stale:
            self._entries.pop(key, None)

    def put_if_absent(self, key: str, value: str, ttl_seconds: int) -> bool:
        with self._lock:
            now = self._clock()
            self._purge(now)
            if key in self._entries:
                return False
            self._entries[key] = (value, now + ttl_seconds)
            return True

    def take(self, key: str) -> str | None:
        with self._lock:
            self._purge(self._clock())
            entry = self._entries.pop(key, None)
        return entry[0] if entry else None

    def __len__(self) -> int:
        with self._lock:
            self._purge(self._clock())
            return len(self._entries)


class RedisNonceStore:
    """Redis-backed store using `SET NX EX` and atomic `GETDEL`."""

    def __init__(self, client: Any) -> None:
        self._redis = client

    @classmethod
    def from_url(cls, url: str, *, timeout_seconds: float) -> RedisNonceStore:
        client = redis.from_url(  # type: ignore[no-untyped-call]
            url,
            socket_timeout=timeout_seconds,
            socket_connect_timeout=timeout_seconds,
            decode_responses=True,
        )
        return cls(client)

    def put_if_absent(self, key: str, value: str, ttl_seconds: int) -> bool:
        try:
            return bool(self._redis.set(key, value, ex=int(ttl_seconds), nx=True))
        except redis.RedisError as exc:
            logger.error("Nonce store write failed: %s", exc)
            raise NonceStoreUnavailableError(str(exc)) from exc

    def take(self, key: str) -> str | None:
        try:
            value = self._redis.getdel(key)
        except redis.RedisError as exc:
            logger.error("Nonce store redeem failed: %s", exc)
            raise NonceStoreUnavailableError(str(exc)) from exc
        if isinstance(value, bytes):
            return value.decode("utf-8")
        return value


@dataclass(frozen=True)
class IssuedNonce:
    """A freshly issued nonce and its validity window (epoch milliseconds)."""

    nonce: str
    issued_at: int
    expires_at: int

    @property
    def expires_in(self) -> int:
        return (self.expires_at - self.issued_at) // MILLISECONDS_PER_SECOND


class NonceLedger:
    """Issues anti-replay nonces and redeems each one at most once.

    The store keeps entries for `store_ttl_seconds`, deliberately longer than
    `validity_seconds`; the recorded expiry instant is what callers compare
    against the current time.
    """

    def __init__(
        self,
        store: NonceStore,
        *,
        validity_seconds: int = 120,
        store_ttl_seconds: int = 180,
        key_prefix: str = "nonce:",
        clock: Clock = time.time,
    ) -> None:
        if store_ttl_seconds <= validity_seconds:
            raise ValueError("store_ttl_seconds must exceed validity_seconds")
        self._store = store
        self._validity_ms = int(validity_seconds) * MILLISECONDS_PER_SECOND
        self._store_ttl_seconds = int(store_ttl_seconds)
        self._key_prefix = key_prefix
        self._clock = clock

    def now_ms(self) -> int:
        return int(self._clock() * MILLISECONDS_PER_SECOND)

    def _key(self, nonce: str) -> str:
        return f"{self._key_prefix}{nonce}"

    def issue(self) -> IssuedNonce:
        """Generate a 128-bit nonce and record its expiry instant."""
        while True:
            nonce = secrets.token_hex(NONCE_ENTROPY_BYTES).upper()
            issued_at = self.now_ms()
            expires_at = issued_at + self._validity_ms
            key = self._key(nonce)
            if self._store.put_if_absent(key, str(expires_at), self._store_ttl_seconds):
                logger.debug("Issued nonce %s expiring at %d", nonce, expires_at)
                return IssuedNonce(nonce=nonce, issued_at=issued_at, expires_at=expires_at)

    def redeem(self, nonce: str) -> int | None:
        """Consume a nonce in one atomic step.

        Returns:
            The recorded expiry instant (epoch milliseconds) if the nonce was
            present, otherwise None. A nonce returns a value at most once.
        """
        if not nonce:
            return None
        raw = self._store.take(self._key(nonce))
        if raw is None:
            logger.info("Nonce %s not found or already redeemed", nonce)
            return None
        try:
            return int(raw)
        except ValueError:
            logger.warning("Nonce %s carried an unreadable expiry %r", nonce, raw)
            # Treated as already past its window.
            return 0

    def is_expired(self, expires_at: int) -> bool:
        return self.now_ms() > expires_at
