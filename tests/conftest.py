# tests/conftest.py
from __future__ import annotations

import json
import os
from collections.abc import Callable, Iterator
from typing import Any

import pytest
from fastapi import FastAPI
from fastapi.testclient import TestClient

os.environ.setdefault("HMAC_SECRET", "test-signing-secret")
os.environ.pop("TURNSTILE_SECRET", None)
os.environ.pop("NONCE_STORE_URL", None)

from profile_seal.api.v1.dependencies import get_bot_verifier, get_nonce_ledger
from profile_seal.core.scoring import INDICATORS
from profile_seal.main import app as fastapi_app
from profile_seal.services.nonce_ledger import MemoryNonceStore, NonceLedger
from profile_seal.services.sealing import SealingService

TEST_SECRET = os.environ["HMAC_SECRET"]
START_TIME = 1_700_000_000.0


class FakeClock:
    """Manually advanced wall clock (seconds since the epoch)."""

    def __init__(self, start: float = START_TIME) -> None:
        self.now = start

    def __call__(self) -> float:
        return self.now

    def advance(self, seconds: float) -> None:
        self.now += seconds


class StaticBotVerifier:
    """Bot verifier returning a fixed verdict and recording its calls."""

    def __init__(self, verdict: bool = True) -> None:
        self.verdict = verdict
        self.calls: list[tuple[str | None, str | None]] = []

    async def verify(self, token: str | None, remote_ip: str | None = None) -> bool:
        self.calls.append((token, remote_ip))
        return self.verdict


@pytest.fixture()
def clock() -> FakeClock:
    return FakeClock()


@pytest.fixture()
def store(clock: FakeClock) -> MemoryNonceStore:
    return MemoryNonceStore(clock=clock)


@pytest.fixture()
def ledger(store: MemoryNonceStore, clock: FakeClock) -> NonceLedger:
    return NonceLedger(store, validity_seconds=120, store_ttl_seconds=180, clock=clock)


@pytest.fixture()
def bot_verifier() -> StaticBotVerifier:
    return StaticBotVerifier()


@pytest.fixture()
def sealing_service(ledger: NonceLedger, bot_verifier: StaticBotVerifier) -> SealingService:
    return SealingService(secret=TEST_SECRET, ledger=ledger, bot_verifier=bot_verifier)


@pytest.fixture()
def profile_factory() -> Callable[..., dict[str, Any]]:
    """Return a builder for profiles covering every indicator."""

    def _build(score: Any = "50.0000", **overrides: Any) -> dict[str, Any]:
        profile = {name: score for name in INDICATORS}
        profile.update(overrides)
        return profile

    return _build


@pytest.fixture()
def submission_factory(
    profile_factory: Callable[..., dict[str, Any]],
) -> Callable[..., dict[str, Any]]:
    """Return a builder for submission objects bound to a nonce."""

    def _build(nonce: str, profile: dict[str, Any] | None = None, **fields: Any) -> dict[str, Any]:
        submission: dict[str, Any] = {
            "nonce": nonce,
            "context_messages": 12,
            "analysis_summary": "Methodical, curious, occasionally reckless.",
            "profile": profile if profile is not None else profile_factory(),
        }
        submission.update(fields)
        return submission

    return _build


@pytest.fixture()
def seal_body_factory(
    submission_factory: Callable[..., dict[str, Any]],
) -> Callable[..., dict[str, Any]]:
    """Return a builder for `/verify` request bodies (double-encoded profile)."""

    def _build(nonce: str, **submission_fields: Any) -> dict[str, Any]:
        return {
            "nonce": nonce,
            "timestamp": int(START_TIME * 1000),
            "transcript_hash": "ab" * 32,
            "profile_json": json.dumps(submission_factory(nonce, **submission_fields)),
            "turnstile_token": "turnstile-ok",
        }

    return _build


@pytest.fixture(scope="session")
def app() -> FastAPI:
    return fastapi_app


@pytest.fixture()
def client(app: FastAPI, ledger: NonceLedger, bot_verifier: StaticBotVerifier) -> Iterator[TestClient]:
    app.dependency_overrides[get_nonce_ledger] = lambda: ledger
    app.dependency_overrides[get_bot_verifier] = lambda: bot_verifier
    try:
        with TestClient(app, base_url="http://test") as test_client:
            yield test_client
    finally:
        app.dependency_overrides.pop(get_nonce_ledger, None)
        app.dependency_overrides.pop(get_bot_verifier, None)
