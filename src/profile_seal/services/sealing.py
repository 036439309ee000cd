"""Seal validated submissions into signed tokens and verify them later.

Sealing walks `issued -> consumed -> validated -> sealed`; any failed step is
terminal and the nonce stays consumed. Unsealing touches no shared state: a
token carries everything needed to recompute its own signature, so it stays
verifiable indefinitely.
"""

from __future__ import annotations

import base64
import binascii
import json
import logging
import math
from collections.abc import Mapping, Sequence
from dataclasses import dataclass, field
from typing import Any

from profile_seal.core.canonical import canonicalize
from profile_seal.core.errors import (
    BotSuspectedError,
    ConfigurationError,
    MalformedRequestError,
    NonceExpiredError,
    NonceInvalidError,
    PayloadValidationError,
    SignatureInvalidError,
    TokenFormatError,
    TokenParseError,
)
from profile_seal.core.scoring import INDICATORS, derive_iq, roast_for, tier_for
from profile_seal.core.security import sign, verify
from profile_seal.services.nonce_ledger import NonceLedger
from profile_seal.services.turnstile import BotVerifier
from profile_seal.services.validator import PayloadValidator

logger = logging.getLogger(__name__)

DEFAULT_TOKEN_PREFIX = "DNA2::"
DEFAULT_TOKEN_VERSION = 1


@dataclass(frozen=True)
class SealedResult:
    """Outcome of a successful seal."""

    token: str
    record: Mapping[str, Any] = field(repr=False)
    iq: int
    tier: str
    roast: str


@dataclass(frozen=True)
class UnsealedResult:
    """Outcome of a successful signature re-verification."""

    iq: int
    tier: str
    timestamp: Any
    nonce: str


def signable_subset(
    *,
    nonce: Any,
    timestamp: Any,
    transcript_hash: Any,
    profile: Any,
    context_messages: Any,
    analysis_summary: Any,
    iq: Any,
) -> dict[str, Any]:
    """Build the exact mapping whose canonical form is signed."""
    return {
        "nonce": nonce,
        "timestamp": timestamp,
        "transcript_hash": transcript_hash or "",
        "profile": profile,
        "context_messages": context_messages,
        "analysis_summary": analysis_summary,
        "iq": iq,
    }


def _reject_constant(name: str) -> Any:
    raise ValueError(f"Unsupported JSON constant {name}")


def _parse_finite_float(text: str) -> float:
    value = float(text)
    if not math.isfinite(value):
        raise ValueError(f"Number out of range: {text}")
    return value


def _loads(text: str | bytes) -> Any:
    return json.loads(text, parse_constant=_reject_constant, parse_float=_parse_finite_float)


def encode_token(record: Mapping[str, Any], prefix: str = DEFAULT_TOKEN_PREFIX) -> str:
    """Render a sealed record as `prefix + base64(JSON)`."""
    body = json.dumps(record, ensure_ascii=False, separators=(",", ":"), allow_nan=False)
    return prefix + base64.b64encode(body.encode("utf-8")).decode("ascii")


def decode_token(token: object, prefix: str = DEFAULT_TOKEN_PREFIX) -> dict[str, Any]:
    """Parse a token string back into its sealed record.

    Raises:
        MalformedRequestError: If no token was supplied.
        TokenFormatError: If the literal prefix is missing.
        TokenParseError: If the body is not base64-encoded JSON object text.
    """
    if not isinstance(token, str) or not token:
        raise MalformedRequestError("missing_token")
    if not token.startswith(prefix):
        raise TokenFormatError()
    try:
        raw = base64.b64decode(token[len(prefix):], validate=True)
        record = _loads(raw.decode("utf-8"))
    except (binascii.Error, ValueError, RecursionError) as exc:
        raise TokenParseError(type(exc).__name__) from exc
    if not isinstance(record, dict):
        raise TokenParseError("token body is not an object")
    return record


class SealingService:
    """Orchestrates nonce redemption, validation, scoring and signing."""

    def __init__(
        self,
        *,
        secret: str | None,
        ledger: NonceLedger,
        bot_verifier: BotVerifier,
        validator: PayloadValidator | None = None,
        indicators: Sequence[str] = INDICATORS,
        token_prefix: str = DEFAULT_TOKEN_PREFIX,
        token_version: int = DEFAULT_TOKEN_VERSION,
    ) -> None:
        if not secret:
            raise ConfigurationError("HMAC signing secret is not configured")
        self._secret = secret
        self._ledger = ledger
        self._bot_verifier = bot_verifier
        self._validator = validator or PayloadValidator(indicators)
        self._token_prefix = token_prefix
        self._token_version = token_version

    def _consume_nonce(self, nonce: str) -> None:
        expires_at = self._ledger.redeem(nonce)
        if expires_at is None:
            raise NonceInvalidError()
        # Store TTL is looser than the logical window; the recorded instant decides.
        if self._ledger.is_expired(expires_at):
            logger.info("Nonce %s redeemed after its validity window", nonce)
            raise NonceExpiredError()

    async def seal(
        self,
        *,
        nonce: str,
        timestamp: Any,
        profile_json: str,
        transcript_hash: str | None = None,
        turnstile_token: str | None = None,
        remote_ip: str | None = None,
    ) -> SealedResult:
        """Redeem `nonce`, validate the submission and issue a sealed token.

        Args:
            nonce: Nonce previously handed out by the ledger.
            timestamp: Client-reported timestamp, carried into the signature.
            profile_json: JSON text of the submission object.
            transcript_hash: Optional fingerprint of the conversation transcript.
            turnstile_token: Bot-verification response token from the client.
            remote_ip: Client address forwarded to the bot verifier.

        Returns:
            The sealed token with its derived score, tier and roast.

        Raises:
            NonceInvalidError, NonceExpiredError, BotSuspectedError,
            PayloadValidationError: On the first failing step. The nonce is
            consumed once redemption succeeds, whatever happens afterwards.
        """
        self._consume_nonce(nonce)

        if not await self._bot_verifier.verify(turnstile_token, remote_ip):
            raise BotSuspectedError()

        if not isinstance(profile_json, str):
            raise PayloadValidationError("profile_not_json")
        try:
            payload = _loads(profile_json)
        except (ValueError, RecursionError) as exc:
            raise PayloadValidationError("profile_not_json", type(exc).__name__) from exc

        submission = self._validator.validate(payload, nonce)
        iq = derive_iq(score.value for score in submission.scores.values())
        tier = tier_for(iq)

        signable = signable_subset(
            nonce=nonce,
            timestamp=timestamp,
            transcript_hash=transcript_hash,
            profile=submission.profile,
            context_messages=submission.context_messages,
            analysis_summary=submission.analysis_summary,
            iq=iq,
        )
        try:
            record = {
                "v": self._token_version,
                "nonce": nonce,
                "timestamp": timestamp,
                "transcript_hash": transcript_hash or "",
                "payload": payload,
                "iq": iq,
                "tier": tier,
                "sig": sign(self._secret, canonicalize(signable)),
            }
            token = encode_token(record, self._token_prefix)
        except (TypeError, ValueError, RecursionError) as exc:
            # JSON text can carry values with no canonical UTF-8 form (lone surrogates).
            raise PayloadValidationError("payload_not_encodable", type(exc).__name__) from exc
        logger.info("Sealed nonce %s with iq=%d tier=%s", nonce, iq, tier)
        return SealedResult(
            token=token,
            record=record,
            iq=iq,
            tier=tier,
            roast=roast_for(iq),
        )

    def unseal(self, token: object) -> UnsealedResult:
        """Re-verify a sealed token's signature.

        No freshness check is made and the ledger is never consulted.

        Raises:
            MalformedRequestError, TokenFormatError, TokenParseError: If the
                token cannot be decoded.
            SignatureInvalidError: If the signature does not match.
        """
        record = decode_token(token, self._token_prefix)
        if record.get("v") != self._token_version:
            raise TokenParseError(f"unsupported token version {record.get('v')!r}")
        try:
            payload = record["payload"]
            iq = record["iq"]
            signable = signable_subset(
                nonce=record["nonce"],
                timestamp=record["timestamp"],
                transcript_hash=record.get("transcript_hash"),
                profile=payload["profile"],
                context_messages=payload["context_messages"],
                analysis_summary=payload["analysis_summary"],
                iq=iq,
            )
            valid = verify(self._secret, canonicalize(signable), record.get("sig"))
        except (KeyError, TypeError, ValueError, RecursionError) as exc:
            raise TokenParseError(type(exc).__name__) from exc

        if not valid:
            logger.warning("Signature mismatch on token for nonce %s", record.get("nonce"))
            raise SignatureInvalidError()
        if isinstance(iq, bool) or not isinstance(iq, (int, float)):
            raise TokenParseError("iq is not a number")

        return UnsealedResult(
            iq=int(iq),
            tier=tier_for(int(iq)),
            timestamp=record["timestamp"],
            nonce=str(record["nonce"]),
        )
