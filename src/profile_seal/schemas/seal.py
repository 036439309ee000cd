"""Schemas for the nonce, seal and token-validation endpoints."""
from __future__ import annotations

from typing import Any

from pydantic import BaseModel, Field, FiniteFloat


class HealthResponse(BaseModel):
    ok: bool = True
    service: str
    version: str


class NonceResponse(BaseModel):
    """A freshly issued nonce; instants are epoch milliseconds."""

    ok: bool = True
    nonce: str
    timestamp: int
    expires_at: int
    expires_in: int = Field(..., description="Logical validity window in seconds.")


class SealRequest(BaseModel):
    """Seal request; `profile_json` is the submission encoded as a JSON string."""

    nonce: str
    timestamp: int | FiniteFloat | None = None
    transcript_hash: str | None = None
    profile_json: str
    turnstile_token: str | None = None


class SealResponse(BaseModel):
    ok: bool = True
    token: str
    iq: int
    tier: str
    roast: str


class UnsealRequest(BaseModel):
    token: str | None = None


class UnsealResponse(BaseModel):
    ok: bool = True
    valid: bool = True
    iq: int
    tier: str
    timestamp: Any = None


class ErrorResponse(BaseModel):
    ok: bool = False
    error: str
    tampered: bool | None = None
