"""Nonce issuance, sealing and token validation endpoints."""

from __future__ import annotations

from typing import Any

from fastapi import APIRouter, Request

from profile_seal.api.v1.dependencies import NonceLedgerDep, SealingServiceDep
from profile_seal.schemas.seal import (
    ErrorResponse,
    NonceResponse,
    SealRequest,
    SealResponse,
    UnsealRequest,
    UnsealResponse,
)

router = APIRouter(tags=["seal"])

ERROR_RESPONSES: dict[int | str, dict[str, Any]] = {
    400: {"model": ErrorResponse, "description": "Request rejected with a stable error code"},
    500: {"model": ErrorResponse, "description": "Signing secret not configured"},
    503: {"model": ErrorResponse, "description": "Nonce store unavailable"},
}


def _client_ip(request: Request) -> str | None:
    forwarded = request.headers.get("CF-Connecting-IP")
    if forwarded:
        return forwarded
    return request.client.host if request.client else None


@router.get("/nonce", response_model=NonceResponse, responses={503: ERROR_RESPONSES[503]})
async def issue_nonce(ledger: NonceLedgerDep) -> NonceResponse:
    """Issue a single-use nonce valid for the logical window."""
    issued = ledger.issue()
    return NonceResponse(
        nonce=issued.nonce,
        timestamp=issued.issued_at,
        expires_at=issued.expires_at,
        expires_in=issued.expires_in,
    )


@router.post(
    "/verify",
    response_model=SealResponse,
    responses={
        **ERROR_RESPONSES,
        403: {"model": ErrorResponse, "description": "Bot verification failed"},
    },
)
async def seal_result(
    body: SealRequest,
    request: Request,
    sealing: SealingServiceDep,
) -> SealResponse:
    """Redeem the nonce, validate the profile and return a sealed token."""
    result = await sealing.seal(
        nonce=body.nonce,
        timestamp=body.timestamp,
        profile_json=body.profile_json,
        transcript_hash=body.transcript_hash,
        turnstile_token=body.turnstile_token,
        remote_ip=_client_ip(request),
    )
    return SealResponse(token=result.token, iq=result.iq, tier=result.tier, roast=result.roast)


@router.post("/validate-token", response_model=UnsealResponse, responses=ERROR_RESPONSES)
async def validate_token(body: UnsealRequest, sealing: SealingServiceDep) -> UnsealResponse:
    """Verify a sealed token's signature; never consults the nonce store."""
    result = sealing.unseal(body.token)
    return UnsealResponse(iq=result.iq, tier=result.tier, timestamp=result.timestamp)
