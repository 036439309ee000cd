"""Health and service information endpoints."""

from __future__ import annotations

from fastapi import APIRouter

from profile_seal.core.settings import settings
from profile_seal.schemas.seal import HealthResponse

router = APIRouter(tags=["system"])


@router.get("/", response_model=HealthResponse)
@router.get("/health", response_model=HealthResponse)
async def health_check() -> HealthResponse:
    """Report that the service is up."""
    return HealthResponse(service=settings.app_name, version=settings.app_version)
