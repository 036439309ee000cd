"""
Pydantic schemas for API request/response models.
"""

from .seal import (
    ErrorResponse,
    HealthResponse,
    NonceResponse,
    SealRequest,
    SealResponse,
    UnsealRequest,
    UnsealResponse,
)

__all__ = [
    "ErrorResponse",
    "HealthResponse",
    "NonceResponse",
    "SealRequest", "SealResponse",
    "UnsealRequest", "UnsealResponse",
]
