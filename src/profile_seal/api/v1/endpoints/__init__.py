"""API endpoint modules for version 1."""

from .seal import router as seal_router
from .system import router as system_router

__all__ = [
    "seal_router",
    "system_router",
]
