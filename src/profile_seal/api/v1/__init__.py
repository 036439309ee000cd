"""Version 1 API endpoints."""

from .endpoints import seal_router, system_router

__all__ = [
    "seal_router",
    "system_router",
]
