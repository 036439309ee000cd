# src/profile_seal/main.py
"""Main entry point for the sealing API."""

from __future__ import annotations

import logging

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException

from profile_seal.api.v1 import seal_router, system_router
from profile_seal.core.errors import ConfigurationError, SealError
from profile_seal.core.settings import settings

logging.basicConfig(level=settings.log_level.upper())
logger = logging.getLogger(__name__)

HTTP_BAD_REQUEST = 400
HTTP_NOT_FOUND = 404
HTTP_INTERNAL_SERVER_ERROR = 500

if not settings.signing_configured:
    logger.warning("HMAC_SECRET is not set; seal and token validation will be refused")

app = FastAPI(
    title=settings.app_name,
    description="Single-use nonces and HMAC-sealed result tokens",
    version=settings.app_version,
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.cors_origins,
    allow_methods=settings.cors_allow_methods,
    allow_headers=settings.cors_allow_headers,
)

app.include_router(system_router)
app.include_router(seal_router)


@app.exception_handler(SealError)
async def seal_error_handler(request: Request, exc: SealError) -> JSONResponse:
    return JSONResponse(exc.to_body(), status_code=exc.status_code)


@app.exception_handler(ConfigurationError)
async def configuration_error_handler(request: Request, exc: ConfigurationError) -> JSONResponse:
    logger.error("Refusing %s %s: %s", request.method, request.url.path, exc)
    return JSONResponse(
        {"ok": False, "error": "server_misconfigured"},
        status_code=HTTP_INTERNAL_SERVER_ERROR,
    )


@app.exception_handler(RequestValidationError)
async def request_validation_handler(
    request: Request, exc: RequestValidationError
) -> JSONResponse:
    return JSONResponse({"ok": False, "error": "bad_json"}, status_code=HTTP_BAD_REQUEST)


@app.exception_handler(StarletteHTTPException)
async def http_error_handler(request: Request, exc: StarletteHTTPException) -> JSONResponse:
    if exc.status_code == HTTP_NOT_FOUND:
        error = "not_found"
    elif exc.status_code == HTTP_BAD_REQUEST:
        error = "bad_json"
    else:
        error = str(exc.detail).lower().replace(" ", "_")
    return JSONResponse({"ok": False, "error": error}, status_code=exc.status_code)


def run() -> None:
    """Run the API with uvicorn."""
    import uvicorn

    uvicorn.run("profile_seal.main:app", host="0.0.0.0", port=8000, reload=settings.debug)


if __name__ == "__main__":
    run()
