"""Bot verification against Cloudflare Turnstile."""

from __future__ import annotations

import logging
from typing import Protocol

import httpx

logger = logging.getLogger(__name__)

DEFAULT_VERIFY_URL = "https://challenges.cloudflare.com/turnstile/v0/siteverify"


class BotVerifier(Protocol):
    """Async collaborator deciding whether a request came from a human."""

    async def verify(self, token: str | None, remote_ip: str | None = None) -> bool: ...


class TurnstileVerifier:
    """Turnstile `siteverify` client that fails closed.

    With no secret configured every request passes; this is an operational
    bypass for local deployments. Otherwise a missing token, a network error,
    a timeout, a non-JSON reply or `success != true` all count as failure.
    """

    def __init__(
        self,
        secret: str | None,
        *,
        verify_url: str = DEFAULT_VERIFY_URL,
        timeout_seconds: float = 5.0,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        self._secret = secret
        self._verify_url = verify_url
        self._timeout = httpx.Timeout(timeout_seconds)
        self._transport = transport

    @property
    def enabled(self) -> bool:
        return bool(self._secret)

    async def verify(self, token: str | None, remote_ip: str | None = None) -> bool:
        if not self.enabled:
            return True
        if not token:
            logger.info("Turnstile token missing from seal request")
            return False

        form = {"secret": self._secret or "", "response": token}
        if remote_ip:
            form["remoteip"] = remote_ip

        try:
            async with httpx.AsyncClient(
                timeout=self._timeout, transport=self._transport
            ) as client:
                response = await client.post(self._verify_url, data=form)
            payload = response.json()
        except httpx.HTTPError as exc:
            logger.warning("Turnstile verification failed: %s", exc)
            return False
        except ValueError:
            logger.warning("Turnstile returned a non-JSON body (status %d)", response.status_code)
            return False

        success = isinstance(payload, dict) and payload.get("success") is True
        if not success:
            codes = payload.get("error-codes") if isinstance(payload, dict) else None
            logger.warning("Turnstile rejected token: %s", codes)
        return success
