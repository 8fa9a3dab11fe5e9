"""Shared async HTTP client with configurable timeout."""

from typing import Any

import httpx


class HttpClient:
    """Thin async wrapper around httpx.AsyncClient with a configurable timeout.

    One instance per external provider (email, voice) keeps timeouts
    independently configurable and lets tests swap the transport out.
    """

    def __init__(self, timeout: float = 5.0, **client_kwargs: Any) -> None:
        self._client = httpx.AsyncClient(timeout=timeout, **client_kwargs)

    async def post(self, url: str, **kwargs: Any) -> httpx.Response:
        return await self._client.post(url, **kwargs)

    async def aclose(self) -> None:
        await self._client.aclose()
