"""HTTP transport used by every remarkable_cloud component.

Thin wrapper over ``httpx.AsyncClient``: it adds the client identification
header to every call and a bearer header when a token is supplied, and
leaves retries, caching and error translation to nobody. Non-2xx answers on
simple calls raise ``httpx.HTTPStatusError`` unchanged.
"""

from __future__ import annotations

import logging
from typing import Any, AsyncIterator, Mapping, Optional

import httpx

from .settings import RemarkableSettings, get_settings

logger = logging.getLogger(__name__)


def bearer(token: str) -> dict[str, str]:
    return {"Authorization": f"Bearer {token}"}


class Transport:
    def __init__(
        self,
        settings: RemarkableSettings | None = None,
        *,
        client: httpx.AsyncClient | None = None,
    ):
        self.settings = settings or get_settings()
        self._owns_client = client is None
        self._client = client or httpx.AsyncClient(timeout=self.settings.http_timeout)

    def _headers(self, headers: Optional[Mapping[str, str]]) -> dict[str, str]:
        merged = {"User-Agent": self.settings.user_agent}
        merged.update(headers or {})
        return merged

    async def request(
        self,
        method: str,
        url: str,
        *,
        headers: Optional[Mapping[str, str]] = None,
        params: Optional[Mapping[str, Any]] = None,
        json: Any = None,
        content: bytes | None = None,
        check: bool = True,
    ) -> httpx.Response:
        """Execute one request. With ``check`` a non-2xx status raises."""
        logger.debug("%s %s", method, url, extra={"http_method": method, "url": url})
        resp = await self._client.request(
            method,
            url,
            headers=self._headers(headers),
            params=params,
            json=json,
            content=content,
        )
        logger.debug(
            "%s %s -> %s",
            method,
            url,
            resp.status_code,
            extra={"http_method": method, "url": url, "status_code": resp.status_code},
        )
        if check:
            resp.raise_for_status()
        return resp

    async def stream(self, url: str) -> AsyncIterator[bytes]:
        """Yield the body of a GET in chunks until the server ends it."""
        async with self._client.stream("GET", url, headers=self._headers(None)) as resp:
            resp.raise_for_status()
            async for chunk in resp.aiter_bytes():
                yield chunk

    async def aclose(self) -> None:
        if self._owns_client:
            await self._client.aclose()
