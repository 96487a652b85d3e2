"""Device and session token lifecycle plus service endpoint discovery.

A ``SessionManager`` owns all mutable session state of one client: the
device token obtained once through registration, the short-lived session
token exchanged from it, and the storage / notification endpoints resolved
for the account. Nothing here is module-global, so several managers can
coexist in one process.

Endpoints are resolved lazily and cached for the lifetime of the instance.
They are account-stable, so refreshing the session token does not
invalidate them.
"""

from __future__ import annotations

import asyncio
import logging
from typing import Any, AsyncIterator, Optional

import httpx

from . import identity
from .exceptions import AuthenticationRequiredError, RegistrationError
from .models import ServiceDiscoveryResponse
from .settings import EndpointOptions, RemarkableSettings
from .transport import Transport, bearer

logger = logging.getLogger(__name__)

REGISTER_PATH = "/token/json/2/device/new"
REFRESH_PATH = "/token/json/2/user/new"
DISCOVERY_PATH = "/service/json/1/{service}"

STORAGE_SERVICE = "document-storage"
NOTIFICATIONS_SERVICE = "notifications"


class SessionManager:
    def __init__(
        self,
        transport: Transport,
        *,
        device_token: Optional[str] = None,
        settings: RemarkableSettings | None = None,
    ):
        self._transport = transport
        self.settings = settings or transport.settings
        if device_token is None and self.settings.device_token is not None:
            device_token = self.settings.device_token.get_secret_value()
        self._device_token: Optional[str] = device_token or None
        self._token: Optional[str] = None
        self._auth_headers: dict[str, str] = {}
        self._endpoints: dict[str, str] = {}
        self._locks = {
            STORAGE_SERVICE: asyncio.Lock(),
            NOTIFICATIONS_SERVICE: asyncio.Lock(),
        }

    # ------------------------------------------------------------------
    # state
    # ------------------------------------------------------------------

    @property
    def device_token(self) -> Optional[str]:
        return self._device_token

    @property
    def token(self) -> Optional[str]:
        return self._token

    @property
    def is_registered(self) -> bool:
        return self._device_token is not None

    @property
    def is_authenticated(self) -> bool:
        return self._token is not None

    def _set_token(self, token: str) -> str:
        self._token = token
        self._auth_headers = bearer(token)
        return token

    def require_token(self) -> str:
        if self._token is None:
            raise AuthenticationRequiredError("No session token; call refresh_token() first")
        return self._token

    # ------------------------------------------------------------------
    # tokens
    # ------------------------------------------------------------------

    async def register(
        self,
        code: str,
        device_desc: Optional[str] = None,
        device_id: Optional[str] = None,
    ) -> str:
        """Exchange a one-time pairing code for a device token.

        The session token is refreshed right after. If that refresh fails the
        error propagates, but the device token is kept: the service has
        already issued it.
        """
        if not code:
            raise RegistrationError(
                "A pairing code from https://my.remarkable.com/device/desktop/connect is required"
            )

        body = {
            "code": code,
            "deviceDesc": device_desc or self.settings.device_desc,
            "deviceId": device_id or identity.device_id(),
        }
        resp = await self._transport.request(
            "POST", f"{self.settings.auth_url}{REGISTER_PATH}", json=body
        )
        self._device_token = resp.text
        logger.info("Device registered (%s)", body["deviceDesc"])

        await self.refresh_token()
        return self._device_token

    async def refresh_token(self) -> str:
        """Exchange the device token for a new session token."""
        if not self._device_token:
            raise AuthenticationRequiredError("Device is not registered; call register() first")

        resp = await self._transport.request(
            "POST",
            f"{self.settings.auth_url}{REFRESH_PATH}",
            headers=bearer(self._device_token),
        )
        token = self._set_token(resp.text)
        logger.info("Session token refreshed")
        return token

    # ------------------------------------------------------------------
    # endpoints
    # ------------------------------------------------------------------

    async def _resolve(
        self, service: str, options: EndpointOptions | None, *, default_api_ver: int, scheme: str
    ) -> str:
        cached = self._endpoints.get(service)
        if cached:
            return cached
        self.require_token()

        # single flight: concurrent first callers share one discovery request
        async with self._locks[service]:
            cached = self._endpoints.get(service)
            if cached:
                return cached

            resp = await self._transport.request(
                "GET",
                self.settings.service_manager_url + DISCOVERY_PATH.format(service=service),
                headers=self._auth_headers,
                params=self.settings.endpoint_query(options, default_api_ver=default_api_ver),
            )
            discovery = ServiceDiscoveryResponse.model_validate(resp.json())
            url = f"{scheme}://{discovery.host}"
            self._endpoints[service] = url
            logger.info("Resolved %s endpoint: %s", service, url)
            return url

    async def get_storage_url(self, options: EndpointOptions | None = None) -> str:
        return await self._resolve(
            STORAGE_SERVICE,
            options,
            default_api_ver=self.settings.storage_api_ver,
            scheme="https",
        )

    async def get_notifications_url(self, options: EndpointOptions | None = None) -> str:
        return await self._resolve(
            NOTIFICATIONS_SERVICE,
            options,
            default_api_ver=self.settings.notifications_api_ver,
            scheme="wss",
        )

    # ------------------------------------------------------------------
    # authorized calls
    # ------------------------------------------------------------------

    async def request(self, method: str, url: str, **kwargs: Any) -> httpx.Response:
        """Transport call carrying the current session token."""
        self.require_token()
        headers = dict(kwargs.pop("headers", None) or {})
        headers.update(self._auth_headers)
        return await self._transport.request(method, url, headers=headers, **kwargs)

    def stream(self, url: str) -> AsyncIterator[bytes]:
        """Stream a pre-signed blob URL. No session header is attached."""
        return self._transport.stream(url)
