from __future__ import annotations

from typing import Optional

import httpx

from .directory import DocumentDirectory
from .models import ItemRecord
from .packager import DocumentPackager
from .session import SessionManager
from .settings import EndpointOptions, RemarkableSettings, get_settings
from .transfer import TransferPipeline
from .transport import Transport


class RemarkableClient:
    """
    Async client for the reMarkable cloud.

    Usage:
        async with RemarkableClient(device_token=saved_token) as rm:
            await rm.refresh_token()
            doc_id = await rm.upload_document("Report", pdf_bytes)

    A first-time device is paired with ``await rm.register(code)`` instead,
    which also refreshes the session token.
    """

    def __init__(
        self,
        *,
        device_token: Optional[str] = None,
        settings: RemarkableSettings | None = None,
        http_client: httpx.AsyncClient | None = None,
        transport: Transport | None = None,
    ):
        self.settings = settings or get_settings()
        self.transport = transport or Transport(self.settings, client=http_client)
        self.session = SessionManager(
            self.transport, device_token=device_token, settings=self.settings
        )
        self.directory = DocumentDirectory(self.session)
        self.pipeline = TransferPipeline(self.session, self.directory)
        self.packager = DocumentPackager(self.session, self.pipeline)

    async def __aenter__(self) -> "RemarkableClient":
        return self

    async def __aexit__(self, *exc) -> None:
        await self.aclose()

    async def aclose(self) -> None:
        await self.transport.aclose()

    @property
    def device_token(self) -> Optional[str]:
        return self.session.device_token

    @property
    def token(self) -> Optional[str]:
        return self.session.token

    # session
    async def register(
        self, code: str, device_desc: Optional[str] = None, device_id: Optional[str] = None
    ) -> str:
        return await self.session.register(code, device_desc=device_desc, device_id=device_id)

    async def refresh_token(self) -> str:
        return await self.session.refresh_token()

    async def get_storage_url(self, options: EndpointOptions | None = None) -> str:
        return await self.session.get_storage_url(options)

    async def get_notifications_url(self, options: EndpointOptions | None = None) -> str:
        return await self.session.get_notifications_url(options)

    # directory
    async def list_items(self, doc: Optional[str] = None, with_blob: bool = True) -> list[ItemRecord]:
        return await self.directory.list_items(doc=doc, with_blob=with_blob)

    async def get_item_with_id(self, doc_id: str) -> Optional[ItemRecord]:
        return await self.directory.get_item_with_id(doc_id)

    async def get_all_items(self) -> list[ItemRecord]:
        return await self.directory.get_all_items()

    async def delete_item(self, doc_id: str, version: int) -> bool:
        return await self.directory.delete_item(doc_id, version)

    # transfer
    async def download_blob(self, doc_id: str) -> bytes:
        return await self.pipeline.download_blob(doc_id)

    async def upload_package(self, name: str, doc_id: str, package: bytes) -> str:
        return await self.pipeline.upload_package(name, doc_id, package)

    async def upload_document(self, name: str, pdf: bytes) -> str:
        return await self.packager.upload_document(name, pdf)
