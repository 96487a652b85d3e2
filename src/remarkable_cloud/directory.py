from __future__ import annotations

import logging
from typing import Optional

from .models import ItemRecord, OperationResult
from .session import SessionManager

logger = logging.getLogger(__name__)

DOCS_PATH = "/document-storage/json/2/docs"
DELETE_PATH = "/document-storage/json/2/delete"


class DocumentDirectory:
    """Lists and deletes remote item records through the storage endpoint."""

    def __init__(self, session: SessionManager):
        self._session = session

    async def list_items(
        self, doc: Optional[str] = None, with_blob: bool = True
    ) -> list[ItemRecord]:
        """All items, or the single item ``doc`` when given.

        With ``with_blob`` the service includes ``BlobURLGet`` download links.
        """
        self._session.require_token()
        params = {"withBlob": "true" if with_blob else "false"}
        if doc is not None:
            params["doc"] = doc

        url = f"{await self._session.get_storage_url()}{DOCS_PATH}"
        resp = await self._session.request("GET", url, params=params)
        items = [ItemRecord.model_validate(raw) for raw in resp.json() or []]
        logger.debug("Listed %d item(s)", len(items))
        return items

    async def get_item_with_id(self, doc_id: str) -> Optional[ItemRecord]:
        """The item with ``doc_id``, or None when the service returns nothing."""
        items = await self.list_items(doc=doc_id)
        return items[0] if items else None

    async def get_all_items(self) -> list[ItemRecord]:
        return await self.list_items()

    async def delete_item(self, doc_id: str, version: int) -> bool:
        """Delete ``doc_id`` at ``version``.

        A stale version is rejected by the service and reported as False;
        callers must check the return value.
        """
        self._session.require_token()
        url = f"{await self._session.get_storage_url()}{DELETE_PATH}"
        resp = await self._session.request(
            "PUT", url, json=[{"ID": doc_id, "Version": version}]
        )
        results = [OperationResult.model_validate(raw) for raw in resp.json() or []]
        ok = bool(results) and results[0].success
        if not ok:
            logger.warning(
                "Delete of %s (version %s) rejected: %s",
                doc_id,
                version,
                results[0].message if results else "empty response",
                extra={"doc_id": doc_id},
            )
        return ok
