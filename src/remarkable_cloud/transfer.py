"""Blob transfer: the three-phase upload and the streamed download.

Upload phases run strictly in order and each one gates the next:

1. request   -- ask the storage endpoint for a write slot (``BlobURLPut``)
2. transfer  -- PUT the package bytes to that slot
3. finalize  -- publish the document metadata (update-status)

A failure aborts the upload at that phase. Earlier phases are not undone;
the service simply keeps an unused slot or an unpublished blob.
"""

from __future__ import annotations

import logging

from .directory import DocumentDirectory
from .exceptions import (
    BlobNotFoundError,
    MetadataUpdateError,
    UploadRequestError,
    UploadTransferError,
)
from .models import DocumentMetadata, ItemType, OperationResult, UploadRequestResult
from .session import SessionManager

logger = logging.getLogger(__name__)

UPLOAD_REQUEST_PATH = "/document-storage/json/2/upload/request"
UPDATE_STATUS_PATH = "/document-storage/json/2/upload/update-status"


class TransferPipeline:
    def __init__(self, session: SessionManager, directory: DocumentDirectory):
        self._session = session
        self._directory = directory

    async def download_blob(self, doc_id: str) -> bytes:
        """Download the stored container of ``doc_id`` into memory.

        There is no timeout of its own: a stalled stream stalls the call
        unless the transport was configured with ``http_timeout``.
        """
        self._session.require_token()
        item = await self._directory.get_item_with_id(doc_id)
        if item is None or not item.blob_url_get:
            raise BlobNotFoundError(f"No BlobURLGet for item {doc_id}")

        chunks: list[bytes] = []
        # signed blob URL; no bearer header
        async for chunk in self._session.stream(item.blob_url_get):
            chunks.append(chunk)
        data = b"".join(chunks)
        logger.info("Downloaded %s (%d bytes)", doc_id, len(data), extra={"doc_id": doc_id})
        return data

    async def _request_slot(self, storage: str, doc_id: str) -> str:
        resp = await self._session.request(
            "PUT",
            f"{storage}{UPLOAD_REQUEST_PATH}",
            json=[{"ID": doc_id, "Type": ItemType.DOCUMENT.value, "Version": 1}],
        )
        results = [UploadRequestResult.model_validate(raw) for raw in resp.json() or []]
        if not results or not results[0].success or not results[0].blob_url_put:
            raise UploadRequestError(
                "Error during the creation of the upload request", doc_id=doc_id
            )
        return results[0].blob_url_put

    async def _transfer(self, put_url: str, doc_id: str, package: bytes) -> None:
        # the container is opaque to HTTP, hence the empty content type
        resp = await self._session.request(
            "PUT",
            put_url,
            headers={"Content-Type": ""},
            content=package,
            check=False,
        )
        if resp.status_code != 200:
            raise UploadTransferError(
                f"Error during the upload of the document (HTTP {resp.status_code})",
                doc_id=doc_id,
                status_code=resp.status_code,
            )

    async def _finalize(self, storage: str, name: str, doc_id: str) -> str:
        metadata = DocumentMetadata(id=doc_id, visible_name=name)
        resp = await self._session.request(
            "PUT", f"{storage}{UPDATE_STATUS_PATH}", json=[metadata.to_wire()]
        )
        results = [OperationResult.model_validate(raw) for raw in resp.json() or []]
        if not results or not results[0].success:
            raise MetadataUpdateError(
                "Error during the update status of the metadata", doc_id=doc_id
            )
        return results[0].id or doc_id

    async def upload_package(self, name: str, doc_id: str, package: bytes) -> str:
        """Run request, transfer and finalize for ``doc_id``.

        Returns the item id confirmed by the service.
        """
        self._session.require_token()
        storage = await self._session.get_storage_url()
        log_extra = {"doc_id": doc_id}

        put_url = await self._request_slot(storage, doc_id)
        logger.debug("Upload slot granted for %s", doc_id, extra=log_extra)

        await self._transfer(put_url, doc_id, package)
        logger.debug("Uploaded %d bytes for %s", len(package), doc_id, extra=log_extra)

        confirmed = await self._finalize(storage, name, doc_id)
        logger.info("Published %r as %s", name, confirmed, extra=log_extra)
        return confirmed
