"""Wire records exchanged with the document-storage service.

Field aliases follow the service's JSON exactly, including its
``VissibleName`` spelling.
"""

from __future__ import annotations

from datetime import datetime, timezone
from enum import StrEnum
from typing import Any, Optional

from pydantic import BaseModel, ConfigDict, Field


class ItemType(StrEnum):
    DOCUMENT = "DocumentType"
    COLLECTION = "CollectionType"


class _WireModel(BaseModel):
    model_config = ConfigDict(populate_by_name=True, extra="allow")

    def to_wire(self) -> dict[str, Any]:
        return self.model_dump(by_alias=True, mode="json", exclude_none=True)


class ServiceDiscoveryResponse(_WireModel):
    host: str = Field(alias="Host")
    status: str = Field(default="", alias="Status")


class ItemRecord(_WireModel):
    id: str = Field(alias="ID")
    version: int = Field(default=0, alias="Version")
    message: str = Field(default="", alias="Message")
    success: bool = Field(default=True, alias="Success")
    blob_url_get: Optional[str] = Field(default=None, alias="BlobURLGet")
    blob_url_get_expires: Optional[str] = Field(default=None, alias="BlobURLGetExpires")
    modified_client: Optional[str] = Field(default=None, alias="ModifiedClient")
    type: Optional[str] = Field(default=None, alias="Type")
    visible_name: str = Field(default="", alias="VissibleName")
    current_page: int = Field(default=0, alias="CurrentPage")
    bookmarked: bool = Field(default=False, alias="Bookmarked")
    parent: str = Field(default="", alias="Parent")

    @property
    def is_document(self) -> bool:
        return self.type == ItemType.DOCUMENT


class OperationResult(_WireModel):
    id: str = Field(default="", alias="ID")
    version: int = Field(default=0, alias="Version")
    message: str = Field(default="", alias="Message")
    success: bool = Field(default=False, alias="Success")


class UploadRequestResult(OperationResult):
    blob_url_put: Optional[str] = Field(default=None, alias="BlobURLPut")
    blob_url_put_expires: Optional[str] = Field(default=None, alias="BlobURLPutExpires")


class DocumentContent(BaseModel):
    """The ``<id>.content`` descriptor stored inside a document package."""

    extraMetadata: dict[str, Any] = Field(default_factory=dict)
    fileType: str = "pdf"
    lastOpenedPage: int = 0
    lineHeight: int = -1
    margins: int = 180
    pageCount: int = 0
    textScale: int = 1
    transform: dict[str, Any] = Field(default_factory=dict)


def _now_iso() -> str:
    return datetime.now(timezone.utc).isoformat().replace("+00:00", "Z")


class DocumentMetadata(BaseModel):
    """Payload of the upload finalize (update-status) call."""

    model_config = ConfigDict(populate_by_name=True)

    id: str = Field(alias="ID")
    visible_name: str = Field(default="New Document", alias="VissibleName")
    deleted: bool = False
    last_modified: str = Field(default_factory=_now_iso, alias="lastModified")
    modified_client: str = Field(default_factory=_now_iso, alias="ModifiedClient")
    metadatamodified: bool = False
    modified: bool = False
    parent: str = ""
    pinned: bool = False
    synced: bool = True
    type: ItemType = ItemType.DOCUMENT
    version: int = 1

    def to_wire(self) -> dict[str, Any]:
        return self.model_dump(by_alias=True, mode="json")


__all__ = [
    "ItemType",
    "ServiceDiscoveryResponse",
    "ItemRecord",
    "OperationResult",
    "UploadRequestResult",
    "DocumentContent",
    "DocumentMetadata",
]
