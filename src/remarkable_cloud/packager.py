from __future__ import annotations

import logging
from dataclasses import dataclass, field
from types import MappingProxyType
from typing import Callable, Mapping

from . import archive, identity
from .models import DocumentContent
from .session import SessionManager
from .transfer import TransferPipeline

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class DocumentPackage:
    """Immutable set of entries making up one uploadable PDF document."""

    doc_id: str
    entries: Mapping[str, archive.Entry] = field(default_factory=dict)

    @classmethod
    def for_pdf(cls, doc_id: str, pdf: bytes, content: DocumentContent | None = None) -> "DocumentPackage":
        descriptor = (content or DocumentContent()).model_dump_json()
        return cls(
            doc_id=doc_id,
            entries=MappingProxyType(
                {
                    f"{doc_id}.content": descriptor,
                    f"{doc_id}.pagedata": b"",
                    f"{doc_id}.pdf": bytes(pdf),
                }
            ),
        )

    def build(self) -> bytes:
        return archive.build(self.entries)


class DocumentPackager:
    """Packages PDFs and publishes them through the transfer pipeline."""

    def __init__(
        self,
        session: SessionManager,
        pipeline: TransferPipeline,
        *,
        id_factory: Callable[[], str] = identity.new_id,
    ):
        self._session = session
        self._pipeline = pipeline
        self._new_id = id_factory

    async def upload_document(self, name: str, pdf: bytes) -> str:
        """Upload ``pdf`` as a document called ``name``; returns its new id.

        Every call packages into a fresh container, so concurrent uploads
        never share state.
        """
        self._session.require_token()
        doc_id = self._new_id()
        container = DocumentPackage.for_pdf(doc_id, pdf).build()
        logger.debug("Packaged %s (%d bytes)", doc_id, len(container), extra={"doc_id": doc_id})

        await self._pipeline.upload_package(name, doc_id, container)
        return doc_id
