from __future__ import annotations


class RemarkableError(Exception):
    """Base class for every error raised by remarkable_cloud itself.

    Transport failures (``httpx.HTTPError`` and subclasses) are not wrapped;
    they propagate to the caller unchanged.
    """


class AuthenticationRequiredError(RemarkableError):
    """The operation needs a device or session token that is not present."""


class RegistrationError(RemarkableError):
    """Device registration was attempted without a pairing code."""


class BlobNotFoundError(RemarkableError):
    """The item does not exist or carries no ``BlobURLGet`` reference."""


class UploadError(RemarkableError):
    def __init__(self, message: str, *, doc_id: str | None = None):
        super().__init__(message)
        self.doc_id = doc_id


class UploadRequestError(UploadError):
    """Phase 1: the service refused the write slot or returned no ``BlobURLPut``."""


class UploadTransferError(UploadError):
    """Phase 2: the blob PUT did not answer 200."""

    def __init__(self, message: str, *, doc_id: str | None = None, status_code: int | None = None):
        super().__init__(message, doc_id=doc_id)
        self.status_code = status_code


class MetadataUpdateError(UploadError):
    """Phase 3: the update-status call reported failure."""


__all__ = [
    "RemarkableError",
    "AuthenticationRequiredError",
    "RegistrationError",
    "BlobNotFoundError",
    "UploadError",
    "UploadRequestError",
    "UploadTransferError",
    "MetadataUpdateError",
]
