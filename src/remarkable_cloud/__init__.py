from ._version import __version__
from .client import RemarkableClient
from .directory import DocumentDirectory
from .exceptions import (
    AuthenticationRequiredError,
    BlobNotFoundError,
    MetadataUpdateError,
    RegistrationError,
    RemarkableError,
    UploadError,
    UploadRequestError,
    UploadTransferError,
)
from .models import (
    DocumentContent,
    DocumentMetadata,
    ItemRecord,
    ItemType,
    OperationResult,
    ServiceDiscoveryResponse,
    UploadRequestResult,
)
from .packager import DocumentPackage, DocumentPackager
from .session import SessionManager
from .settings import EndpointOptions, RemarkableSettings, get_settings
from .transfer import TransferPipeline
from .transport import Transport

__all__ = [
    "__version__",
    # Client
    "RemarkableClient",
    # Components
    "SessionManager",
    "DocumentDirectory",
    "TransferPipeline",
    "DocumentPackage",
    "DocumentPackager",
    "Transport",
    # Config
    "RemarkableSettings",
    "EndpointOptions",
    "get_settings",
    # Models
    "ItemType",
    "ItemRecord",
    "OperationResult",
    "UploadRequestResult",
    "ServiceDiscoveryResponse",
    "DocumentContent",
    "DocumentMetadata",
    # Exceptions
    "RemarkableError",
    "AuthenticationRequiredError",
    "RegistrationError",
    "BlobNotFoundError",
    "UploadError",
    "UploadRequestError",
    "UploadTransferError",
    "MetadataUpdateError",
]
