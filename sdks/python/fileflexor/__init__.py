"""
FileFlexor Python SDK
Client for the FileFlexor upload, compress and convert API
"""

from .client import FileFlexorClient
from .files import FilesClient
from .processing import ProcessingClient
from .types import UploadedFile, ProcessedResult, ConversionOptions, HealthStatus, Operation
from .errors import (
    FileFlexorError,
    ValidationError,
    NotFoundError,
    PayloadTooLargeError,
    ServerError,
)

__version__ = "1.0.0"
__all__ = [
    "FileFlexorClient",
    "FilesClient",
    "ProcessingClient",
    "UploadedFile",
    "ProcessedResult",
    "ConversionOptions",
    "HealthStatus",
    "Operation",
    "FileFlexorError",
    "ValidationError",
    "NotFoundError",
    "PayloadTooLargeError",
    "ServerError",
]
