"""
Service exceptions

Every error raised by the handlers derives from FileFlexorError and is turned
into a JSON error body by the exception handlers registered in main.py.
"""

from typing import Optional, Dict, Any


class FileFlexorError(Exception):
    """Base exception for the service."""

    def __init__(
        self,
        message: str,
        code: str = "INTERNAL_FAILURE",
        status_code: int = 500,
        details: Optional[Dict[str, Any]] = None,
    ):
        super().__init__(message)
        self.message = message
        self.code = code
        self.status_code = status_code
        self.details = details or {}

    def to_dict(self) -> Dict[str, Any]:
        return {
            "success": False,
            "error": self.message,
            "code": self.code,
        }


class InvalidFileType(FileFlexorError):
    """Raised when an upload declares a MIME type outside the whitelist."""

    def __init__(
        self,
        message: str = "Invalid file type. Only PDF, DOCX, PPTX, JPG, and PNG files are allowed.",
        details: Optional[Dict[str, Any]] = None,
    ):
        super().__init__(message, "INVALID_FILE_TYPE", 400, details)


class PayloadTooLarge(FileFlexorError):
    """Raised when an upload exceeds the size limit."""

    def __init__(self, max_size: int, details: Optional[Dict[str, Any]] = None):
        super().__init__(
            f"File too large. Maximum size is {max_size // (1024 * 1024)}MB.",
            "PAYLOAD_TOO_LARGE",
            413,
            details,
        )
        self.max_size = max_size


class MissingParameter(FileFlexorError):
    """Raised when a required request parameter is absent."""

    def __init__(self, message: str = "Missing required parameters", field: Optional[str] = None):
        super().__init__(message, "MISSING_PARAMETER", 400)
        self.field = field


class InvalidFilename(FileFlexorError):
    """Raised when a file token is not a bare filename."""

    def __init__(self, filename: str):
        super().__init__("Invalid filename", "INVALID_FILENAME", 400, {"filename": filename})
        self.filename = filename


class FileNotFound(FileFlexorError):
    """Raised when an identifier or download token does not resolve to a file."""

    def __init__(self, filename: Optional[str] = None, message: str = "File not found"):
        super().__init__(message, "FILE_NOT_FOUND", 404, {"filename": filename} if filename else None)
        self.filename = filename


class UnsupportedOperation(FileFlexorError):
    """Raised when an operation is not available for a file type."""

    def __init__(self, message: str, details: Optional[Dict[str, Any]] = None):
        super().__init__(message, "UNSUPPORTED_OPERATION", 400, details)


class UnsupportedConversion(UnsupportedOperation):
    """Raised when no transform exists for a (file type, target format) pair."""

    def __init__(self, source_extension: str, target_format: str):
        super().__init__(
            "Conversion not supported for this file type combination",
            {"source": source_extension, "target": target_format},
        )
        self.code = "UNSUPPORTED_CONVERSION"
        self.source_extension = source_extension
        self.target_format = target_format


class InternalFailure(FileFlexorError):
    """Raised when a codec, PDF library or filesystem call fails."""

    def __init__(self, message: str = "Processing failed", details: Optional[Dict[str, Any]] = None):
        super().__init__(message, "INTERNAL_FAILURE", 500, details)
