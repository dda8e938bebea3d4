"""
SDK Exceptions
"""

from typing import Optional, Dict, Any

import httpx


class FileFlexorError(Exception):
    """Base exception for FileFlexor SDK."""

    def __init__(
        self,
        message: str,
        code: str = "UNKNOWN_ERROR",
        status_code: Optional[int] = None,
        details: Optional[Dict[str, Any]] = None,
    ):
        super().__init__(message)
        self.message = message
        self.code = code
        self.status_code = status_code
        self.details = details or {}

    def to_dict(self) -> Dict[str, Any]:
        return {
            "message": self.message,
            "code": self.code,
            "status_code": self.status_code,
            "details": self.details,
        }


class ValidationError(FileFlexorError):
    """Raised when the service rejects a request (bad type, missing or unsupported parameters)."""

    def __init__(
        self,
        message: str,
        code: str = "VALIDATION_ERROR",
        details: Optional[Dict[str, Any]] = None,
    ):
        super().__init__(message, code, 400, details)


class NotFoundError(FileFlexorError):
    """Raised when an uploaded or processed file does not exist."""

    def __init__(
        self,
        resource_id: Optional[str] = None,
        message: Optional[str] = None,
    ):
        msg = message or f"File not found{f': {resource_id}' if resource_id else ''}"
        super().__init__(msg, "FILE_NOT_FOUND", 404)
        self.resource_id = resource_id


class PayloadTooLargeError(FileFlexorError):
    """Raised when an upload exceeds the service's size limit."""

    def __init__(self, message: str = "File too large"):
        super().__init__(message, "PAYLOAD_TOO_LARGE", 413)


class ServerError(FileFlexorError):
    """Raised when there's a server error."""

    def __init__(
        self,
        message: str = "Internal server error",
        status_code: int = 500,
        details: Optional[Dict[str, Any]] = None,
    ):
        super().__init__(message, "SERVER_ERROR", status_code, details)


def raise_for_response(response: httpx.Response) -> None:
    """Raise the matching SDK error for a failed response."""
    if response.is_success:
        return

    try:
        body = response.json()
    except ValueError:
        body = {}
    message = body.get("error") or response.reason_phrase or "Request failed"
    code = body.get("code")

    if response.status_code == 404:
        raise NotFoundError(message=message)
    if response.status_code == 413:
        raise PayloadTooLargeError(message)
    if 400 <= response.status_code < 500:
        raise ValidationError(message, code=code or "VALIDATION_ERROR", details=body)
    raise ServerError(message, status_code=response.status_code, details=body)
