"""
Processing Client
"""

from typing import Optional
import httpx
from .errors import raise_for_response
from .types import ConversionOptions, Operation, ProcessedResult


class ProcessingClient:
    """Compression and conversion client."""

    def __init__(self, http: httpx.Client):
        self._http = http

    def process(
        self,
        file_id: str,
        operation: str,
        target_format: Optional[str] = None,
        quality: Optional[int] = None,
    ) -> ProcessedResult:
        """Run an operation on an uploaded file."""
        payload = {"fileId": file_id, "operation": operation}
        if target_format:
            payload["targetFormat"] = target_format
        if quality is not None:
            payload["quality"] = quality

        response = self._http.post("/api/process", json=payload)
        raise_for_response(response)
        return self._parse_result(response.json()["result"])

    def compress(self, file_id: str, quality: Optional[int] = None) -> ProcessedResult:
        """Compress an uploaded image or PDF."""
        return self.process(file_id, Operation.COMPRESS.value, quality=quality)

    def convert(
        self,
        file_id: str,
        target_format: str,
        quality: Optional[int] = None,
    ) -> ProcessedResult:
        """Convert an uploaded file to target_format."""
        return self.process(file_id, Operation.CONVERT.value, target_format, quality)

    def conversion_options(self, mime_type: str) -> ConversionOptions:
        """List the operations the service offers for a MIME type."""
        response = self._http.get("/api/conversions", params={"type": mime_type})
        raise_for_response(response)
        data = response.json()
        return ConversionOptions(
            type=data["type"],
            can_compress=data["canCompress"],
            target_formats=data["targetFormats"],
        )

    def _parse_result(self, data: dict) -> ProcessedResult:
        return ProcessedResult(
            filename=data["filename"],
            size=data["size"],
            formatted_size=data["formattedSize"],
            download_url=data["downloadUrl"],
        )
