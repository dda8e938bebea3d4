"""
Files Client
"""

from typing import Optional, BinaryIO, Union
from pathlib import Path
import mimetypes
import httpx
from .errors import raise_for_response
from .types import UploadedFile


class FilesClient:
    """Upload and download client."""

    def __init__(self, http: httpx.Client):
        self._http = http

    def upload(
        self,
        file: BinaryIO,
        filename: str,
        mime_type: Optional[str] = None,
    ) -> UploadedFile:
        """Upload a file. The MIME type is guessed from the filename when omitted."""
        if mime_type is None:
            mime_type = mimetypes.guess_type(filename)[0] or "application/octet-stream"

        response = self._http.post(
            "/api/upload",
            files={"file": (filename, file, mime_type)},
        )
        raise_for_response(response)
        return self._parse_file(response.json()["file"])

    def upload_path(self, path: Union[str, Path], mime_type: Optional[str] = None) -> UploadedFile:
        """Upload a file from disk."""
        path = Path(path)
        with open(path, "rb") as f:
            return self.upload(f, path.name, mime_type)

    def download(self, download_url: str) -> bytes:
        """
        Download a processed file.

        Accepts either the ``downloadUrl`` returned by processing or a bare
        result filename. The service removes the file shortly afterwards, so
        each result can be downloaded once.
        """
        response = self._http.get(self._download_path(download_url))
        raise_for_response(response)
        return response.content

    def download_to(self, download_url: str, destination: Union[str, Path]) -> Path:
        """Download a processed file and write it to destination."""
        destination = Path(destination)
        destination.write_bytes(self.download(download_url))
        return destination

    @staticmethod
    def _download_path(download_url: str) -> str:
        if download_url.startswith("/api/download/"):
            return download_url
        return f"/api/download/{download_url}"

    def _parse_file(self, data: dict) -> UploadedFile:
        return UploadedFile(
            id=data["id"],
            original_name=data["originalName"],
            size=data["size"],
            formatted_size=data["formattedSize"],
            type=data["type"],
        )
