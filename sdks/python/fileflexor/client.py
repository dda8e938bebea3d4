"""
Main FileFlexor Client
"""

from datetime import datetime
from typing import Optional
import httpx
from .errors import raise_for_response
from .files import FilesClient
from .processing import ProcessingClient
from .types import FileFlexorConfig, HealthStatus


class FileFlexorClient:
    """
    Main client for the FileFlexor API.

    Usage:
        client = FileFlexorClient(base_url="http://localhost:3001")

        # Upload file
        with open("photo.png", "rb") as f:
            file = client.files.upload(f, filename="photo.png")

        # Process file
        result = client.processing.convert(file.id, "webp", quality=70)

        # Download result
        data = client.files.download(result.download_url)
    """

    def __init__(
        self,
        base_url: str,
        timeout: float = 30.0,
        transport: Optional[httpx.BaseTransport] = None,
    ):
        self.config = FileFlexorConfig(base_url=base_url, timeout=timeout)

        self._http = httpx.Client(
            base_url=base_url,
            timeout=timeout,
            headers={"Accept": "application/json"},
            transport=transport,
        )

        # Initialize sub-clients
        self.files = FilesClient(self._http)
        self.processing = ProcessingClient(self._http)

    def health(self) -> HealthStatus:
        """Get service health status."""
        response = self._http.get("/api/health")
        raise_for_response(response)
        data = response.json()
        timestamp = data.get("timestamp")
        return HealthStatus(
            status=data["status"],
            timestamp=datetime.fromisoformat(timestamp.replace("Z", "+00:00")) if timestamp else None,
        )

    def alive(self) -> bool:
        """Check if service is alive."""
        try:
            return self.health().status == "OK"
        except (httpx.HTTPError, ValueError):
            return False

    def close(self) -> None:
        """Close the HTTP client."""
        self._http.close()

    def __enter__(self):
        return self

    def __exit__(self, exc_type, exc_val, exc_tb):
        self.close()
