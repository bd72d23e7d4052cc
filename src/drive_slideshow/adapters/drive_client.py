"""Google Drive v3 API client."""

from dataclasses import dataclass
from typing import Protocol

import httpx

from drive_slideshow.domain.errors import ProviderRequestFailedError

DRIVE_API_BASE = "https://www.googleapis.com/drive/v3"


class DriveClient(Protocol):
    """Interface for Google Drive file operations."""

    async def list_files(
        self,
        access_token: str,
        query: str,
        fields: str,
        page_size: int,
        page_token: str | None = None,
    ) -> dict[str, object]:
        """Return one page of the files matching a Drive query."""

    async def download_file(self, access_token: str, file_id: str) -> bytes:
        """Return the raw content of a file."""


@dataclass
class HttpxDriveClient(DriveClient):
    """Drive client implemented with httpx."""

    http_client: httpx.AsyncClient
    base_url: str = DRIVE_API_BASE

    @classmethod
    def create(cls) -> "HttpxDriveClient":
        """Create a Drive client with a managed httpx session."""
        return cls(http_client=httpx.AsyncClient())

    async def list_files(
        self,
        access_token: str,
        query: str,
        fields: str,
        page_size: int,
        page_token: str | None = None,
    ) -> dict[str, object]:
        """List files with the ``files.list`` endpoint."""
        params: dict[str, str | int] = {
            "q": query,
            "fields": fields,
            "pageSize": page_size,
        }
        if page_token:
            params["pageToken"] = page_token
        response = await self.http_client.get(
            f"{self.base_url}/files",
            params=params,
            headers=_bearer(access_token),
            timeout=30,
        )
        if response.is_error:
            raise ProviderRequestFailedError(response.status_code, response.text)
        return response.json()

    async def download_file(self, access_token: str, file_id: str) -> bytes:
        """Download file content with ``alt=media``."""
        response = await self.http_client.get(
            f"{self.base_url}/files/{file_id}",
            params={"alt": "media"},
            headers=_bearer(access_token),
            timeout=60,
        )
        if response.is_error:
            raise ProviderRequestFailedError(response.status_code, response.text)
        return response.content

    async def close(self) -> None:
        """Close the underlying HTTP session."""
        await self.http_client.aclose()


def _bearer(access_token: str) -> dict[str, str]:
    return {"Authorization": f"Bearer {access_token}"}
