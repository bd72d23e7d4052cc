"""Folder and photo listing over the Drive API."""

import logging
from dataclasses import dataclass, field

from drive_slideshow.adapters.drive_client import DriveClient
from drive_slideshow.domain.drive import (
    FOLDER_MIME_TYPE,
    IMAGE_MIME_PREFIX,
    Folder,
    Photo,
)
from drive_slideshow.domain.errors import UnauthenticatedError

logger = logging.getLogger(__name__)

PHOTO_FIELDS = "id,name,mimeType,thumbnailLink,webContentLink,size"
FOLDER_FIELDS = "id,name,mimeType"
THUMBNAIL_URL = "https://drive.google.com/thumbnail?id={file_id}&sz=w{width}"


def build_preview_url(file_id: str, width: int = 800) -> str:
    """Return the thumbnail URL for a file.

    The URL carries no credentials; whoever fetches it must send the bearer
    token as a header.
    """
    return THUMBNAIL_URL.format(file_id=file_id, width=width)


@dataclass
class PhotoLister:
    """Lists child folders and child images of a Drive folder.

    Only the first ``page_size`` entries of a folder are read unless
    ``follow_pages`` is set, in which case ``nextPageToken`` is followed until
    the listing is exhausted.
    """

    client: DriveClient
    thumbnail_width: int = 800
    page_size: int = 100
    follow_pages: bool = False
    _access_token: str | None = field(default=None, init=False, repr=False)

    def set_access_token(self, token: str | None) -> None:
        """Set or clear the bearer token used for listing calls."""
        self._access_token = token
        if token:
            logger.info("Drive access token set")

    @property
    def has_access_token(self) -> bool:
        return self._access_token is not None

    def _require_token(self) -> str:
        if not self._access_token:
            raise UnauthenticatedError("No access token available")
        return self._access_token

    async def list_photos(self, folder_id: str) -> list[Photo]:
        """Return the image files directly inside a folder."""
        token = self._require_token()
        entries = await self._list(
            token,
            query=f"'{_quote(folder_id)}' in parents and trashed=false",
            item_fields=PHOTO_FIELDS,
        )
        photos = [
            Photo(
                id=entry["id"],
                name=entry.get("name", ""),
                mime_type=entry["mimeType"],
                preview_url=build_preview_url(entry["id"], self.thumbnail_width),
                web_content_link=entry.get("webContentLink"),
                size=_optional_str(entry.get("size")),
            )
            for entry in entries
            if str(entry.get("mimeType", "")).startswith(IMAGE_MIME_PREFIX)
        ]
        logger.info("Found %d photos in folder %s", len(photos), folder_id)
        return photos

    async def list_subfolders(self, folder_id: str) -> list[Folder]:
        """Return the folders directly inside a folder."""
        token = self._require_token()
        entries = await self._list(
            token,
            query=(
                f"'{_quote(folder_id)}' in parents and mimeType='{FOLDER_MIME_TYPE}' "
                "and trashed=false"
            ),
            item_fields=FOLDER_FIELDS,
        )
        folders = [
            Folder(
                id=entry["id"],
                name=entry.get("name", ""),
                mime_type=entry.get("mimeType", FOLDER_MIME_TYPE),
            )
            for entry in entries
        ]
        logger.info("Found %d folders in folder %s", len(folders), folder_id)
        return folders

    async def fetch_photo_content(self, photo_id: str) -> bytes:
        """Download a photo's bytes with the current bearer token."""
        token = self._require_token()
        return await self.client.download_file(token, photo_id)

    async def _list(
        self, token: str, query: str, item_fields: str
    ) -> list[dict[str, object]]:
        fields = f"files({item_fields})"
        if self.follow_pages:
            fields = f"nextPageToken, {fields}"
        entries: list[dict[str, object]] = []
        page_token: str | None = None
        while True:
            data = await self.client.list_files(
                token,
                query=query,
                fields=fields,
                page_size=self.page_size,
                page_token=page_token,
            )
            files = data.get("files", [])
            if isinstance(files, list):
                entries.extend(files)
            next_token = data.get("nextPageToken")
            if not self.follow_pages or not next_token:
                return entries
            page_token = str(next_token)


def _quote(value: str) -> str:
    """Escape a value for use inside a single-quoted Drive query string."""
    return value.replace("\\", "\\\\").replace("'", "\\'")


def _optional_str(value: object) -> str | None:
    if value is None:
        return None
    return str(value)
