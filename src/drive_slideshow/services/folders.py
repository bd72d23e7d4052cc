"""Root folder URL and folder selection settings."""

import json
import logging
import re
from dataclasses import dataclass

from drive_slideshow.domain.drive import ROOT_FOLDER_SENTINEL, FolderSelection
from drive_slideshow.domain.errors import InvalidFolderUrlError
from drive_slideshow.services.store import KeyValueStore, StorageKeys

logger = logging.getLogger(__name__)

_FOLDER_ID_PATTERN = re.compile(r"/folders/([^/?#]+)")


def parse_folder_url(url: str) -> str:
    """Extract the folder id following ``/folders/`` in a Drive share URL."""
    match = _FOLDER_ID_PATTERN.search(url.strip())
    if not match:
        raise InvalidFolderUrlError(f"Invalid folder URL format: {url!r}")
    return match.group(1)


@dataclass
class FolderSelectionService:
    """Reads and persists which Drive folders feed the slideshow."""

    store: KeyValueStore

    async def get_root_folder_url(self) -> str | None:
        """Return the saved shared folder URL, if any."""
        return await self.store.get_item(StorageKeys.ROOT_FOLDER_URL) or None

    async def save_root_folder_url(self, url: str) -> str:
        """Validate and persist the shared folder URL, returning its folder id."""
        cleaned = url.strip()
        if not cleaned:
            raise InvalidFolderUrlError("Please enter a Google Drive folder URL")
        folder_id = parse_folder_url(cleaned)
        await self.store.set_item(StorageKeys.ROOT_FOLDER_URL, cleaned)
        logger.info("Saved shared folder %s", folder_id)
        return folder_id

    async def get_selected_folder_ids(self) -> tuple[str, ...]:
        """Return the selected folder ids in stored order."""
        raw = await self.store.get_item(StorageKeys.SELECTED_FOLDERS)
        if not raw:
            return (ROOT_FOLDER_SENTINEL,)
        try:
            data = json.loads(raw)
        except json.JSONDecodeError:
            logger.warning("Stored folder selection is unreadable, using root")
            return (ROOT_FOLDER_SENTINEL,)
        if not isinstance(data, list):
            return (ROOT_FOLDER_SENTINEL,)
        ids = _unique([str(item) for item in data if item])
        return ids or (ROOT_FOLDER_SENTINEL,)

    async def set_selected_folder_ids(self, folder_ids: list[str]) -> tuple[str, ...]:
        """Persist a new selection. An empty selection falls back to root."""
        ids = _unique([folder_id for folder_id in folder_ids if folder_id])
        if not ids:
            ids = (ROOT_FOLDER_SENTINEL,)
        await self.store.set_item(StorageKeys.SELECTED_FOLDERS, json.dumps(list(ids)))
        return ids

    async def toggle_folder(self, folder_id: str) -> tuple[str, ...]:
        """Add or remove a folder, always keeping at least one selected."""
        current = list(await self.get_selected_folder_ids())
        if folder_id in current:
            if len(current) == 1:
                return tuple(current)
            current.remove(folder_id)
        else:
            current.append(folder_id)
        return await self.set_selected_folder_ids(current)

    async def get_selection(self) -> FolderSelection:
        """Return the full folder selection."""
        return FolderSelection(
            root_folder_url=await self.get_root_folder_url(),
            selected_folder_ids=await self.get_selected_folder_ids(),
        )


def _unique(values: list[str]) -> tuple[str, ...]:
    return tuple(dict.fromkeys(values))
