"""Builds the slideshow's photo sequence from the selected folders."""

import asyncio
import logging
from dataclasses import dataclass

from drive_slideshow.domain.drive import (
    ROOT_FOLDER_SENTINEL,
    AggregationResult,
    Folder,
    Photo,
)
from drive_slideshow.domain.errors import (
    PhotosNotConfiguredError,
    UnauthenticatedError,
)
from drive_slideshow.services.drive import PhotoLister
from drive_slideshow.services.folders import FolderSelectionService, parse_folder_url

logger = logging.getLogger(__name__)


@dataclass
class PhotoAggregator:
    """Fans out listing calls over the selection and merges the results."""

    lister: PhotoLister
    folders: FolderSelectionService

    async def resolve_root_folder_id(self) -> str:
        """Return the folder id of the saved shared folder URL."""
        url = await self.folders.get_root_folder_url()
        if not url:
            raise PhotosNotConfiguredError(
                "No shared folder URL configured. Please set it in Settings."
            )
        return parse_folder_url(url)

    async def load_photos(self) -> AggregationResult:
        """List every selected folder concurrently and deduplicate by photo id.

        A folder whose listing fails is logged and skipped; the remaining
        folders still contribute. Missing credentials abort the whole pass.
        """
        root_id = await self.resolve_root_folder_id()
        if not self.lister.has_access_token:
            raise UnauthenticatedError("Sign in to Google Drive to load photos")
        targets = await self.folders.get_selected_folder_ids()
        logger.info("Loading photos from folders: %s", ", ".join(targets))

        results = await asyncio.gather(
            *(
                self.lister.list_photos(
                    root_id if folder_id == ROOT_FOLDER_SENTINEL else folder_id
                )
                for folder_id in targets
            ),
            return_exceptions=True,
        )

        combined: list[Photo] = []
        failed: list[str] = []
        for folder_id, result in zip(targets, results, strict=True):
            if isinstance(result, UnauthenticatedError):
                raise result
            if isinstance(result, Exception):
                logger.error("Error loading photos from folder %s: %s", folder_id, result)
                failed.append(folder_id)
                continue
            if isinstance(result, BaseException):
                raise result
            combined.extend(result)

        photos = _dedupe_by_id(combined)
        logger.info(
            "Loaded %d total photos from %d folders", len(photos), len(targets)
        )
        return AggregationResult(
            photos=tuple(photos),
            folder_ids=targets,
            failed_folder_ids=tuple(failed),
        )

    async def list_root_subfolders(self) -> list[Folder]:
        """Return the folders directly inside the shared root folder."""
        root_id = await self.resolve_root_folder_id()
        return await self.lister.list_subfolders(root_id)


def _dedupe_by_id(photos: list[Photo]) -> list[Photo]:
    seen: set[str] = set()
    unique: list[Photo] = []
    for photo in photos:
        if photo.id in seen:
            continue
        seen.add(photo.id)
        unique.append(photo)
    return unique
