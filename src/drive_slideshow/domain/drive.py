"""Domain models for Drive folders and photos."""

from dataclasses import dataclass, field

ROOT_FOLDER_SENTINEL = "root"
FOLDER_MIME_TYPE = "application/vnd.google-apps.folder"
IMAGE_MIME_PREFIX = "image/"


@dataclass(frozen=True)
class Folder:
    """A Drive folder."""

    id: str
    name: str
    mime_type: str = FOLDER_MIME_TYPE


@dataclass(frozen=True)
class Photo:
    """A displayable image file in Drive."""

    id: str
    name: str
    mime_type: str
    preview_url: str
    web_content_link: str | None = None
    size: str | None = None


@dataclass(frozen=True)
class FolderSelection:
    """The configured root folder and the folders chosen for the slideshow."""

    root_folder_url: str | None = None
    selected_folder_ids: tuple[str, ...] = (ROOT_FOLDER_SENTINEL,)


@dataclass(frozen=True)
class AggregationResult:
    """Flat, deduplicated photo sequence built from the selected folders."""

    photos: tuple[Photo, ...]
    folder_ids: tuple[str, ...] = ()
    failed_folder_ids: tuple[str, ...] = field(default_factory=tuple)

    @property
    def is_partial(self) -> bool:
        return bool(self.failed_folder_ids)
