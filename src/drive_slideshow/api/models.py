"""Request and response models for the HTTP API."""

from pydantic import BaseModel, Field


class UserOut(BaseModel):
    id: str
    email: str
    name: str
    photo: str | None = None


class AuthStatusOut(BaseModel):
    signed_in: bool
    user: UserOut | None = None


class PhotoOut(BaseModel):
    id: str
    name: str
    mime_type: str
    preview_url: str
    size: str | None = None


class PhotosOut(BaseModel):
    photos: list[PhotoOut]
    failed_folder_ids: list[str] = Field(default_factory=list)
    error: str | None = None


class FolderOut(BaseModel):
    id: str
    name: str


class DisplayPreferencesIn(BaseModel):
    """Partial update of the display preferences."""

    show_email: bool | None = None
    show_controls: bool | None = None
    show_photo_counter: bool | None = None
    top_bar_opacity: float | None = None


class DisplayPreferencesOut(BaseModel):
    show_email: bool
    show_controls: bool
    show_photo_counter: bool
    top_bar_opacity: float


class FolderUrlIn(BaseModel):
    url: str


class FolderSelectionIn(BaseModel):
    folder_ids: list[str]


class SettingsOut(BaseModel):
    root_folder_url: str | None
    selected_folder_ids: list[str]
    display: DisplayPreferencesOut


class SlideshowOut(BaseModel):
    playing: bool
    index: int
    total: int
    current: PhotoOut | None = None
    error: str | None = None
    is_loading: bool = False
