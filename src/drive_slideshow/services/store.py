"""Persistent key-value storage interface and key names."""

from typing import Protocol


class KeyValueStore(Protocol):
    """Scoped string key-value storage that survives restarts."""

    async def get_item(self, key: str) -> str | None:
        """Return the stored value for a key, if present."""

    async def set_item(self, key: str, value: str) -> None:
        """Store a value under a key, replacing any previous value."""

    async def remove_item(self, key: str) -> None:
        """Delete a key. Missing keys are ignored."""


class StorageKeys:
    """Persisted key names shared with earlier releases of the app."""

    USER = "google_auth_user"
    ACCESS_TOKEN = "google_auth_token"
    REFRESH_TOKEN = "google_auth_refresh_token"
    TOKEN_EXPIRES_AT = "google_auth_expires_at"
    PENDING_CODE = "temp_auth_code"
    PENDING_CODE_TIME = "oauth_completion_time"
    ROOT_FOLDER_URL = "shared_moments_folder_url"
    SELECTED_FOLDERS = "selected_folders"
    SHOW_EMAIL = "show_email"
    SHOW_CONTROLS = "show_controls"
    SHOW_PHOTO_COUNTER = "show_photo_counter"
    TOP_BAR_OPACITY = "top_bar_opacity"

    SESSION = (USER, ACCESS_TOKEN, REFRESH_TOKEN, TOKEN_EXPIRES_AT)
    PENDING_AUTHORIZATION = (PENDING_CODE, PENDING_CODE_TIME)
