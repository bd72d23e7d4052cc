"""Shared test fixtures."""

import asyncio
from dataclasses import dataclass, field

import pytest

from drive_slideshow.adapters.drive_client import DriveClient
from drive_slideshow.adapters.google_oauth_client import GoogleOAuthClient
from drive_slideshow.config import Settings
from drive_slideshow.containers import AppContainer
from drive_slideshow.domain.auth import DriveUser, TokenGrant
from drive_slideshow.domain.drive import FOLDER_MIME_TYPE
from drive_slideshow.domain.errors import (
    ConfigurationMissingError,
    ProviderRequestFailedError,
)
from drive_slideshow.services.aggregator import PhotoAggregator
from drive_slideshow.services.auth import AuthService
from drive_slideshow.services.drive import PhotoLister
from drive_slideshow.services.folders import FolderSelectionService
from drive_slideshow.services.preferences import DisplayPreferencesService
from drive_slideshow.services.slideshow import SlideshowController
from drive_slideshow.services.store import KeyValueStore

SHARED_FOLDER_URL = "https://drive.google.com/drive/folders/ROOT123?usp=sharing"


@dataclass
class InMemoryKeyValueStore(KeyValueStore):
    """In-memory key-value store for tests."""

    items: dict[str, str] = field(default_factory=dict)

    async def get_item(self, key: str) -> str | None:
        return self.items.get(key)

    async def set_item(self, key: str, value: str) -> None:
        self.items[key] = value

    async def remove_item(self, key: str) -> None:
        self.items.pop(key, None)


@dataclass
class FailingRemoveStore(InMemoryKeyValueStore):
    """Store whose removals always fail."""

    async def remove_item(self, key: str) -> None:
        raise OSError("disk unavailable")


@dataclass
class FakeGoogleOAuthClient(GoogleOAuthClient):
    """Fake OAuth client with scripted token and profile responses."""

    configured: bool = True
    grant: TokenGrant = field(
        default_factory=lambda: TokenGrant(
            access_token="access-1", refresh_token="refresh-1", expires_in=3600
        )
    )
    refreshed_grant: TokenGrant = field(
        default_factory=lambda: TokenGrant(access_token="access-2", expires_in=3600)
    )
    user: DriveUser = field(
        default_factory=lambda: DriveUser(
            id="user-1",
            email="viewer@example.com",
            name="Photo Viewer",
            photo="https://example.com/avatar.png",
        )
    )
    fail_exchange: bool = False
    fail_profile: bool = False
    fail_refresh: bool = False
    refresh_error: Exception | None = None
    exchange_gate: asyncio.Event | None = None
    exchanged_codes: list[str] = field(default_factory=list)
    refreshed_tokens: list[str] = field(default_factory=list)

    def build_authorization_url(self, state: str | None = None) -> str:
        if not self.configured:
            raise ConfigurationMissingError("Google OAuth client id is not configured.")
        return "https://accounts.example.com/auth?client_id=client"

    async def exchange_code(self, code: str) -> TokenGrant:
        self.exchanged_codes.append(code)
        if self.exchange_gate is not None:
            await self.exchange_gate.wait()
        if self.fail_exchange:
            raise ProviderRequestFailedError(400, '{"error": "invalid_grant"}')
        return self.grant

    async def refresh_access_token(self, refresh_token: str) -> TokenGrant:
        self.refreshed_tokens.append(refresh_token)
        if self.refresh_error is not None:
            raise self.refresh_error
        if self.fail_refresh:
            raise ProviderRequestFailedError(400, '{"error": "invalid_grant"}')
        return self.refreshed_grant

    async def fetch_user_info(self, access_token: str) -> DriveUser:
        if self.fail_profile:
            raise ProviderRequestFailedError(401, "unauthorized")
        return self.user


def image_entry(file_id: str, mime_type: str = "image/jpeg") -> dict[str, object]:
    return {
        "id": file_id,
        "name": f"{file_id}.jpg",
        "mimeType": mime_type,
        "size": "1024",
    }


def folder_entry(folder_id: str, name: str) -> dict[str, object]:
    return {"id": folder_id, "name": name, "mimeType": FOLDER_MIME_TYPE}


@dataclass
class FakeDriveClient(DriveClient):
    """Fake Drive client serving entries per parent folder."""

    folders: dict[str, list[dict[str, object]]] = field(default_factory=dict)
    failing: set[str] = field(default_factory=set)
    page_size_override: int | None = None
    calls: list[dict[str, object]] = field(default_factory=list)
    content: bytes = b"image-bytes"
    download_error: Exception | None = None

    async def list_files(
        self,
        access_token: str,
        query: str,
        fields: str,
        page_size: int,
        page_token: str | None = None,
    ) -> dict[str, object]:
        self.calls.append(
            {
                "access_token": access_token,
                "query": query,
                "fields": fields,
                "page_size": page_size,
                "page_token": page_token,
            }
        )
        folder_id = query.split("'")[1]
        if folder_id in self.failing:
            raise ProviderRequestFailedError(404, "File not found")
        entries = self.folders.get(folder_id, [])
        if "mimeType=" in query:
            entries = [e for e in entries if e["mimeType"] == FOLDER_MIME_TYPE]
        size = self.page_size_override or page_size
        start = int(page_token or 0)
        page = entries[start : start + size]
        data: dict[str, object] = {"files": page}
        if start + size < len(entries):
            data["nextPageToken"] = str(start + size)
        return data

    async def download_file(self, access_token: str, file_id: str) -> bytes:
        if self.download_error is not None:
            raise self.download_error
        if file_id in self.failing:
            raise ProviderRequestFailedError(404, "File not found")
        return self.content


@pytest.fixture
def settings() -> Settings:
    return Settings(
        google_client_id="client-id",
        google_client_secret="client-secret",
        storage_backend="file",
        storage_path="storage.json",
        slide_interval_seconds=0.01,
        auth_poll_interval_seconds=0.01,
    )


@pytest.fixture
def store() -> InMemoryKeyValueStore:
    return InMemoryKeyValueStore()


@pytest.fixture
def oauth_client() -> FakeGoogleOAuthClient:
    return FakeGoogleOAuthClient()


@pytest.fixture
def drive_client() -> FakeDriveClient:
    return FakeDriveClient(
        folders={
            "ROOT123": [
                image_entry("A"),
                image_entry("B", "image/png"),
                {"id": "doc", "name": "notes.pdf", "mimeType": "application/pdf"},
                folder_entry("sub1", "Summer"),
                folder_entry("sub2", "Winter"),
            ],
            "sub1": [image_entry("A"), image_entry("C")],
            "sub2": [image_entry("D")],
        }
    )


@pytest.fixture
def photo_lister(drive_client: FakeDriveClient) -> PhotoLister:
    return PhotoLister(client=drive_client)


@pytest.fixture
def auth_service(
    store: InMemoryKeyValueStore,
    oauth_client: FakeGoogleOAuthClient,
    photo_lister: PhotoLister,
) -> AuthService:
    return AuthService(store=store, oauth_client=oauth_client, lister=photo_lister)


@pytest.fixture
def folder_service(store: InMemoryKeyValueStore) -> FolderSelectionService:
    return FolderSelectionService(store)


@pytest.fixture
def aggregator(
    photo_lister: PhotoLister, folder_service: FolderSelectionService
) -> PhotoAggregator:
    return PhotoAggregator(lister=photo_lister, folders=folder_service)


@pytest.fixture
def container(
    settings: Settings,
    store: InMemoryKeyValueStore,
    photo_lister: PhotoLister,
    auth_service: AuthService,
    folder_service: FolderSelectionService,
    aggregator: PhotoAggregator,
) -> AppContainer:
    controller = SlideshowController(
        auth_service=auth_service,
        aggregator=aggregator,
        slide_interval_seconds=settings.slide_interval_seconds,
        auth_poll_interval_seconds=settings.auth_poll_interval_seconds,
    )

    async def close_resources() -> None:
        return None

    return AppContainer(
        settings=settings,
        store=store,
        photo_lister=photo_lister,
        auth_service=auth_service,
        folder_service=folder_service,
        preferences_service=DisplayPreferencesService(store),
        aggregator=aggregator,
        slideshow_controller=controller,
        close_resources=close_resources,
    )
