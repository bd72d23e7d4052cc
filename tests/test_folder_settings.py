"""Tests for folder URL parsing and folder selection."""

import asyncio
import json

import pytest

from drive_slideshow.domain.errors import InvalidFolderUrlError
from drive_slideshow.services.folders import parse_folder_url
from drive_slideshow.services.store import StorageKeys


@pytest.mark.parametrize(
    ("url", "folder_id"),
    [
        ("https://drive.example.com/drive/folders/XYZ123?usp=sharing", "XYZ123"),
        ("https://drive.google.com/drive/folders/abc-DEF_1", "abc-DEF_1"),
        ("https://drive.google.com/drive/u/0/folders/nested/extra", "nested"),
        ("  https://drive.google.com/drive/folders/trimmed  ", "trimmed"),
    ],
)
def test_parse_folder_url(url: str, folder_id: str) -> None:
    assert parse_folder_url(url) == folder_id


@pytest.mark.parametrize(
    "url",
    ["https://drive.example.com/drive/", "https://drive.google.com/file/d/abc", ""],
)
def test_parse_folder_url_rejects_urls_without_folder(url: str) -> None:
    with pytest.raises(InvalidFolderUrlError):
        parse_folder_url(url)


def test_save_root_folder_url_persists_trimmed_url(folder_service, store) -> None:
    folder_id = asyncio.run(
        folder_service.save_root_folder_url(
            " https://drive.google.com/drive/folders/ROOT123 "
        )
    )

    assert folder_id == "ROOT123"
    assert store.items[StorageKeys.ROOT_FOLDER_URL] == (
        "https://drive.google.com/drive/folders/ROOT123"
    )


@pytest.mark.parametrize("url", ["   ", "https://drive.google.com/drive/"])
def test_save_root_folder_url_rejects_invalid(folder_service, store, url) -> None:
    with pytest.raises(InvalidFolderUrlError):
        asyncio.run(folder_service.save_root_folder_url(url))

    assert StorageKeys.ROOT_FOLDER_URL not in store.items


def test_selection_defaults_to_root(folder_service) -> None:
    selection = asyncio.run(folder_service.get_selection())

    assert selection.root_folder_url is None
    assert selection.selected_folder_ids == ("root",)


def test_set_selected_folder_ids_dedupes_and_persists(folder_service, store) -> None:
    ids = asyncio.run(
        folder_service.set_selected_folder_ids(["root", "sub1", "root", ""])
    )

    assert ids == ("root", "sub1")
    assert json.loads(store.items[StorageKeys.SELECTED_FOLDERS]) == ["root", "sub1"]


def test_empty_selection_falls_back_to_root(folder_service) -> None:
    assert asyncio.run(folder_service.set_selected_folder_ids([])) == ("root",)


def test_unreadable_selection_falls_back_to_root(folder_service, store) -> None:
    store.items[StorageKeys.SELECTED_FOLDERS] = "not-json"

    assert asyncio.run(folder_service.get_selected_folder_ids()) == ("root",)


def test_toggle_folder_adds_and_removes(folder_service) -> None:
    added = asyncio.run(folder_service.toggle_folder("sub1"))
    removed = asyncio.run(folder_service.toggle_folder("root"))
    kept = asyncio.run(folder_service.toggle_folder("sub1"))

    assert added == ("root", "sub1")
    assert removed == ("sub1",)
    assert kept == ("sub1",)
