"""Slideshow position, play state and the background timers."""

import asyncio
import contextlib
import logging
from dataclasses import dataclass, field

import httpx

from drive_slideshow.domain.drive import AggregationResult, Photo
from drive_slideshow.domain.errors import (
    DriveSlideshowError,
    InvalidFolderUrlError,
    PhotosNotConfiguredError,
    UnauthenticatedError,
)
from drive_slideshow.services.aggregator import PhotoAggregator
from drive_slideshow.services.auth import AuthService

logger = logging.getLogger(__name__)

LOAD_FAILED_MESSAGE = (
    "Failed to load photos from Google Drive. Please check your folder permissions."
)


@dataclass
class Slideshow:
    """Ordered photos with a wrap-around cursor."""

    photos: tuple[Photo, ...] = ()
    index: int = 0
    playing: bool = True

    def current(self) -> Photo | None:
        if not self.photos:
            return None
        return self.photos[self.index]

    def next(self) -> Photo | None:
        if not self.photos:
            return None
        self.index = (self.index + 1) % len(self.photos)
        return self.current()

    def previous(self) -> Photo | None:
        if not self.photos:
            return None
        self.index = (self.index - 1) % len(self.photos)
        return self.current()

    def replace_photos(self, photos: tuple[Photo, ...]) -> None:
        """Swap in a new photo set, resetting an out-of-range cursor."""
        self.photos = photos
        if not 0 <= self.index < len(photos):
            self.index = 0


@dataclass
class SlideshowController:
    """Drives the slideshow from the auth state and the folder selection.

    Two recurring tasks run while started: the advance timer, active only
    while playing with photos, and the auth watcher, which wakes on the
    completion channel or every poll interval.
    """

    auth_service: AuthService
    aggregator: PhotoAggregator
    slide_interval_seconds: float = 3.0
    auth_poll_interval_seconds: float = 2.0
    slideshow: Slideshow = field(default_factory=Slideshow)
    error: str | None = None
    failed_folder_ids: tuple[str, ...] = ()
    is_loading: bool = False
    _signed_in: bool = field(default=False, init=False)
    _running: bool = field(default=False, init=False)
    _advance_task: asyncio.Task[None] | None = field(default=None, init=False)
    _watch_task: asyncio.Task[None] | None = field(default=None, init=False)

    async def start(self) -> None:
        """Load photos for a restored session and start both timers."""
        self._running = True
        self._signed_in = self.auth_service.is_signed_in()
        if self._signed_in:
            await self.reload_photos()
        self._watch_task = asyncio.create_task(self._watch_auth())
        self._restart_advance()

    async def stop(self) -> None:
        """Cancel both recurring tasks."""
        self._running = False
        for task in (self._advance_task, self._watch_task):
            if task is None:
                continue
            task.cancel()
            with contextlib.suppress(asyncio.CancelledError):
                await task
        self._advance_task = None
        self._watch_task = None

    async def reload_photos(self) -> AggregationResult | None:
        """Rebuild the photo sequence, recording a user-facing error on failure."""
        self.is_loading = True
        self.error = None
        try:
            await self.auth_service.ensure_fresh_token()
            result = await self.aggregator.load_photos()
        except PhotosNotConfiguredError as exc:
            self._show_error(str(exc))
            return None
        except InvalidFolderUrlError:
            self._show_error("Invalid folder URL format.")
            return None
        except UnauthenticatedError:
            self._show_error("Sign in to Google Drive to load photos.")
            return None
        except (DriveSlideshowError, httpx.HTTPError):
            logger.exception("Error loading photos")
            self._show_error(LOAD_FAILED_MESSAGE)
            return None
        finally:
            self.is_loading = False

        self.failed_folder_ids = result.failed_folder_ids
        self._set_photos(result.photos)
        return result

    async def check_auth_status(self) -> bool:
        """Pick up a pending sign-in and react to auth state changes."""
        await self.auth_service.recover_pending_authorization()
        signed_in = self.auth_service.is_signed_in()
        if signed_in != self._signed_in:
            self._signed_in = signed_in
            if signed_in:
                await self.reload_photos()
            else:
                self.error = None
                self.failed_folder_ids = ()
                self._set_photos(())
        return signed_in

    def play(self) -> None:
        self.slideshow.playing = True
        self._restart_advance()

    def pause(self) -> None:
        self.slideshow.playing = False
        self._restart_advance()

    def toggle(self) -> bool:
        if self.slideshow.playing:
            self.pause()
        else:
            self.play()
        return self.slideshow.playing

    def _show_error(self, message: str) -> None:
        self.error = message
        self.failed_folder_ids = ()
        self._set_photos(())

    def _set_photos(self, photos: tuple[Photo, ...]) -> None:
        self.slideshow.replace_photos(photos)
        self._restart_advance()

    def _restart_advance(self) -> None:
        if self._advance_task is not None:
            self._advance_task.cancel()
            self._advance_task = None
        if self._running and self.slideshow.playing and self.slideshow.photos:
            self._advance_task = asyncio.create_task(self._advance())

    async def _advance(self) -> None:
        while True:
            await asyncio.sleep(self.slide_interval_seconds)
            self.slideshow.next()

    async def _watch_auth(self) -> None:
        while True:
            await self.auth_service.channel.wait(self.auth_poll_interval_seconds)
            try:
                await self.check_auth_status()
            except Exception:
                logger.exception("Error checking auth status")
