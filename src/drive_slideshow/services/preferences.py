"""Display preference settings."""

import json
import logging
from dataclasses import dataclass

from drive_slideshow.domain.preferences import (
    DEFAULT_TOP_BAR_OPACITY,
    DisplayPreferences,
)
from drive_slideshow.services.store import KeyValueStore, StorageKeys

logger = logging.getLogger(__name__)


@dataclass
class DisplayPreferencesService:
    """Persists overlay toggles and the bar opacity one value at a time."""

    store: KeyValueStore

    async def get_preferences(self) -> DisplayPreferences:
        """Return stored preferences with defaults for unset values."""
        return DisplayPreferences(
            show_email=await self._get_flag(StorageKeys.SHOW_EMAIL),
            show_controls=await self._get_flag(StorageKeys.SHOW_CONTROLS),
            show_photo_counter=await self._get_flag(StorageKeys.SHOW_PHOTO_COUNTER),
            top_bar_opacity=await self._get_opacity(),
        )

    async def set_show_email(self, value: bool) -> None:
        await self.store.set_item(StorageKeys.SHOW_EMAIL, json.dumps(value))

    async def set_show_controls(self, value: bool) -> None:
        await self.store.set_item(StorageKeys.SHOW_CONTROLS, json.dumps(value))

    async def set_show_photo_counter(self, value: bool) -> None:
        await self.store.set_item(StorageKeys.SHOW_PHOTO_COUNTER, json.dumps(value))

    async def set_top_bar_opacity(self, value: float) -> float:
        """Persist the opacity clamped to the 0..1 range."""
        clamped = min(max(float(value), 0.0), 1.0)
        await self.store.set_item(StorageKeys.TOP_BAR_OPACITY, str(clamped))
        return clamped

    async def _get_flag(self, key: str, default: bool = True) -> bool:
        raw = await self.store.get_item(key)
        if raw is None:
            return default
        try:
            value = json.loads(raw)
        except json.JSONDecodeError:
            logger.warning("Ignoring unreadable preference %s=%r", key, raw)
            return default
        return value if isinstance(value, bool) else default

    async def _get_opacity(self) -> float:
        raw = await self.store.get_item(StorageKeys.TOP_BAR_OPACITY)
        if raw is None:
            return DEFAULT_TOP_BAR_OPACITY
        try:
            return min(max(float(raw), 0.0), 1.0)
        except ValueError:
            logger.warning("Ignoring unreadable top bar opacity %r", raw)
            return DEFAULT_TOP_BAR_OPACITY
