"""JSON file-backed key-value store for local installs."""

import contextlib
import json
import logging
import os
import tempfile
from dataclasses import dataclass
from pathlib import Path

from drive_slideshow.services.store import KeyValueStore

logger = logging.getLogger(__name__)


@dataclass
class JsonFileKeyValueStore(KeyValueStore):
    """Keeps every scope as one JSON object inside a single file."""

    path: Path
    scope: str = "default"

    def _load(self) -> dict[str, dict[str, str]]:
        if not self.path.exists():
            return {}
        try:
            with open(self.path, encoding="utf-8") as f:
                data = json.load(f)
        except (json.JSONDecodeError, OSError):
            logger.warning("Could not read storage file %s, starting empty", self.path)
            return {}
        if not isinstance(data, dict):
            return {}
        return data

    def _save(self, data: dict[str, dict[str, str]]) -> None:
        """Replace the file atomically via a sibling temp file."""
        self.path.parent.mkdir(parents=True, exist_ok=True)
        fd, tmp_name = tempfile.mkstemp(
            dir=self.path.parent, prefix=f".{self.path.name}.", suffix=".tmp"
        )
        try:
            with os.fdopen(fd, "w", encoding="utf-8") as f:
                json.dump(data, f, indent=2)
            os.replace(tmp_name, self.path)
        except BaseException:
            with contextlib.suppress(OSError):
                os.unlink(tmp_name)
            raise

    async def get_item(self, key: str) -> str | None:
        """Return the stored value for a key, if present."""
        value = self._load().get(self.scope, {}).get(key)
        return None if value is None else str(value)

    async def set_item(self, key: str, value: str) -> None:
        """Store a value and rewrite the file."""
        data = self._load()
        data.setdefault(self.scope, {})[key] = value
        self._save(data)

    async def remove_item(self, key: str) -> None:
        """Delete a key and rewrite the file when it was present."""
        data = self._load()
        entries = data.get(self.scope, {})
        if key not in entries:
            return
        del entries[key]
        self._save(data)
