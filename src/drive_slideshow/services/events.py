"""Completion channel between the OAuth callback and the running app."""

import asyncio
from dataclasses import dataclass, field


@dataclass
class AuthCompletionChannel:
    """Single-consumer signal raised when an authorization code arrives."""

    _event: asyncio.Event = field(default_factory=asyncio.Event)

    def publish(self) -> None:
        """Wake up whoever is waiting for an authorization result."""
        self._event.set()

    async def wait(self, timeout: float) -> bool:
        """Wait up to ``timeout`` seconds and consume a pending signal.

        Returns True when a signal was consumed and False on timeout.
        """
        try:
            await asyncio.wait_for(self._event.wait(), timeout=timeout)
        except TimeoutError:
            return False
        self._event.clear()
        return True
