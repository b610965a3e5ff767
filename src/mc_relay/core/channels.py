"""Channel Registry: player uuid → Discord channel id.

A plain lookup cache backing the get-or-create protocol in
``mc_relay.core.dispatcher``. Records live for the lifetime of the process;
there is no eviction, no TTL, and no re-validation against Discord. A channel
deleted on the Discord side is only noticed when the dispatcher fails to
resolve it.
"""

from __future__ import annotations

import threading


class ChannelRegistry:
    """In-memory uuid → channel id mapping."""

    def __init__(self) -> None:
        self._channels: dict[str, int] = {}
        self._lock = threading.Lock()

    def get(self, uuid: str) -> int | None:
        """Return the recorded channel id for ``uuid``, or None."""
        with self._lock:
            return self._channels.get(uuid)

    def put(self, uuid: str, channel_id: int) -> None:
        """Record (or replace) the channel for ``uuid``."""
        with self._lock:
            self._channels[uuid] = channel_id

    def __contains__(self, uuid: object) -> bool:
        with self._lock:
            return uuid in self._channels

    def __len__(self) -> int:
        with self._lock:
            return len(self._channels)
