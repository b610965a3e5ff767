"""Account Link Registry: player uuid → Discord user id.

Written only by the code redemption flow. A uuid carries at most one linked
Discord account; redeeming a second code for the same uuid overwrites the
previous link without notice. There is no unlink operation.
"""

from __future__ import annotations

import logging
import threading

logger = logging.getLogger(__name__)


class AccountLinkRegistry:
    """In-memory uuid → Discord user id mapping."""

    def __init__(self) -> None:
        self._links: dict[str, int] = {}
        self._lock = threading.Lock()

    def link(self, uuid: str, user_id: int) -> None:
        with self._lock:
            previous = self._links.get(uuid)
            self._links[uuid] = user_id
        if previous is not None and previous != user_id:
            logger.info("Account link for %s replaced (%s -> %s)", uuid, previous, user_id)

    def get(self, uuid: str) -> int | None:
        with self._lock:
            return self._links.get(uuid)

    def is_linked(self, uuid: str) -> bool:
        with self._lock:
            return uuid in self._links

    def __len__(self) -> int:
        with self._lock:
            return len(self._links)
