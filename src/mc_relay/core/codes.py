"""
Verification Code Store.

Short-lived, single-use codes that prove control of a player identity. The
game server asks for a code on the player's behalf, the player types it into
Discord with ``/linkmc``, and the relay exchanges it for an account link.

Lifecycle of a single code::

    issued ──redeem()──▶ redeemed   (terminal)
       │
       └──ttl elapses──▶ expired    (terminal)

There is no path back to ``issued``. A successful ``redeem()`` removes the
entry in the same critical section that reads it, so a code satisfies at most
one redemption. Expired entries are removed either lazily (by ``redeem()``) or
eagerly by ``sweep()``, which the background sweeper calls on a fixed
interval.

Issuing a new code for a uuid does not revoke older unredeemed codes for that
uuid; each stays valid until used or expired.
"""

from __future__ import annotations

import logging
import secrets
import string
import threading
import time
from collections.abc import Callable
from dataclasses import dataclass

logger = logging.getLogger(__name__)

CODE_ALPHABET = string.ascii_uppercase + string.digits
DEFAULT_TTL_SECONDS = 300
DEFAULT_CODE_LENGTH = 6

# Upper bound on regeneration attempts when a fresh code collides with a
# live one. With 36**6 codes the first attempt practically always succeeds.
MAX_ISSUE_ATTEMPTS = 16


@dataclass(frozen=True, slots=True)
class CodeEntry:
    """A pending code's owner and absolute expiry (clock seconds)."""

    uuid: str
    expires_at: float


class VerificationCodeStore:
    """
    In-memory code → (uuid, expiry) table.

    Args:
        ttl_seconds: Lifetime of each issued code.
        code_length: Number of characters per code.
        clock: Monotonic time source; injectable for tests.
    """

    def __init__(
        self,
        *,
        ttl_seconds: int = DEFAULT_TTL_SECONDS,
        code_length: int = DEFAULT_CODE_LENGTH,
        clock: Callable[[], float] = time.monotonic,
    ) -> None:
        if ttl_seconds <= 0:
            raise ValueError("ttl_seconds must be positive")
        if code_length <= 0:
            raise ValueError("code_length must be positive")
        self.ttl_seconds = ttl_seconds
        self.code_length = code_length
        self._clock = clock
        self._entries: dict[str, CodeEntry] = {}
        self._lock = threading.Lock()

    def _generate(self) -> str:
        return "".join(secrets.choice(CODE_ALPHABET) for _ in range(self.code_length))

    def issue(self, uuid: str) -> str:
        """
        Create a new code for ``uuid`` and return it.

        Raises:
            RuntimeError: If every attempt collided with a live code.
        """
        with self._lock:
            now = self._clock()
            for _ in range(MAX_ISSUE_ATTEMPTS):
                code = self._generate()
                existing = self._entries.get(code)
                if existing is None or now > existing.expires_at:
                    break
            else:
                raise RuntimeError(
                    f"No free verification code after {MAX_ISSUE_ATTEMPTS} attempts"
                )
            self._entries[code] = CodeEntry(uuid=uuid, expires_at=now + self.ttl_seconds)
        logger.info("Issued verification code for %s (ttl=%ss)", uuid, self.ttl_seconds)
        return code

    def redeem(self, code: str) -> str | None:
        """
        Consume ``code`` and return its uuid.

        Returns None when the code is unknown, already used, or expired. The
        caller cannot tell those cases apart.
        """
        with self._lock:
            entry = self._entries.pop(code, None)
            if entry is None:
                return None
            if self._clock() > entry.expires_at:
                return None
            return entry.uuid

    def sweep(self) -> int:
        """Drop every expired entry and return how many were removed."""
        with self._lock:
            now = self._clock()
            expired = [code for code, entry in self._entries.items() if now > entry.expires_at]
            for code in expired:
                del self._entries[code]
        if expired:
            logger.debug("Swept %d expired verification code(s)", len(expired))
        return len(expired)

    def __len__(self) -> int:
        with self._lock:
            return len(self._entries)
