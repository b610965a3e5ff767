"""
Chat platform capability interface.

The relay core never imports discord.py directly. It talks to a
``ChatPlatform``: something that can report whether its session is up,
resolve the configured guild and channels, create a permissioned text
channel, post a notification, and add a member overwrite.

Implementations raise ``NotReadyError`` or a ``PlatformError`` subclass from
``mc_relay.core.errors``; they never leak library-specific exceptions.
"""

from __future__ import annotations

from collections.abc import Awaitable, Callable
from dataclasses import dataclass
from typing import Protocol, runtime_checkable

from mc_relay.core.permissions import Capability, PermissionOverwriteSet


@dataclass(frozen=True, slots=True)
class GuildInfo:
    id: int
    name: str


@dataclass(frozen=True, slots=True)
class ChannelInfo:
    id: int
    name: str


# Invoked for ``/linkmc code:<code>``: (code, invoking user id) -> reply text.
LinkCommandHandler = Callable[[str, int], Awaitable[str]]


@runtime_checkable
class ChatPlatform(Protocol):
    """Capabilities the relay needs from the chat platform."""

    @property
    def is_ready(self) -> bool:
        """True once the platform session is established."""
        ...

    async def start(self) -> None:
        """Connect and run the platform session until closed."""
        ...

    async def close(self) -> None:
        """Tear down the platform session."""
        ...

    def set_link_handler(self, handler: LinkCommandHandler) -> None:
        """Route ``/linkmc`` invocations to ``handler``."""
        ...

    async def resolve_guild(self) -> GuildInfo:
        """Return the configured guild or raise ``GuildUnavailableError``."""
        ...

    async def resolve_channel(self, channel_id: int) -> ChannelInfo | None:
        """Return the live channel, or None if it no longer exists."""
        ...

    async def create_text_channel(
        self,
        *,
        name: str,
        topic: str,
        category_id: int | None,
        overwrites: PermissionOverwriteSet,
    ) -> ChannelInfo:
        """Create a text channel or raise ``ChannelUnavailableError``."""
        ...

    async def send_notification(self, channel_id: int, *, message: str, attribution: str) -> None:
        """Post ``message`` to the channel or raise ``SendFailedError``."""
        ...

    async def grant_access(
        self, channel_id: int, user_id: int, capabilities: frozenset[Capability]
    ) -> None:
        """Add an allow overwrite for ``user_id`` or raise ``PermissionGrantError``."""
        ...
