"""
Per-channel permission overwrites.

Each player channel is private. Its overwrite set is computed once, when the
channel is created, from four sources in a fixed order:

    1. DEFAULT_AUDIENCE  everyone in the guild      deny VIEW_CHANNEL
    2. SERVICE           the relay's own bot user   allow FULL_ACCESS
    3. ROLE              configured admin role      allow MEMBER_ACCESS (optional)
    4. MEMBER            already-linked account     allow MEMBER_ACCESS (optional)

Accounts linked after the channel exists are not added here; the linker
grants them access with a separate, additive overwrite.

This module is platform-neutral. ``mc_relay.platform.discord_client`` maps
subjects and capabilities onto ``discord.PermissionOverwrite`` objects.
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum


class Capability(Enum):
    """Channel capabilities an overwrite can allow or deny."""

    VIEW_CHANNEL = "view_channel"
    READ_MESSAGE_HISTORY = "read_message_history"
    SEND_MESSAGES = "send_messages"
    EMBED_LINKS = "embed_links"
    MANAGE_CHANNEL = "manage_channel"


class SubjectKind(Enum):
    """Who an overwrite applies to."""

    DEFAULT_AUDIENCE = "default_audience"
    SERVICE = "service"
    ROLE = "role"
    MEMBER = "member"


# What a linked player (or an admin) may do in a player channel.
MEMBER_ACCESS: frozenset[Capability] = frozenset(
    {
        Capability.VIEW_CHANNEL,
        Capability.READ_MESSAGE_HISTORY,
        Capability.SEND_MESSAGES,
    }
)

# The relay must always be able to see, post to, and manage its channels.
FULL_ACCESS: frozenset[Capability] = frozenset(Capability)


@dataclass(frozen=True, slots=True)
class Subject:
    """
    Target of an overwrite.

    ``id`` is None only for DEFAULT_AUDIENCE and SERVICE, which the platform
    adapter resolves itself (guild default role, bot member).
    """

    kind: SubjectKind
    id: int | None = None


@dataclass(frozen=True, slots=True)
class PermissionOverwrite:
    """One (subject, allow, deny) triple."""

    subject: Subject
    allow: frozenset[Capability] = frozenset()
    deny: frozenset[Capability] = frozenset()


PermissionOverwriteSet = tuple[PermissionOverwrite, ...]


@dataclass(frozen=True, slots=True)
class ChannelPolicy:
    """Guild-level channel policy taken from configuration."""

    category_id: int | None = None
    admin_role_id: int | None = None


def build_overwrites(
    *,
    admin_role_id: int | None = None,
    linked_user_id: int | None = None,
) -> PermissionOverwriteSet:
    """
    Compose the overwrite set for a new player channel.

    Args:
        admin_role_id: Role granted access to every player channel, if any.
        linked_user_id: Discord user already linked to the player, if any.

    Returns:
        Ordered overwrites: audience deny, service allow, then the optional
        role and member allows.
    """
    overwrites: list[PermissionOverwrite] = [
        PermissionOverwrite(
            subject=Subject(SubjectKind.DEFAULT_AUDIENCE),
            deny=frozenset({Capability.VIEW_CHANNEL}),
        ),
        PermissionOverwrite(subject=Subject(SubjectKind.SERVICE), allow=FULL_ACCESS),
    ]
    if admin_role_id is not None:
        overwrites.append(
            PermissionOverwrite(subject=Subject(SubjectKind.ROLE, admin_role_id), allow=MEMBER_ACCESS)
        )
    if linked_user_id is not None:
        overwrites.append(
            PermissionOverwrite(
                subject=Subject(SubjectKind.MEMBER, linked_user_id), allow=MEMBER_ACCESS
            )
        )
    return tuple(overwrites)
