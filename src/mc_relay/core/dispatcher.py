"""
Update Dispatcher: get-or-create the player's channel, then send.

Flow for ``send_update(uuid, message)``::

    validate ─▶ platform ready? ─▶ resolve guild
        │
        ▼
    registry hit? ──yes──▶ resolve channel ──gone──┐
        │ no                   │ live              │
        ▼                      │                   ▼
    compose overwrites ─▶ create channel ─▶ record id
        │                      │
        └──────────────────────┴─▶ send notification ─▶ DispatchResult

Policy for a recorded channel that no longer resolves: recreate it and
re-register the new id. The registry is written at most once per call, and
only after the platform call that produced the id has returned.

Two concurrent first updates for the same never-seen uuid can both miss the
registry and both create a channel; the later write wins and the earlier
channel is orphaned on Discord. No retries happen here; the caller retries.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass

from mc_relay.core.channels import ChannelRegistry
from mc_relay.core.errors import (
    NotReadyError,
    OperationContext,
    RelayError,
    ValidationError,
)
from mc_relay.core.identifiers import channel_name_for, channel_topic_for, truncate_uuid
from mc_relay.core.links import AccountLinkRegistry
from mc_relay.core.permissions import ChannelPolicy, build_overwrites
from mc_relay.platform.base import ChannelInfo, ChatPlatform

logger = logging.getLogger(__name__)


@dataclass(slots=True)
class DispatchResult:
    """
    Outcome of one ``send_update`` call.

    Attributes:
        success: True when the message was delivered.
        channel_id: Channel the message went to (on success).
        channel_name: That channel's name (on success).
        created: True when this call created the channel.
        error: Typed failure when ``success`` is False.
    """

    success: bool
    channel_id: int | None = None
    channel_name: str | None = None
    created: bool = False
    error: RelayError | None = None


class UpdateDispatcher:
    """Relays game updates into per-player channels."""

    def __init__(
        self,
        platform: ChatPlatform,
        channels: ChannelRegistry,
        links: AccountLinkRegistry,
        policy: ChannelPolicy | None = None,
    ) -> None:
        self.platform = platform
        self.channels = channels
        self.links = links
        self.policy = policy if policy is not None else ChannelPolicy()

    async def send_update(self, uuid: str | None, message: str | None) -> DispatchResult:
        """Deliver ``message`` to the channel for ``uuid``, creating it if needed."""
        uuid = uuid or ""
        message = message or ""
        if not uuid.strip() or not message.strip():
            return DispatchResult(
                success=False,
                error=ValidationError(
                    context=OperationContext(
                        operation="dispatch.validate", details="Missing uuid or message"
                    )
                ),
            )

        if not self.platform.is_ready:
            return DispatchResult(
                success=False,
                error=NotReadyError(
                    context=OperationContext(
                        operation="dispatch.platform_ready", details="Discord bot not ready"
                    )
                ),
            )

        try:
            await self.platform.resolve_guild()
            channel, created = await self._get_or_create_channel(uuid)
            await self.platform.send_notification(
                channel.id, message=message, attribution=truncate_uuid(uuid)
            )
        except RelayError as exc:
            logger.warning("Update for %s not delivered: %s", uuid, exc)
            return DispatchResult(success=False, error=exc)

        logger.info("Relayed update for %s to #%s (%s)", uuid, channel.name, channel.id)
        return DispatchResult(
            success=True, channel_id=channel.id, channel_name=channel.name, created=created
        )

    async def _get_or_create_channel(self, uuid: str) -> tuple[ChannelInfo, bool]:
        channel_id = self.channels.get(uuid)
        if channel_id is not None:
            channel = await self.platform.resolve_channel(channel_id)
            if channel is not None:
                return channel, False
            logger.warning(
                "Channel %s for %s no longer resolves; recreating", channel_id, uuid
            )

        overwrites = build_overwrites(
            admin_role_id=self.policy.admin_role_id,
            linked_user_id=self.links.get(uuid),
        )
        channel = await self.platform.create_text_channel(
            name=channel_name_for(uuid),
            topic=channel_topic_for(uuid),
            category_id=self.policy.category_id,
            overwrites=overwrites,
        )
        self.channels.put(uuid, channel.id)
        logger.info("Created channel #%s (%s) for %s", channel.name, channel.id, uuid)
        return channel, True
