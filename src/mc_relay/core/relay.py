"""
The relay: one owned instance of each table plus the two flows built on them.

Nothing in the relay lives at module level. The HTTP routes, the Discord
command handler and the sweeper all receive a ``Relay`` (or one of its
components) explicitly.
"""

from __future__ import annotations

import time

from mc_relay.config import ServerConfig
from mc_relay.core.channels import ChannelRegistry
from mc_relay.core.codes import VerificationCodeStore
from mc_relay.core.dispatcher import UpdateDispatcher
from mc_relay.core.linking import AccountLinker
from mc_relay.core.links import AccountLinkRegistry
from mc_relay.core.permissions import ChannelPolicy
from mc_relay.core.sweeper import CodeSweeper
from mc_relay.platform.base import ChatPlatform


class Relay:
    """
    Composition root for the relay core.

    Args:
        platform: Chat platform the relay talks to.
        codes: Verification code store (a default-policy store when omitted).
        policy: Channel category and admin role policy.
        sweep_interval_seconds: Interval for the expired-code sweeper.
        max_code_input_length: Longest ``/linkmc`` input accepted.
    """

    def __init__(
        self,
        platform: ChatPlatform,
        *,
        codes: VerificationCodeStore | None = None,
        policy: ChannelPolicy | None = None,
        sweep_interval_seconds: float = 60.0,
        max_code_input_length: int = 16,
    ) -> None:
        self.platform = platform
        self.channels = ChannelRegistry()
        self.codes = codes if codes is not None else VerificationCodeStore()
        self.links = AccountLinkRegistry()
        self.dispatcher = UpdateDispatcher(platform, self.channels, self.links, policy)
        self.linker = AccountLinker(
            platform,
            self.codes,
            self.links,
            self.channels,
            max_code_input_length=max_code_input_length,
        )
        self.sweeper = CodeSweeper(self.codes, sweep_interval_seconds)
        self.started_at = time.monotonic()

        platform.set_link_handler(self.linker.handle_link_command)

    @classmethod
    def from_config(cls, cfg: ServerConfig, platform: ChatPlatform) -> Relay:
        """Build a relay using the code and channel policy from ``cfg``."""
        return cls(
            platform,
            codes=VerificationCodeStore(ttl_seconds=cfg.codes.ttl_seconds, code_length=cfg.codes.length),
            policy=ChannelPolicy(
                category_id=cfg.discord.category_id,
                admin_role_id=cfg.discord.admin_role_id,
            ),
            sweep_interval_seconds=cfg.codes.sweep_interval_seconds,
            max_code_input_length=cfg.codes.max_input_length,
        )

    @property
    def uptime_seconds(self) -> float:
        return time.monotonic() - self.started_at
