"""
Account linking: code issuance and the ``/linkmc`` redemption flow.

The game server requests a code for a player (``issue_code``); the player
redeems it in Discord (``redeem``). Redemption writes the Account Link
Registry and, when the player's channel already exists, adds an overwrite
so the newly linked user can see it. When the channel does not exist yet the
link is picked up by the dispatcher at creation time instead.

A failed grant is reported on the result and logged, but the link itself
stays in place.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass

from mc_relay.core.channels import ChannelRegistry
from mc_relay.core.codes import VerificationCodeStore
from mc_relay.core.errors import (
    CodeInvalidOrExpired,
    OperationContext,
    RelayError,
    ValidationError,
)
from mc_relay.core.identifiers import truncate_uuid
from mc_relay.core.links import AccountLinkRegistry
from mc_relay.core.permissions import MEMBER_ACCESS
from mc_relay.platform.base import ChatPlatform

logger = logging.getLogger(__name__)

DEFAULT_MAX_CODE_INPUT_LENGTH = 16

INVALID_CODE_REPLY = "❌ Invalid or expired code. Request a new one in-game and try again."


@dataclass(slots=True)
class CodeIssueResult:
    """
    Outcome of a code request.

    Attributes:
        success: True when a code was issued.
        code: The issued code.
        expires_in: Code lifetime in seconds.
        already_linked: True when the uuid already has a linked account.
        error: ValidationError for a missing uuid.
    """

    success: bool
    code: str | None = None
    expires_in: int | None = None
    already_linked: bool = False
    error: RelayError | None = None


@dataclass(slots=True)
class RedemptionResult:
    """
    Outcome of a ``/linkmc`` invocation.

    Attributes:
        success: True when the code resolved and the link was written.
        uuid: Linked player uuid (never shown to users in full).
        channel_id: Existing channel the user was granted, if any.
        grant_error: Non-fatal failure while granting channel access.
        error: CodeInvalidOrExpired when the code did not resolve.
    """

    success: bool
    uuid: str | None = None
    channel_id: int | None = None
    grant_error: RelayError | None = None
    error: RelayError | None = None

    @property
    def reply(self) -> str:
        """User-facing reply text."""
        if not self.success or self.uuid is None:
            return INVALID_CODE_REPLY
        reply = f"✅ Linked to Minecraft player `{truncate_uuid(self.uuid)}`."
        if self.grant_error is not None:
            reply += " Your updates channel could not be shared with you yet; ask an admin."
        elif self.channel_id is not None:
            reply += f" You now have access to <#{self.channel_id}>."
        return reply


class AccountLinker:
    """Issues verification codes and redeems them into account links."""

    def __init__(
        self,
        platform: ChatPlatform,
        codes: VerificationCodeStore,
        links: AccountLinkRegistry,
        channels: ChannelRegistry,
        *,
        max_code_input_length: int = DEFAULT_MAX_CODE_INPUT_LENGTH,
    ) -> None:
        self.platform = platform
        self.codes = codes
        self.links = links
        self.channels = channels
        self.max_code_input_length = max_code_input_length

    def issue_code(self, uuid: str | None) -> CodeIssueResult:
        """Issue a code for ``uuid`` unless it is already linked."""
        uuid = uuid or ""
        if not uuid.strip():
            return CodeIssueResult(
                success=False,
                error=ValidationError(
                    context=OperationContext(operation="codes.issue", details="Missing uuid")
                ),
            )
        if self.links.is_linked(uuid):
            return CodeIssueResult(success=False, already_linked=True)

        code = self.codes.issue(uuid)
        return CodeIssueResult(success=True, code=code, expires_in=self.codes.ttl_seconds)

    def _normalize(self, code: str | None) -> str | None:
        code = (code or "").strip()
        if not code or len(code) > self.max_code_input_length:
            return None
        return code.upper()

    async def redeem(self, code: str | None, user_id: int) -> RedemptionResult:
        """Consume ``code`` and link its uuid to ``user_id``."""
        normalized = self._normalize(code)
        uuid = self.codes.redeem(normalized) if normalized else None
        if uuid is None:
            logger.info("Rejected link code from user %s", user_id)
            return RedemptionResult(
                success=False,
                error=CodeInvalidOrExpired(
                    context=OperationContext(
                        operation="codes.redeem", details="Invalid or expired code"
                    )
                ),
            )

        self.links.link(uuid, user_id)
        logger.info("Linked player %s to Discord user %s", uuid, user_id)

        result = RedemptionResult(success=True, uuid=uuid)
        channel_id = self.channels.get(uuid)
        if channel_id is None:
            return result

        result.channel_id = channel_id
        try:
            await self.platform.grant_access(channel_id, user_id, MEMBER_ACCESS)
        except RelayError as exc:
            logger.warning(
                "Could not grant user %s access to channel %s: %s", user_id, channel_id, exc
            )
            result.grant_error = exc
        return result

    async def handle_link_command(self, code: str, user_id: int) -> str:
        """``LinkCommandHandler`` entry point for the platform adapter."""
        result = await self.redeem(code, user_id)
        return result.reply
