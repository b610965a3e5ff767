"""
Unit tests for account linking (mc_relay/core/linking.py).

Tests cover:
- Code issuance, including the already-linked short circuit
- Redemption normalization (whitespace, case, length bound)
- Single use and expiry through the linker
- Granting access to an existing channel
- Grant failures that keep the link
- User-facing reply text
"""

import pytest

from mc_relay.core.errors import CodeInvalidOrExpired, PermissionGrantError, ValidationError
from mc_relay.core.linking import INVALID_CODE_REPLY
from mc_relay.core.permissions import MEMBER_ACCESS

UUID = "069A79F4-44E9-4726-A5BE-FCA90E38AAF5"

# ============================================================================
# ISSUE
# ============================================================================


@pytest.mark.unit
class TestIssueCode:
    def test_issues_code(self, relay):
        result = relay.linker.issue_code(UUID)
        assert result.success
        assert len(result.code) == 6
        assert result.expires_in == 300
        assert not result.already_linked
        assert len(relay.codes) == 1

    @pytest.mark.parametrize("uuid", [None, "", "   "])
    def test_missing_uuid(self, relay, uuid):
        result = relay.linker.issue_code(uuid)
        assert not result.success
        assert isinstance(result.error, ValidationError)
        assert len(relay.codes) == 0

    def test_already_linked(self, relay):
        relay.links.link(UUID, 42)
        result = relay.linker.issue_code(UUID)
        assert not result.success
        assert result.already_linked
        assert result.code is None
        assert len(relay.codes) == 0


# ============================================================================
# REDEEM
# ============================================================================


@pytest.mark.unit
@pytest.mark.asyncio
class TestRedeem:
    async def test_redeem_links_account(self, relay, fake_platform):
        code = relay.linker.issue_code(UUID).code

        result = await relay.linker.redeem(code, 42)

        assert result.success
        assert result.uuid == UUID
        assert result.channel_id is None
        assert relay.links.get(UUID) == 42
        assert fake_platform.grants == []

    async def test_lowercase_and_whitespace_accepted(self, relay):
        code = relay.linker.issue_code(UUID).code
        result = await relay.linker.redeem(f"  {code.lower()} ", 42)
        assert result.success

    async def test_second_redemption_rejected(self, relay):
        code = relay.linker.issue_code(UUID).code
        await relay.linker.redeem(code, 42)

        result = await relay.linker.redeem(code, 43)

        assert not result.success
        assert isinstance(result.error, CodeInvalidOrExpired)
        assert relay.links.get(UUID) == 42

    async def test_expired_code_rejected(self, relay, clock):
        code = relay.linker.issue_code(UUID).code
        clock.advance(301)
        result = await relay.linker.redeem(code, 42)
        assert not result.success
        assert not relay.links.is_linked(UUID)

    @pytest.mark.parametrize("code", [None, "", "   ", "X" * 17])
    async def test_malformed_input_rejected(self, relay, code):
        result = await relay.linker.redeem(code, 42)
        assert not result.success
        assert isinstance(result.error, CodeInvalidOrExpired)

    async def test_grants_access_to_existing_channel(self, relay, fake_platform):
        sent = await relay.dispatcher.send_update(UUID, "hello")
        code = relay.linker.issue_code(UUID).code

        result = await relay.linker.redeem(code, 42)

        assert result.success
        assert result.channel_id == sent.channel_id
        assert fake_platform.grants == [(sent.channel_id, 42, MEMBER_ACCESS)]

    async def test_grant_failure_keeps_link(self, relay, fake_platform):
        await relay.dispatcher.send_update(UUID, "hello")
        fake_platform.fail_grant = True
        code = relay.linker.issue_code(UUID).code

        result = await relay.linker.redeem(code, 42)

        assert result.success
        assert isinstance(result.grant_error, PermissionGrantError)
        assert relay.links.get(UUID) == 42

    async def test_link_before_channel_is_used_at_creation(self, relay, fake_platform):
        code = relay.linker.issue_code(UUID).code
        await relay.linker.redeem(code, 42)

        await relay.dispatcher.send_update(UUID, "hello")

        member = fake_platform.created[0]["overwrites"][-1]
        assert member.subject.id == 42
        assert fake_platform.grants == []


# ============================================================================
# REPLIES
# ============================================================================


@pytest.mark.unit
@pytest.mark.asyncio
class TestReplies:
    async def test_invalid_reply(self, relay):
        assert await relay.linker.handle_link_command("NOPE00", 42) == INVALID_CODE_REPLY

    async def test_success_reply_truncates_uuid(self, relay):
        code = relay.linker.issue_code(UUID).code
        reply = await relay.linker.handle_link_command(code, 42)
        assert "069A79F4…" in reply
        assert UUID not in reply

    async def test_success_reply_mentions_channel(self, relay):
        sent = await relay.dispatcher.send_update(UUID, "hello")
        code = relay.linker.issue_code(UUID).code
        reply = await relay.linker.handle_link_command(code, 42)
        assert f"<#{sent.channel_id}>" in reply

    async def test_grant_failure_reply(self, relay, fake_platform):
        await relay.dispatcher.send_update(UUID, "hello")
        fake_platform.fail_grant = True
        code = relay.linker.issue_code(UUID).code
        reply = await relay.linker.handle_link_command(code, 42)
        assert reply.startswith("✅")
        assert "ask an admin" in reply

    async def test_relay_registers_link_handler(self, relay, fake_platform):
        code = relay.linker.issue_code(UUID).code
        reply = await fake_platform.link_handler(code, 42)
        assert reply.startswith("✅")
