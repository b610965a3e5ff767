"""
Discord implementation of ``ChatPlatform`` (discord.py).

``RelayBot`` is the gateway client. It owns the application command tree and
registers a single guild command, ``/linkmc code:<string>``, whose invocation
is forwarded to the relay's link handler. ``DiscordPlatform`` wraps the bot
and exposes the id-based capabilities the relay core consumes, translating
discord.py exceptions into the relay's typed errors at this boundary.

The bot runs on the same event loop as the HTTP server; ``start()`` is
awaited as a background task from the FastAPI lifespan.
"""

import logging

import discord
from discord import app_commands

from mc_relay.config import DiscordSettings
from mc_relay.core.errors import (
    ChannelUnavailableError,
    GuildUnavailableError,
    NotReadyError,
    OperationContext,
    PermissionGrantError,
    SendFailedError,
)
from mc_relay.core.linking import DEFAULT_MAX_CODE_INPUT_LENGTH
from mc_relay.core.permissions import (
    Capability,
    PermissionOverwrite,
    PermissionOverwriteSet,
    Subject,
    SubjectKind,
)
from mc_relay.platform.base import ChannelInfo, GuildInfo, LinkCommandHandler

logger = logging.getLogger(__name__)

# Capability → discord.Permissions attribute name.
CAPABILITY_FLAGS: dict[Capability, str] = {
    Capability.VIEW_CHANNEL: "view_channel",
    Capability.READ_MESSAGE_HISTORY: "read_message_history",
    Capability.SEND_MESSAGES: "send_messages",
    Capability.EMBED_LINKS: "embed_links",
    Capability.MANAGE_CHANNEL: "manage_channels",
}

EMBED_DESCRIPTION_LIMIT = 4096
NOTIFICATION_COLOUR = discord.Colour.green()
AUDIT_REASON = "Minecraft update relay"


def to_discord_overwrite(overwrite: PermissionOverwrite) -> discord.PermissionOverwrite:
    """Translate a relay overwrite into a ``discord.PermissionOverwrite``."""
    flags: dict[str, bool] = {}
    for capability in overwrite.allow:
        flags[CAPABILITY_FLAGS[capability]] = True
    for capability in overwrite.deny:
        flags[CAPABILITY_FLAGS[capability]] = False
    return discord.PermissionOverwrite(**flags)


def format_notification(message: str, attribution: str) -> discord.Embed:
    """Build the embed posted for one game update."""
    if len(message) > EMBED_DESCRIPTION_LIMIT:
        message = message[: EMBED_DESCRIPTION_LIMIT - 1] + "…"
    embed = discord.Embed(
        title="Minecraft update",
        description=message,
        colour=NOTIFICATION_COLOUR,
        timestamp=discord.utils.utcnow(),
    )
    embed.set_footer(text=f"Player {attribution}")
    return embed


class RelayBot(discord.Client):
    """Gateway client with the ``/linkmc`` command registered to one guild."""

    def __init__(
        self,
        guild_id: int,
        *,
        max_code_length: int = DEFAULT_MAX_CODE_INPUT_LENGTH,
        intents: discord.Intents | None = None,
    ) -> None:
        if intents is None:
            intents = discord.Intents.default()
            intents.guilds = True
        super().__init__(intents=intents)
        self.guild_id = guild_id
        self.tree = app_commands.CommandTree(self)
        self.link_handler: LinkCommandHandler | None = None
        self.tree.add_command(
            self._build_link_command(max_code_length), guild=discord.Object(id=guild_id)
        )

    def _build_link_command(self, max_code_length: int) -> app_commands.Command:
        @app_commands.command(
            name="linkmc", description="Link your Minecraft account with an in-game code"
        )
        @app_commands.describe(code="Verification code shown in Minecraft")
        async def linkmc(
            interaction: discord.Interaction,
            code: app_commands.Range[str, 1, max_code_length],
        ) -> None:
            await self.handle_link(interaction, code)

        return linkmc

    async def handle_link(self, interaction: discord.Interaction, code: str) -> None:
        if self.link_handler is None:
            await interaction.response.send_message(
                "Account linking is not available right now.", ephemeral=True
            )
            return
        await interaction.response.defer(ephemeral=True, thinking=True)
        reply = await self.link_handler(code, interaction.user.id)
        await interaction.followup.send(reply, ephemeral=True)

    async def setup_hook(self) -> None:
        guild = discord.Object(id=self.guild_id)
        try:
            synced = await self.tree.sync(guild=guild)
            logger.info("Synced %d slash command(s) to guild %s", len(synced), self.guild_id)
        except discord.HTTPException:
            logger.exception("Failed to sync slash commands to guild %s", self.guild_id)

    async def on_ready(self) -> None:
        logger.info("Discord bot logged in as %s", self.user)
        if self.get_guild(self.guild_id) is None:
            logger.warning("Bot is not a member of configured guild %s", self.guild_id)


class DiscordPlatform:
    """``ChatPlatform`` backed by a discord.py gateway session."""

    def __init__(self, settings: DiscordSettings, *, bot: RelayBot | None = None) -> None:
        if settings.guild_id is None:
            raise ValueError("DiscordSettings.guild_id is required")
        self.settings = settings
        self.bot = bot if bot is not None else RelayBot(settings.guild_id)

    # ------------------------------------------------------------------
    # Session
    # ------------------------------------------------------------------

    @property
    def is_ready(self) -> bool:
        return self.bot.is_ready()

    async def start(self) -> None:
        await self.bot.start(self.settings.token)

    async def close(self) -> None:
        if not self.bot.is_closed():
            await self.bot.close()

    def set_link_handler(self, handler: LinkCommandHandler) -> None:
        self.bot.link_handler = handler

    # ------------------------------------------------------------------
    # Lookups
    # ------------------------------------------------------------------

    def _guild(self) -> discord.Guild:
        if not self.is_ready:
            raise NotReadyError(
                context=OperationContext(operation="discord.guild", details="Discord bot not ready")
            )
        guild = self.bot.get_guild(self.settings.guild_id)
        if guild is None:
            raise GuildUnavailableError(
                context=OperationContext(
                    operation="discord.guild",
                    details=f"Guild {self.settings.guild_id} not found",
                )
            )
        return guild

    async def resolve_guild(self) -> GuildInfo:
        guild = self._guild()
        return GuildInfo(id=guild.id, name=guild.name)

    async def _text_channel(self, channel_id: int) -> discord.TextChannel | None:
        guild = self._guild()
        channel = guild.get_channel(channel_id)
        if channel is None:
            try:
                channel = await guild.fetch_channel(channel_id)
            except discord.NotFound:
                return None
            except discord.HTTPException as exc:
                raise ChannelUnavailableError(
                    context=OperationContext(
                        operation="discord.fetch_channel", details=f"Channel {channel_id}: {exc}"
                    ),
                    cause=exc,
                ) from exc
        if not isinstance(channel, discord.TextChannel):
            return None
        return channel

    async def resolve_channel(self, channel_id: int) -> ChannelInfo | None:
        channel = await self._text_channel(channel_id)
        if channel is None:
            return None
        return ChannelInfo(id=channel.id, name=channel.name)

    def _overwrite_target(
        self, guild: discord.Guild, subject: Subject
    ) -> discord.abc.Snowflake:
        if subject.kind is SubjectKind.DEFAULT_AUDIENCE:
            return guild.default_role
        if subject.kind is SubjectKind.SERVICE:
            return guild.me
        if subject.kind is SubjectKind.ROLE:
            return guild.get_role(subject.id) or discord.Object(id=subject.id, type=discord.Role)
        return guild.get_member(subject.id) or discord.Object(id=subject.id, type=discord.Member)

    # ------------------------------------------------------------------
    # Mutations
    # ------------------------------------------------------------------

    async def create_text_channel(
        self,
        *,
        name: str,
        topic: str,
        category_id: int | None,
        overwrites: PermissionOverwriteSet,
    ) -> ChannelInfo:
        guild = self._guild()
        category = None
        if category_id is not None:
            category = guild.get_channel(category_id)
            if not isinstance(category, discord.CategoryChannel):
                logger.warning("Category %s not found; creating #%s without one", category_id, name)
                category = None

        mapped = {
            self._overwrite_target(guild, overwrite.subject): to_discord_overwrite(overwrite)
            for overwrite in overwrites
        }
        try:
            channel = await guild.create_text_channel(
                name=name,
                topic=topic,
                category=category,
                overwrites=mapped,
                reason=AUDIT_REASON,
            )
        except discord.HTTPException as exc:
            raise ChannelUnavailableError(
                context=OperationContext(
                    operation="discord.create_text_channel", details=f"#{name}: {exc}"
                ),
                cause=exc,
            ) from exc
        return ChannelInfo(id=channel.id, name=channel.name)

    async def send_notification(self, channel_id: int, *, message: str, attribution: str) -> None:
        channel = await self._text_channel(channel_id)
        if channel is None:
            raise SendFailedError(
                context=OperationContext(
                    operation="discord.send", details=f"Channel {channel_id} not found"
                )
            )
        try:
            await channel.send(embed=format_notification(message, attribution))
        except discord.HTTPException as exc:
            raise SendFailedError(
                context=OperationContext(operation="discord.send", details=str(exc)),
                cause=exc,
            ) from exc

    async def _member(self, guild: discord.Guild, user_id: int) -> discord.Member:
        # The member cache is sparse without the members intent.
        member = guild.get_member(user_id)
        if member is not None:
            return member
        try:
            return await guild.fetch_member(user_id)
        except discord.HTTPException as exc:
            raise PermissionGrantError(
                context=OperationContext(
                    operation="discord.fetch_member", details=f"User {user_id}: {exc}"
                ),
                cause=exc,
            ) from exc

    async def grant_access(
        self, channel_id: int, user_id: int, capabilities: frozenset[Capability]
    ) -> None:
        channel = await self._text_channel(channel_id)
        if channel is None:
            raise PermissionGrantError(
                context=OperationContext(
                    operation="discord.set_permissions", details=f"Channel {channel_id} not found"
                )
            )
        member = await self._member(channel.guild, user_id)
        overwrite = to_discord_overwrite(
            PermissionOverwrite(subject=Subject(SubjectKind.MEMBER, user_id), allow=capabilities)
        )
        try:
            await channel.set_permissions(member, overwrite=overwrite, reason=AUDIT_REASON)
        except (discord.HTTPException, ValueError) as exc:
            raise PermissionGrantError(
                context=OperationContext(operation="discord.set_permissions", details=str(exc)),
                cause=exc,
            ) from exc
        logger.info("Granted user %s access to channel %s", user_id, channel_id)
