"""Chat platform interface and the Discord implementation."""

from .base import ChannelInfo, ChatPlatform, GuildInfo, LinkCommandHandler

__all__ = ["ChannelInfo", "ChatPlatform", "GuildInfo", "LinkCommandHandler"]
