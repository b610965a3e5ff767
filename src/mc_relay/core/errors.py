"""Typed error taxonomy for the relay.

Operations that cross into the chat platform raise these exceptions at the
adapter boundary; the dispatcher and linker catch them and hand callers a
typed result instead of letting a fault escape into request handling.

Design intent:
    - ``ValidationError`` is caller input and maps to HTTP 4xx.
    - ``NotReadyError`` is transient; the caller should retry later (503).
    - ``PlatformError`` covers guild/channel/send/grant failures (5xx). The
      relay never retries on its own.
    - ``CodeInvalidOrExpired`` is a user-facing rejection, not a fault.
    - ``ConfigurationError`` is startup-fatal.
"""

from __future__ import annotations

from dataclasses import dataclass


@dataclass(slots=True)
class OperationContext:
    """Structured operation metadata carried by relay exceptions.

    Attributes:
        operation: Stable operation identifier (for example
            ``"discord.create_text_channel"``).
        details: Optional human-readable context for logs and replies.
    """

    operation: str
    details: str | None = None


class RelayError(RuntimeError):
    """Base exception for relay failures.

    Args:
        context: Structured operation metadata.
        cause: Optional underlying exception.
    """

    def __init__(
        self,
        *,
        context: OperationContext,
        cause: Exception | None = None,
    ) -> None:
        message = context.operation
        if context.details:
            message = f"{message}: {context.details}"
        super().__init__(message)
        self.context = context
        self.cause = cause

    @property
    def detail(self) -> str:
        """Message safe to hand back to an API caller."""
        return self.context.details or self.context.operation


class ValidationError(RelayError):
    """Missing or malformed request fields."""


class NotReadyError(RelayError):
    """The chat platform session is not established yet."""


class PlatformError(RelayError):
    """A call against the chat platform failed."""


class GuildUnavailableError(PlatformError):
    """The configured guild could not be resolved."""


class ChannelUnavailableError(PlatformError):
    """A channel could not be created or resolved."""


class SendFailedError(PlatformError):
    """Posting a message to a channel failed."""


class PermissionGrantError(PlatformError):
    """Adding a permission overwrite to a channel failed."""


class CodeInvalidOrExpired(RelayError):
    """A verification code was unknown, already used, or past its expiry."""


class ConfigurationError(RelayError):
    """Required configuration is missing or unusable."""
