"""
Pydantic models for API requests and responses.

The game-server mod speaks camelCase JSON (``channelId``, ``expiresIn``), so
every model uses a camelCase alias generator while Python code keeps
snake_case attribute names.

Request fields are optional at the schema level on purpose: a missing
``uuid`` or ``message`` must produce the relay's own 400 response rather than
FastAPI's generic 422.
"""

from pydantic import BaseModel, ConfigDict
from pydantic.alias_generators import to_camel


class RelayModel(BaseModel):
    """Base model with camelCase aliases."""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


# ============================================================================
# REQUEST MODELS (Game server → Relay)
# ============================================================================


class SendUpdateRequest(RelayModel):
    """
    Update notification for one player.

    Attributes:
        uuid: Player UUID as reported by the game server.
        message: Text to relay into the player's channel.
    """

    uuid: str | None = None
    message: str | None = None


class GenerateCodeRequest(RelayModel):
    """
    Request for a Discord link code.

    Attributes:
        uuid: Player UUID the code will link.
    """

    uuid: str | None = None


# ============================================================================
# RESPONSE MODELS (Relay → Game server)
# ============================================================================


class SendUpdateResponse(RelayModel):
    success: bool
    channel_id: str
    channel_name: str


class GenerateCodeResponse(RelayModel):
    """
    Code issuance outcome.

    Either ``code``/``expires_in`` are set (``success`` true) or
    ``already_linked`` is true and no code was issued.
    """

    success: bool
    code: str | None = None
    expires_in: int | None = None
    already_linked: bool | None = None


class StatusResponse(RelayModel):
    """Liveness information for ``GET /``."""

    status: str
    discord_connected: bool
    uptime_seconds: float
    version: str


class HealthResponse(RelayModel):
    status: str
    discord_connected: bool
    channels: int
    linked_accounts: int
    pending_codes: int
