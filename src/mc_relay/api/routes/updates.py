"""Update relay endpoint used by the game server."""

from fastapi import APIRouter

from mc_relay.api.models import SendUpdateRequest, SendUpdateResponse
from mc_relay.api.routes.utils import raise_for_error
from mc_relay.core.relay import Relay


def router(relay: Relay) -> APIRouter:
    """Build the update router bound to ``relay``."""
    api = APIRouter()

    @api.post("/send-update", response_model=SendUpdateResponse)
    async def send_update(request: SendUpdateRequest):
        """
        Relay one player update into that player's private channel.

        Creates the channel on the first update for a uuid. Responds 400 on
        missing fields, 503 while the Discord session is not ready, and 500
        when Discord rejects a guild, channel, or send call.
        """
        result = await relay.dispatcher.send_update(request.uuid, request.message)
        if not result.success:
            raise_for_error(result.error)

        return SendUpdateResponse(
            success=True,
            channel_id=str(result.channel_id),
            channel_name=result.channel_name,
        )

    return api
