"""Link code endpoint used by the game server."""

from fastapi import APIRouter

from mc_relay.api.models import GenerateCodeRequest, GenerateCodeResponse
from mc_relay.api.routes.utils import raise_for_error
from mc_relay.core.relay import Relay


def router(relay: Relay) -> APIRouter:
    """Build the code router bound to ``relay``."""
    api = APIRouter()

    @api.post(
        "/generate-code",
        response_model=GenerateCodeResponse,
        response_model_exclude_none=True,
    )
    async def generate_code(request: GenerateCodeRequest):
        """
        Issue a verification code the player redeems with ``/linkmc``.

        A uuid that is already linked gets ``alreadyLinked: true`` and no
        code.
        """
        result = relay.linker.issue_code(request.uuid)
        if result.error is not None:
            raise_for_error(result.error)

        if result.already_linked:
            return GenerateCodeResponse(success=False, already_linked=True)

        return GenerateCodeResponse(
            success=True,
            code=result.code,
            expires_in=result.expires_in,
        )

    return api
