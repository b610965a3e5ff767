"""Liveness endpoints.

``/`` reports whether the Discord session is up and how long the process has
been running. ``/health`` adds table sizes for dashboards.
"""

from fastapi import APIRouter

from mc_relay import __version__
from mc_relay.api.models import HealthResponse, StatusResponse
from mc_relay.core.relay import Relay


def router(relay: Relay) -> APIRouter:
    """Build the health router bound to ``relay``."""
    api = APIRouter()

    @api.get("/", response_model=StatusResponse)
    async def root():
        """Platform connection status and process uptime."""
        return StatusResponse(
            status="online",
            discord_connected=relay.platform.is_ready,
            uptime_seconds=round(relay.uptime_seconds, 3),
            version=__version__,
        )

    @api.get("/health", response_model=HealthResponse)
    async def health_check():
        return HealthResponse(
            status="ok",
            discord_connected=relay.platform.is_ready,
            channels=len(relay.channels),
            linked_accounts=len(relay.links),
            pending_codes=len(relay.codes),
        )

    return api
