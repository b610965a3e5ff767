"""
Route registration entry point for the FastAPI application.

Each router module exposes ``router(relay)`` and is included here.
"""

from fastapi import FastAPI

from mc_relay.api.routes import codes, health, updates
from mc_relay.core.relay import Relay


def register_routes(app: FastAPI, relay: Relay) -> None:
    """Register all API routes with the FastAPI app."""
    app.include_router(health.router(relay))
    app.include_router(updates.router(relay))
    app.include_router(codes.router(relay))
