"""
FastAPI application for the relay.

``create_app()`` wires a ``Relay`` into the HTTP routes and, when asked to,
runs the chat platform session and the expired-code sweeper from the app's
lifespan so the bot, the sweeper and the HTTP handlers share one event loop.

``start_server()`` is the production entry point: it validates the
configuration, configures logging, builds the Discord-backed relay and hands
the app to uvicorn.

If the Discord session ends with an error (bad token, gateway failure) the
failure is recorded on ``app.state`` and the process sends itself SIGTERM:
the relay cannot do anything useful without it. ``start_server()`` re-raises
the recorded failure once uvicorn has shut down.
"""

import asyncio
import logging
import os
import signal
from collections.abc import AsyncIterator
from contextlib import asynccontextmanager, suppress
from functools import partial

from fastapi import FastAPI
from fastapi.exceptions import RequestValidationError

from mc_relay import __version__
from mc_relay.api.routes.register import register_routes
from mc_relay.api.routes.utils import request_validation_handler
from mc_relay.config import ServerConfig, config, validate_config
from mc_relay.core.errors import OperationContext, PlatformError
from mc_relay.core.relay import Relay
from mc_relay.logging_config import configure_logging

logger = logging.getLogger(__name__)


def _on_platform_exit(app: FastAPI, task: asyncio.Task) -> None:
    """Record the failure and terminate when the platform session dies."""
    if task.cancelled():
        return
    exc = task.exception()
    if exc is None:
        logger.warning("Discord session closed")
        return
    logger.critical("Discord session failed: %s", exc, exc_info=exc)
    app.state.platform_error = exc
    os.kill(os.getpid(), signal.SIGTERM)


def create_app(relay: Relay, *, run_platform: bool = False) -> FastAPI:
    """
    Build the FastAPI app bound to ``relay``.

    Args:
        relay: The relay the routes operate on.
        run_platform: Start the chat platform session and the code sweeper
            in the app lifespan. Tests leave this off and drive a fake
            platform directly.
    """

    @asynccontextmanager
    async def lifespan(app: FastAPI) -> AsyncIterator[None]:
        platform_task: asyncio.Task | None = None
        on_exit = partial(_on_platform_exit, app)
        if run_platform:
            relay.sweeper.start()
            platform_task = asyncio.create_task(relay.platform.start(), name="chat-platform")
            platform_task.add_done_callback(on_exit)
            logger.info("Relay started; connecting to Discord")
        try:
            yield
        finally:
            await relay.sweeper.stop()
            if platform_task is not None:
                platform_task.remove_done_callback(on_exit)
                await relay.platform.close()
                if not platform_task.done():
                    platform_task.cancel()
                    with suppress(asyncio.CancelledError):
                        await platform_task
            logger.info("Relay stopped")

    app = FastAPI(title="Minecraft Update Relay", version=__version__, lifespan=lifespan)
    app.state.relay = relay
    app.state.platform_error = None
    app.add_exception_handler(RequestValidationError, request_validation_handler)
    register_routes(app, relay)
    return app


def build_relay(cfg: ServerConfig) -> Relay:
    """Build a relay backed by Discord from ``cfg``."""
    from mc_relay.platform.discord_client import DiscordPlatform, RelayBot

    bot = RelayBot(cfg.discord.guild_id, max_code_length=cfg.codes.max_input_length)
    return Relay.from_config(cfg, DiscordPlatform(cfg.discord, bot=bot))


def start_server(
    host: str | None = None,
    port: int | None = None,
    cfg: ServerConfig | None = None,
) -> None:
    """
    Validate configuration and run the relay under uvicorn.

    Raises:
        ConfigurationError: If the bot token or guild id is missing.
        PlatformError: If the Discord session failed while serving.
    """
    import uvicorn

    cfg = cfg or config
    validate_config(cfg)
    configure_logging(cfg.logging.level, cfg.logging.format)

    host = host or cfg.server.host
    port = port or cfg.server.port

    app = create_app(build_relay(cfg), run_platform=True)
    logger.info("Listening on %s:%s", host, port)
    uvicorn.run(app, host=host, port=port, log_level=cfg.logging.level.lower())

    error = app.state.platform_error
    if error is not None:
        raise PlatformError(
            context=OperationContext(operation="discord.session", details=str(error)),
            cause=error,
        ) from error
