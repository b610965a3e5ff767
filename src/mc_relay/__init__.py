"""Minecraft → Discord update relay.

Receives per-player update notifications from a game server over HTTP and
relays them into a private Discord channel for that player. Players can link
their Discord account to their in-game identity with a short verification
code redeemed through the ``/linkmc`` slash command.

Version Management
------------------
``__version__`` is read from the installed package metadata at import time.
The single source of truth is the ``version`` field in ``pyproject.toml``.
"""

from __future__ import annotations

from importlib.metadata import PackageNotFoundError, version

try:
    __version__: str = version("mc_relay")
except PackageNotFoundError:
    __version__ = "0.0.0-dev"
