"""
Relay configuration management.

This module handles loading and accessing relay configuration from multiple
sources with a clear priority order:

    1. Environment variables (highest priority) - for containerized deployments
    2. Config file (config/relay.ini) - for static deployments
    3. Built-in defaults (lowest priority) - sensible fallbacks

A ``.env`` file in the working directory is read with python-dotenv before
environment overrides are applied, so local development can keep the bot
token out of the INI file.

Configuration is loaded once at module import time and cached. Required
values (bot token, guild id) are NOT checked at import; call
``validate_config()`` at startup so a missing credential terminates the
process instead of degrading silently.

Usage:
    from mc_relay.config import config

    print(config.server.port)
    print(config.discord.guild_id)

Environment Variable Mapping:
    RELAY_HOST                    -> server.host
    RELAY_PORT                    -> server.port
    DISCORD_BOT_TOKEN             -> discord.token
    DISCORD_GUILD_ID              -> discord.guild_id
    DISCORD_CATEGORY_ID           -> discord.category_id
    DISCORD_ADMIN_ROLE_ID         -> discord.admin_role_id
    RELAY_CODE_TTL_SECONDS        -> codes.ttl_seconds
    RELAY_CODE_LENGTH             -> codes.length
    RELAY_SWEEP_INTERVAL_SECONDS  -> codes.sweep_interval_seconds
    RELAY_LOG_LEVEL               -> logging.level
    RELAY_LOG_FORMAT              -> logging.format
"""

import configparser
import os
from dataclasses import dataclass, field
from pathlib import Path
from typing import Literal

from dotenv import load_dotenv

from mc_relay.core.errors import ConfigurationError, OperationContext

# =============================================================================
# PATH CONFIGURATION
# =============================================================================

# Project root directory (contains src/, config/)
PROJECT_ROOT = Path(__file__).parent.parent.parent

CONFIG_DIR = PROJECT_ROOT / "config"
CONFIG_FILE = CONFIG_DIR / "relay.ini"
CONFIG_EXAMPLE = CONFIG_DIR / "relay.example.ini"


# =============================================================================
# CONFIGURATION DATACLASSES
# =============================================================================


@dataclass
class ServerSettings:
    """HTTP listener configuration."""

    host: str = "0.0.0.0"  # nosec B104 - intentional for server binding
    port: int = 3000


@dataclass
class DiscordSettings:
    """Chat platform connection and channel policy."""

    token: str = ""
    guild_id: int | None = None
    category_id: int | None = None
    admin_role_id: int | None = None


@dataclass
class CodeSettings:
    """Verification code policy."""

    ttl_seconds: int = 300
    length: int = 6
    sweep_interval_seconds: float = 60.0
    max_input_length: int = 16


@dataclass
class LoggingSettings:
    """Logging configuration."""

    level: str = "INFO"
    format: Literal["simple", "detailed", "json"] = "detailed"


@dataclass
class ServerConfig:
    """
    Complete relay configuration.

    Aggregates all settings sections. Access via the module-level ``config``
    singleton.
    """

    server: ServerSettings = field(default_factory=ServerSettings)
    discord: DiscordSettings = field(default_factory=DiscordSettings)
    codes: CodeSettings = field(default_factory=CodeSettings)
    logging: LoggingSettings = field(default_factory=LoggingSettings)

    @property
    def missing_required(self) -> list[str]:
        """Names of required settings that are not configured."""
        missing = []
        if not self.discord.token:
            missing.append("DISCORD_BOT_TOKEN")
        if self.discord.guild_id is None:
            missing.append("DISCORD_GUILD_ID")
        return missing


# =============================================================================
# CONFIGURATION LOADING
# =============================================================================


def _parse_optional_id(value: str) -> int | None:
    """Parse a snowflake id, treating blank values as unset."""
    value = value.strip()
    if not value:
        return None
    return int(value)


def _load_from_ini(parser: configparser.ConfigParser, cfg: ServerConfig) -> None:
    """Load configuration from parsed INI file into ServerConfig."""
    if parser.has_section("server"):
        if parser.has_option("server", "host"):
            cfg.server.host = parser.get("server", "host")
        if parser.has_option("server", "port"):
            cfg.server.port = parser.getint("server", "port")

    if parser.has_section("discord"):
        if parser.has_option("discord", "token"):
            cfg.discord.token = parser.get("discord", "token").strip()
        if parser.has_option("discord", "guild_id"):
            cfg.discord.guild_id = _parse_optional_id(parser.get("discord", "guild_id"))
        if parser.has_option("discord", "category_id"):
            cfg.discord.category_id = _parse_optional_id(parser.get("discord", "category_id"))
        if parser.has_option("discord", "admin_role_id"):
            cfg.discord.admin_role_id = _parse_optional_id(parser.get("discord", "admin_role_id"))

    if parser.has_section("codes"):
        if parser.has_option("codes", "ttl_seconds"):
            cfg.codes.ttl_seconds = parser.getint("codes", "ttl_seconds")
        if parser.has_option("codes", "length"):
            cfg.codes.length = parser.getint("codes", "length")
        if parser.has_option("codes", "sweep_interval_seconds"):
            cfg.codes.sweep_interval_seconds = parser.getfloat("codes", "sweep_interval_seconds")
        if parser.has_option("codes", "max_input_length"):
            cfg.codes.max_input_length = parser.getint("codes", "max_input_length")

    if parser.has_section("logging"):
        if parser.has_option("logging", "level"):
            cfg.logging.level = parser.get("logging", "level").upper()
        if parser.has_option("logging", "format"):
            val = parser.get("logging", "format").lower()
            if val in ("simple", "detailed", "json"):
                cfg.logging.format = val  # type: ignore[assignment]


def _apply_env_overrides(cfg: ServerConfig) -> None:
    """Apply environment variable overrides to configuration."""
    if env_host := os.getenv("RELAY_HOST"):
        cfg.server.host = env_host
    if env_port := os.getenv("RELAY_PORT") or os.getenv("PORT"):
        cfg.server.port = int(env_port)

    if env_token := os.getenv("DISCORD_BOT_TOKEN") or os.getenv("BOT_TOKEN"):
        cfg.discord.token = env_token.strip()
    if env_guild := os.getenv("DISCORD_GUILD_ID"):
        cfg.discord.guild_id = _parse_optional_id(env_guild)
    if env_category := os.getenv("DISCORD_CATEGORY_ID"):
        cfg.discord.category_id = _parse_optional_id(env_category)
    if env_admin := os.getenv("DISCORD_ADMIN_ROLE_ID"):
        cfg.discord.admin_role_id = _parse_optional_id(env_admin)

    if env_ttl := os.getenv("RELAY_CODE_TTL_SECONDS"):
        cfg.codes.ttl_seconds = int(env_ttl)
    if env_length := os.getenv("RELAY_CODE_LENGTH"):
        cfg.codes.length = int(env_length)
    if env_sweep := os.getenv("RELAY_SWEEP_INTERVAL_SECONDS"):
        cfg.codes.sweep_interval_seconds = float(env_sweep)

    if env_log := os.getenv("RELAY_LOG_LEVEL"):
        cfg.logging.level = env_log.upper()
    if env_format := os.getenv("RELAY_LOG_FORMAT"):
        if env_format.lower() in ("simple", "detailed", "json"):
            cfg.logging.format = env_format.lower()  # type: ignore[assignment]


def load_config(*, use_dotenv: bool = True) -> ServerConfig:
    """
    Load configuration from all sources with proper priority.

    Priority (highest wins):
        1. Environment variables (including values loaded from ``.env``)
        2. config/relay.ini
        3. config/relay.example.ini (fallback for development)
        4. Built-in defaults

    Returns:
        ServerConfig: Fully populated configuration object.
    """
    cfg = ServerConfig()

    config_file = None
    if CONFIG_FILE.exists():
        config_file = CONFIG_FILE
    elif CONFIG_EXAMPLE.exists():
        config_file = CONFIG_EXAMPLE

    if config_file:
        parser = configparser.ConfigParser()
        parser.read(config_file)
        _load_from_ini(parser, cfg)

    if use_dotenv:
        # Existing process environment wins over .env entries.
        load_dotenv(override=False)

    _apply_env_overrides(cfg)

    return cfg


def validate_config(cfg: ServerConfig) -> None:
    """
    Ensure the settings the relay cannot run without are present.

    Raises:
        ConfigurationError: If the bot token or guild id is missing.
    """
    missing = cfg.missing_required
    if missing:
        raise ConfigurationError(
            context=OperationContext(
                operation="config.validate",
                details=f"missing required settings: {', '.join(missing)}",
            )
        )


def reload_config() -> ServerConfig:
    """Reload configuration from disk and environment into the singleton."""
    global config
    config = load_config()
    return config


# =============================================================================
# MODULE-LEVEL SINGLETON
# =============================================================================

config = load_config()


# =============================================================================
# UTILITY FUNCTIONS
# =============================================================================


def get_config_status(cfg: ServerConfig | None = None) -> dict:
    """
    Get configuration status for diagnostics.

    Secrets are never included; only whether they are set.
    """
    cfg = cfg or config
    return {
        "config_file_exists": CONFIG_FILE.exists(),
        "config_file_path": str(CONFIG_FILE),
        "using_example": not CONFIG_FILE.exists() and CONFIG_EXAMPLE.exists(),
        "token_configured": bool(cfg.discord.token),
        "guild_id": cfg.discord.guild_id,
        "category_id": cfg.discord.category_id,
        "admin_role_id": cfg.discord.admin_role_id,
        "missing_required": cfg.missing_required,
    }


def print_config_summary(cfg: ServerConfig | None = None) -> None:
    """Print a summary of the configuration to stdout."""
    cfg = cfg or config
    status = get_config_status(cfg)
    print("\n" + "=" * 60)
    print("RELAY CONFIGURATION")
    print("=" * 60)
    print(f"Config file:  {status['config_file_path']}")
    print(f"File exists:  {status['config_file_exists']}")
    if status["using_example"]:
        print("WARNING: Using example config (copy to relay.ini for production)")
    print("-" * 60)
    print(f"Server:       {cfg.server.host}:{cfg.server.port}")
    print(f"Bot token:    {'set' if status['token_configured'] else 'MISSING'}")
    print(f"Guild:        {cfg.discord.guild_id or 'MISSING'}")
    print(f"Category:     {cfg.discord.category_id or '-'}")
    print(f"Admin role:   {cfg.discord.admin_role_id or '-'}")
    print(f"Code TTL:     {cfg.codes.ttl_seconds}s (length {cfg.codes.length})")
    print(f"Log level:    {cfg.logging.level} ({cfg.logging.format})")
    print("=" * 60 + "\n")
