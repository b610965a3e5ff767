"""
Unit tests for configuration loading (mc_relay/config.py).

Tests cover:
- Built-in defaults
- INI parsing for every section
- Environment variable overrides and fallbacks
- Required-value validation
- Status reporting without secrets
"""

import configparser
from unittest.mock import patch

import pytest

from mc_relay import config as config_module
from mc_relay.config import (
    DiscordSettings,
    ServerConfig,
    _apply_env_overrides,
    _load_from_ini,
    _parse_optional_id,
    get_config_status,
    load_config,
    print_config_summary,
    validate_config,
)
from mc_relay.core.errors import ConfigurationError

# ============================================================================
# DEFAULTS
# ============================================================================


@pytest.mark.unit
def test_defaults():
    cfg = ServerConfig()
    assert cfg.server.host == "0.0.0.0"
    assert cfg.server.port == 3000
    assert cfg.discord.token == ""
    assert cfg.discord.guild_id is None
    assert cfg.codes.ttl_seconds == 300
    assert cfg.codes.length == 6
    assert cfg.logging.level == "INFO"
    assert cfg.logging.format == "detailed"


@pytest.mark.unit
@pytest.mark.parametrize(("raw", "expected"), [("", None), ("  ", None), ("123", 123), (" 42 ", 42)])
def test_parse_optional_id(raw, expected):
    assert _parse_optional_id(raw) == expected


# ============================================================================
# INI LOADING
# ============================================================================


@pytest.mark.unit
def test_load_from_ini_all_sections():
    parser = configparser.ConfigParser()
    parser.read_string(
        """
        [server]
        host = 127.0.0.1
        port = 8080

        [discord]
        token = abc
        guild_id = 111
        category_id = 222
        admin_role_id =

        [codes]
        ttl_seconds = 120
        length = 8
        sweep_interval_seconds = 15
        max_input_length = 12

        [logging]
        level = debug
        format = JSON
        """
    )
    cfg = ServerConfig()

    _load_from_ini(parser, cfg)

    assert cfg.server.host == "127.0.0.1"
    assert cfg.server.port == 8080
    assert cfg.discord.token == "abc"
    assert cfg.discord.guild_id == 111
    assert cfg.discord.category_id == 222
    assert cfg.discord.admin_role_id is None
    assert cfg.codes.ttl_seconds == 120
    assert cfg.codes.length == 8
    assert cfg.codes.sweep_interval_seconds == 15.0
    assert cfg.codes.max_input_length == 12
    assert cfg.logging.level == "DEBUG"
    assert cfg.logging.format == "json"


@pytest.mark.unit
def test_load_from_ini_ignores_unknown_format():
    parser = configparser.ConfigParser()
    parser.read_string("[logging]\nformat = fancy\n")
    cfg = ServerConfig()
    _load_from_ini(parser, cfg)
    assert cfg.logging.format == "detailed"


@pytest.mark.unit
def test_load_config_reads_example_file(clean_env, tmp_path):
    example = tmp_path / "relay.example.ini"
    example.write_text("[server]\nport = 3100\n")
    with (
        patch.object(config_module, "CONFIG_FILE", tmp_path / "relay.ini"),
        patch.object(config_module, "CONFIG_EXAMPLE", example),
    ):
        cfg = load_config(use_dotenv=False)
    assert cfg.server.port == 3100


@pytest.mark.unit
def test_load_config_prefers_real_file(clean_env, tmp_path):
    (tmp_path / "relay.ini").write_text("[server]\nport = 3200\n")
    (tmp_path / "relay.example.ini").write_text("[server]\nport = 3100\n")
    with (
        patch.object(config_module, "CONFIG_FILE", tmp_path / "relay.ini"),
        patch.object(config_module, "CONFIG_EXAMPLE", tmp_path / "relay.example.ini"),
    ):
        cfg = load_config(use_dotenv=False)
    assert cfg.server.port == 3200


# ============================================================================
# ENVIRONMENT OVERRIDES
# ============================================================================


@pytest.mark.unit
class TestEnvOverrides:
    def test_all_variables(self, clean_env):
        clean_env.setenv("RELAY_HOST", "10.0.0.1")
        clean_env.setenv("RELAY_PORT", "9000")
        clean_env.setenv("DISCORD_BOT_TOKEN", " secret ")
        clean_env.setenv("DISCORD_GUILD_ID", "1")
        clean_env.setenv("DISCORD_CATEGORY_ID", "2")
        clean_env.setenv("DISCORD_ADMIN_ROLE_ID", "3")
        clean_env.setenv("RELAY_CODE_TTL_SECONDS", "60")
        clean_env.setenv("RELAY_CODE_LENGTH", "4")
        clean_env.setenv("RELAY_SWEEP_INTERVAL_SECONDS", "2.5")
        clean_env.setenv("RELAY_LOG_LEVEL", "warning")
        clean_env.setenv("RELAY_LOG_FORMAT", "simple")
        cfg = ServerConfig()

        _apply_env_overrides(cfg)

        assert cfg.server.host == "10.0.0.1"
        assert cfg.server.port == 9000
        assert cfg.discord.token == "secret"
        assert (cfg.discord.guild_id, cfg.discord.category_id, cfg.discord.admin_role_id) == (1, 2, 3)
        assert cfg.codes.ttl_seconds == 60
        assert cfg.codes.length == 4
        assert cfg.codes.sweep_interval_seconds == 2.5
        assert cfg.logging.level == "WARNING"
        assert cfg.logging.format == "simple"

    def test_fallback_names(self, clean_env):
        clean_env.setenv("PORT", "3500")
        clean_env.setenv("BOT_TOKEN", "legacy")
        cfg = ServerConfig()
        _apply_env_overrides(cfg)
        assert cfg.server.port == 3500
        assert cfg.discord.token == "legacy"

    def test_prefixed_names_win(self, clean_env):
        clean_env.setenv("PORT", "3500")
        clean_env.setenv("RELAY_PORT", "3600")
        cfg = ServerConfig()
        _apply_env_overrides(cfg)
        assert cfg.server.port == 3600

    def test_env_beats_ini(self, clean_env, tmp_path):
        (tmp_path / "relay.ini").write_text("[discord]\nguild_id = 1\n")
        clean_env.setenv("DISCORD_GUILD_ID", "2")
        with patch.object(config_module, "CONFIG_FILE", tmp_path / "relay.ini"):
            cfg = load_config(use_dotenv=False)
        assert cfg.discord.guild_id == 2

    def test_no_env_leaves_defaults(self, clean_env):
        cfg = ServerConfig()
        _apply_env_overrides(cfg)
        assert cfg == ServerConfig()


# ============================================================================
# VALIDATION AND STATUS
# ============================================================================


@pytest.mark.unit
class TestValidation:
    def test_missing_both(self):
        cfg = ServerConfig()
        assert cfg.missing_required == ["DISCORD_BOT_TOKEN", "DISCORD_GUILD_ID"]
        with pytest.raises(ConfigurationError, match="DISCORD_BOT_TOKEN"):
            validate_config(cfg)

    def test_missing_guild_only(self):
        cfg = ServerConfig(discord=DiscordSettings(token="t"))
        assert cfg.missing_required == ["DISCORD_GUILD_ID"]

    def test_complete(self):
        validate_config(ServerConfig(discord=DiscordSettings(token="t", guild_id=1)))

    def test_status_hides_token(self):
        status = get_config_status(ServerConfig(discord=DiscordSettings(token="very-secret", guild_id=1)))
        assert status["token_configured"] is True
        assert "very-secret" not in str(status)
        assert status["missing_required"] == []

    def test_summary_hides_token(self, capsys):
        print_config_summary(ServerConfig(discord=DiscordSettings(token="very-secret", guild_id=1)))
        out = capsys.readouterr().out
        assert "RELAY CONFIGURATION" in out
        assert "very-secret" not in out
