"""
Command-line interface for the Minecraft update relay.

Provides CLI commands for running and checking the relay:
- run: Start the HTTP API and the Discord bot
- check-config: Print the effective configuration and report missing values

Usage:
    mc-relay run [--host HOST] [--port PORT]
    mc-relay check-config

Environment Variables:
    DISCORD_BOT_TOKEN: Bot token (required)
    DISCORD_GUILD_ID: Guild the relay manages channels in (required)
    RELAY_HOST: Host to bind the API server (default: 0.0.0.0)
    RELAY_PORT: Port for the API server (default: 3000)
"""

import argparse
import sys

from mc_relay.core.errors import ConfigurationError, PlatformError


def cmd_check_config(args: argparse.Namespace) -> int:
    """
    Print the configuration summary.

    Returns:
        0 when all required settings are present, 1 otherwise.
    """
    from mc_relay.config import config, print_config_summary

    print_config_summary(config)
    missing = config.missing_required
    if missing:
        print(f"Error: missing required settings: {', '.join(missing)}", file=sys.stderr)
        return 1
    return 0


def cmd_run(args: argparse.Namespace) -> int:
    """
    Run the relay (HTTP API + Discord bot) in this process.

    Configuration Priority:
        1. CLI arguments (--host, --port)
        2. Environment variables (RELAY_HOST, RELAY_PORT)
        3. config/relay.ini, then built-in defaults

    Returns:
        0 on clean shutdown (including Ctrl+C)
        1 on missing configuration, startup error or Discord session failure
    """
    from mc_relay.api.server import start_server

    host = getattr(args, "host", None)
    port = getattr(args, "port", None)

    try:
        start_server(host=host, port=port)
        return 0
    except ConfigurationError as e:
        print(f"Error: {e}", file=sys.stderr)
        return 1
    except PlatformError as e:
        print(f"Error: Discord session failed: {e}", file=sys.stderr)
        return 1
    except KeyboardInterrupt:
        print("\nRelay stopped.")
        return 0
    except Exception as e:
        print(f"Error starting relay: {e}", file=sys.stderr)
        return 1


def main() -> int:
    """Main entry point for the CLI."""
    parser = argparse.ArgumentParser(
        prog="mc-relay",
        description="Relay Minecraft player updates into private Discord channels",
    )

    subparsers = parser.add_subparsers(dest="command", help="Available commands")

    check_parser = subparsers.add_parser(
        "check-config",
        help="Show the effective configuration",
        description="Print the effective configuration and exit non-zero if required values are missing.",
    )
    check_parser.set_defaults(func=cmd_check_config)

    run_parser = subparsers.add_parser(
        "run",
        help="Run the relay",
        description="Start the HTTP API and connect the Discord bot.",
    )
    run_parser.add_argument(
        "--port",
        "-p",
        type=int,
        help="API server port (default: 3000, or RELAY_PORT env var)",
    )
    run_parser.add_argument(
        "--host",
        type=str,
        help="Host to bind the API server to (default: 0.0.0.0, or RELAY_HOST env var)",
    )
    run_parser.set_defaults(func=cmd_run)

    args = parser.parse_args()

    if args.command is None:
        parser.print_help()
        return 0

    return args.func(args)


if __name__ == "__main__":
    sys.exit(main())
