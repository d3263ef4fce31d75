"""Command-line entry point: launch the TUI or manage saved profiles."""

from __future__ import annotations

import argparse
import asyncio
import getpass
import logging
import sys
from uuid import UUID

from pydantic import ValidationError
from textual.logging import TextualHandler

from .app import QgoApp
from .commands import app_version
from .config import CONFIG_FILE, AppConfig, ConnectionProfileConfig, load_config, save_config
from .errors import ProfileNotFound, QgoError
from .models import DatabaseKind
from .session import Session

_KIND_CHOICES = {
    "mysql": DatabaseKind.MYSQL,
    "postgresql": DatabaseKind.POSTGRESQL,
    "postgres": DatabaseKind.POSTGRESQL,
    "sqlite": DatabaseKind.SQLITE,
}


def _port(text: str) -> int:
    port = int(text)
    if not 0 <= port <= 65535:
        raise argparse.ArgumentTypeError(f"port must be between 0 and 65535, got {port}")
    return port


def _positive(text: str) -> int:
    value = int(text)
    if value < 1:
        raise argparse.ArgumentTypeError(f"expected a positive number, got {value}")
    return value


def _row_limit(text: str) -> int | None:
    if text.strip().lower() == "none":
        return None
    return _positive(text)


def _non_negative(text: str) -> int:
    value = int(text)
    if value < 0:
        raise argparse.ArgumentTypeError(f"expected zero or more, got {value}")
    return value


def parse_args(argv: list[str]) -> argparse.Namespace:
    parser = argparse.ArgumentParser(prog="qgo", description="A read-only command-line SQL client.")
    parser.add_argument("-c", "--connection", metavar="NAME", help="Connect to a specific saved connection")
    parser.add_argument("-v", "--version", action="store_true", help="Display version information")
    parser.add_argument("--verbose", action="store_true", help="Log debug output")
    subparsers = parser.add_subparsers(dest="command")

    subparsers.add_parser("list", help="List saved connections")

    add = subparsers.add_parser("add", help="Save a new connection")
    add.add_argument("name", help="Connection name (replaces an existing one with the same name)")
    add.add_argument("--kind", required=True, choices=sorted(_KIND_CHOICES), help="Database type")
    add.add_argument("--host", default="localhost", help="Server host")
    add.add_argument("--port", type=_port, help="Server port (defaults to the backend's standard port)")
    add.add_argument("--user", default="", help="Username")
    add.add_argument("--database", default="", help="Database name, or file path for SQLite")
    add.add_argument("--test", action="store_true", help="Test the connection before saving")
    add.add_argument(
        "--save-anyway",
        action="store_true",
        help="Save the connection even when --test fails",
    )

    remove = subparsers.add_parser("remove", help="Delete a saved connection")
    remove.add_argument("target", help="Connection id (or name)")

    settings = subparsers.add_parser("settings", help="Show or change settings")
    settings.add_argument("--timeout", type=_positive, help="Connect timeout in seconds")
    settings.add_argument(
        "--max-rows",
        type=_row_limit,
        default=argparse.SUPPRESS,
        help="Rows shown per result, or 'none' for no limit",
    )
    settings.add_argument("--history-size", type=_non_negative, help="Queries kept in history")
    return parser.parse_args(argv)


def main(argv: list[str] | None = None) -> int:
    args = parse_args(sys.argv[1:] if argv is None else argv)
    if args.version:
        print(f"qgo version {app_version()}")
        print("A read-only command-line SQL client")
        return 0
    level = logging.DEBUG if args.verbose else logging.INFO
    if args.command is None:
        logging.basicConfig(level=level, handlers=[TextualHandler()])
        return _run_app(args.connection)
    logging.basicConfig(level=level, format="%(levelname)s %(name)s: %(message)s")
    config = load_config()
    if args.command == "list":
        return _list_profiles(config)
    if args.command == "add":
        return _add_profile(config, args)
    if args.command == "settings":
        return _update_settings(config, args)
    return _remove_profile(config, args.target)


def _run_app(connection: str | None) -> int:
    password: str | None = None
    if connection:
        config = load_config()
        profile = config.profile_by_name(connection)
        if profile is None:
            print(f"Error connecting to '{connection}': {ProfileNotFound(connection)}", file=sys.stderr)
            return 1
        password = "" if profile.kind is DatabaseKind.SQLITE else getpass.getpass("Enter password: ")
        app = QgoApp(config, initial_profile=connection, initial_password=password, exit_on_connect_failure=True)
    else:
        app = QgoApp()
    app.run()
    return app.return_code or 0


def _list_profiles(config: AppConfig) -> int:
    if not config.profiles:
        print(f"No database connections found in {CONFIG_FILE}.")
        return 0
    for profile in config.profiles:
        marker = "*" if profile.name == config.active_profile else " "
        print(f"{marker} {profile.id}  {profile.kind.value:<10}  {profile.display_name}")
    return 0


def _add_profile(config: AppConfig, args: argparse.Namespace) -> int:
    profile = ConnectionProfileConfig(
        name=args.name,
        kind=_KIND_CHOICES[args.kind],
        host=args.host,
        port=args.port,
        username=args.user,
        database=args.database,
    )
    if args.test:
        password = "" if profile.kind is DatabaseKind.SQLITE else getpass.getpass("Enter password: ")
        timeout = float(config.settings.query_timeout_seconds)
        try:
            asyncio.run(Session.test_connection(profile.to_profile(password), timeout))
        except QgoError as exc:
            print(f"Connection test failed: {exc}", file=sys.stderr)
            if not args.save_anyway:
                return 1
        else:
            print("Connection test succeeded.")
    save_config(config.with_profile(profile))
    print(f"Saved connection '{profile.name}' ({profile.id}).")
    return 0


def _update_settings(config: AppConfig, args: argparse.Namespace) -> int:
    updates: dict[str, object] = {}
    if args.timeout is not None:
        updates["query_timeout_seconds"] = args.timeout
    if "max_rows" in args:
        updates["max_rows_display"] = args.max_rows
    if args.history_size is not None:
        updates["history_size"] = args.history_size
    if updates:
        try:
            config = config.with_settings(**updates)
        except ValidationError as exc:
            print(f"Invalid settings: {exc}", file=sys.stderr)
            return 1
        save_config(config)
        print("Settings saved successfully!")
    settings = config.settings
    max_rows = "none" if settings.max_rows_display is None else settings.max_rows_display
    print(f"Query timeout: {settings.query_timeout_seconds} seconds")
    print(f"Max rows display: {max_rows}")
    print(f"History size: {settings.history_size}")
    return 0


def _remove_profile(config: AppConfig, target: str) -> int:
    try:
        profile_id = UUID(target)
    except ValueError:
        match = config.profile_by_name(target)
        if match is None:
            print(f"Error: {ProfileNotFound(target)}", file=sys.stderr)
            return 1
        profile_id = match.id
    try:
        updated = config.without_profile(profile_id)
    except ProfileNotFound as exc:
        print(f"Error: {exc}", file=sys.stderr)
        return 1
    save_config(updated)
    print(f"Removed connection {profile_id}.")
    return 0


__all__ = ["main", "parse_args"]
