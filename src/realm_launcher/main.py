"""Command-line entry point for the realm launcher.

This module provides:
- Command-line argument parsing for every launcher operation
- Application initialization and dependency wiring
- Conversion of launcher errors into user-facing messages and exit codes
"""

import argparse
import asyncio
import os
import sys
from collections.abc import Sequence
from pathlib import Path

import structlog

from realm_launcher import __version__
from realm_launcher.models import AppSettings, ProfileCollection, ServerProfile
from realm_launcher.models.settings import DEFAULT_LOCALE
from realm_launcher.services.errors import AppError, get_error_service
from realm_launcher.services.launcher import LaunchService
from realm_launcher.services.logging import setup_logging
from realm_launcher.services.profile_store import ProfileStore
from realm_launcher.services.reachability import DEFAULT_TIMEOUT, ReachabilityService
from realm_launcher.services.realmlist import RealmlistSyncService


log = structlog.stdlib.get_logger()

DATA_DIR_ENV = "REALM_LAUNCHER_DATA_DIR"


def resolve_data_dir(explicit: Path | None = None) -> Path:
    """Pick the data directory: CLI option, then environment, then home."""
    if explicit is not None:
        return explicit
    from_env = os.getenv(DATA_DIR_ENV)
    if from_env:
        return Path(from_env)
    return Path.home() / ".config" / "realm-launcher"


class ApplicationContext:
    """Container for application services.

    Services are created lazily; none of them cache profiles or settings,
    so every command sees the current files.
    """

    def __init__(self, data_dir: Path) -> None:
        self.data_dir: Path = data_dir
        self._store: ProfileStore | None = None
        self._sync_service: RealmlistSyncService | None = None
        self._launcher: LaunchService | None = None
        self._reachability: ReachabilityService | None = None

    @property
    def store(self) -> ProfileStore:
        if self._store is None:
            self._store = ProfileStore(self.data_dir)
        return self._store

    @property
    def sync_service(self) -> RealmlistSyncService:
        if self._sync_service is None:
            self._sync_service = RealmlistSyncService()
        return self._sync_service

    @property
    def launcher(self) -> LaunchService:
        if self._launcher is None:
            self._launcher = LaunchService(self.store, self.sync_service)
        return self._launcher

    @property
    def reachability(self) -> ReachabilityService:
        if self._reachability is None:
            self._reachability = ReachabilityService()
        return self._reachability


def build_parser() -> argparse.ArgumentParser:
    """Build the argument parser with one subcommand per operation."""
    parser = argparse.ArgumentParser(
        prog="realm-launcher",
        description="Manage game server profiles, point the client at a realm and launch it",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  realm-launcher add --name Local --host 127.0.0.1 --path "C:/Games/WoW"
  realm-launcher play 1f0c...                Sync realmlist and start the client
  realm-launcher status --host logon.example.com
        """
    )

    _ = parser.add_argument("--version", action="version", version=f"%(prog)s {__version__}")
    _ = parser.add_argument(
        "--data-dir",
        type=Path,
        default=None,
        help=f"Directory holding servers.json and settings.json (default: ${DATA_DIR_ENV} or ~/.config/realm-launcher)"
    )
    _ = parser.add_argument(
        "--log-level",
        choices=["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"],
        default="WARNING",
        help="Set the logging level (default: WARNING)"
    )
    _ = parser.add_argument(
        "--log-dir",
        type=Path,
        default=None,
        help="Directory for log files (default: console only)"
    )

    commands = parser.add_subparsers(dest="command", required=True)

    _ = commands.add_parser("list", help="List saved servers")

    add = commands.add_parser("add", help="Add a server")
    _add_profile_arguments(add)

    update = commands.add_parser("update", help="Replace the fields of a saved server")
    _ = update.add_argument("id", help="Server id")
    _add_profile_arguments(update)

    remove = commands.add_parser("remove", help="Remove a saved server")
    _ = remove.add_argument("id", help="Server id")

    settings = commands.add_parser("settings", help="Show or change settings")
    _ = settings.add_argument("--default-path", default=None, help="Fallback game installation path")
    _ = settings.add_argument("--locale", default=None, help="Locale folder under Data/ (e.g. enUS)")

    sync = commands.add_parser("sync", help="Write the realmlist into a game installation")
    _ = sync.add_argument("--path", required=True, help="Game installation path")
    _ = sync.add_argument("--host", required=True, help="Realmlist host")
    _ = sync.add_argument("--locale", default=DEFAULT_LOCALE, help=f"Locale folder (default: {DEFAULT_LOCALE})")
    _ = sync.add_argument("--account", default=None, help="Account name to pre-fill")

    play = commands.add_parser("play", help="Sync the realmlist for a server and start the client")
    _ = play.add_argument("id", help="Server id")

    status = commands.add_parser("status", help="Check whether a realm accepts connections")
    target = status.add_mutually_exclusive_group(required=True)
    _ = target.add_argument("id", nargs="?", default=None, help="Server id")
    _ = target.add_argument("--host", default=None, help="Host to check instead of a saved server")
    _ = status.add_argument("--port", type=int, default=None, help="Port (default: the server's, or 3724)")
    _ = status.add_argument(
        "--timeout",
        type=float,
        default=DEFAULT_TIMEOUT,
        help=f"Connect timeout in seconds (default: {DEFAULT_TIMEOUT:g})"
    )

    return parser


def _add_profile_arguments(parser: argparse.ArgumentParser) -> None:
    _ = parser.add_argument("--name", required=True, help="Display name")
    _ = parser.add_argument("--host", required=True, help="Realmlist host")
    _ = parser.add_argument("--port", type=int, default=0, help="Port (default: 3724)")
    _ = parser.add_argument("--path", default=None, help="Game installation path (default: settings)")
    _ = parser.add_argument("--exe", default="", help="Client executable (default: Wow.exe)")
    _ = parser.add_argument("--account", default=None, help="Account name to pre-fill")


def _profile_from_args(args: argparse.Namespace) -> ServerProfile:
    return ServerProfile(
        name=args.name,
        realmlist_host=args.host,
        port=args.port,
        install_path=args.path,
        executable_name=args.exe,
        account_name=args.account,
    )


def format_profiles(collection: ProfileCollection) -> str:
    """Render the collection as one line per server."""
    if not collection.servers:
        return "No servers saved."
    lines = []
    for server in collection.servers:
        line = f"{server.id}  {server.name}  {server.realmlist_host}:{server.port}"
        if server.install_path:
            line += f"  [{server.install_path}]"
        if server.account_name:
            line += f"  account={server.account_name}"
        lines.append(line)
    return "\n".join(lines)


def format_settings(settings: AppSettings) -> str:
    return "\n".join([
        f"Default path: {settings.default_install_path or '(not set)'}",
        f"Locale: {settings.realmlist_locale}",
    ])


def run_command(args: argparse.Namespace, context: ApplicationContext) -> int:
    """Execute one parsed command, printing its result to stdout."""
    store = context.store

    if args.command == "list":
        print(format_profiles(store.load_profiles()))

    elif args.command == "add":
        collection = store.add_profile(_profile_from_args(args))
        print(f"Added {collection.servers[-1].id}")

    elif args.command == "update":
        store.update_profile(args.id, _profile_from_args(args))
        print(f"Updated {args.id}")

    elif args.command == "remove":
        store.remove_profile(args.id)
        print(f"Removed {args.id}")

    elif args.command == "settings":
        settings = store.load_settings()
        if args.default_path is not None or args.locale is not None:
            default_path = settings.default_install_path
            if args.default_path is not None:
                default_path = args.default_path or None  # --default-path "" clears it
            settings = AppSettings(
                default_install_path=default_path,
                realmlist_locale=args.locale or settings.realmlist_locale,
            )
            store.save_settings(settings)
        print(format_settings(settings))

    elif args.command == "sync":
        written = context.sync_service.sync(args.path, args.host, args.locale, args.account)
        for path in written:
            print(f"Wrote {path}")

    elif args.command == "play":
        plan = context.launcher.launch(args.id)
        print(f"Started {plan.executable} -> {plan.profile.realmlist_host}")

    elif args.command == "status":
        if args.id is not None:
            profile = store.get_profile(args.id)
            host, port = profile.realmlist_host, args.port or profile.port
        else:
            host, port = args.host, args.port
        status = asyncio.run(context.reachability.check(host, port, args.timeout))
        print(f"online ({status.latency_ms} ms)" if status.online else "offline")

    return 0


def main(argv: Sequence[str] | None = None) -> int:
    """Main entry point for the application."""
    args = build_parser().parse_args(argv)

    _ = setup_logging(log_level=args.log_level, log_dir=args.log_dir)

    context = ApplicationContext(resolve_data_dir(args.data_dir))
    log.debug("Running command", command=args.command, data_dir=str(context.data_dir))

    try:
        exit_code = run_command(args, context)

    except AppError as e:
        error_service = get_error_service()
        friendly = error_service.handle_error(e, operation=args.command)
        print(error_service.create_user_message(friendly), file=sys.stderr)
        exit_code = 1

    except KeyboardInterrupt:
        log.info("Interrupted by user")
        exit_code = 130  # Standard exit code for SIGINT

    except Exception as e:
        log.error("Unhandled exception", error=str(e), exc_info=True)
        error_service = get_error_service()
        friendly = error_service.handle_error(e, operation=args.command)
        print(f"Fatal error: {error_service.create_user_message(friendly)}", file=sys.stderr)
        exit_code = 1

    return exit_code


if __name__ == "__main__":
    sys.exit(main())
