"""Command-line entry point: ``kit-update update`` and ``kit-update info``."""

import argparse
import json
import logging
import os
import sys

import yaml
from dotenv import load_dotenv

from . import __version__
from .config import load_settings
from .config_loader import load_hierarchical_config
from .config_schema import UnifiedConfig, build_config
from .errors import UpdateError, format_error
from .info import collect_install_info, format_install_info, info_to_json
from .logger import setup_logging
from .update.fetch import TRANSPORTS, create_fetcher
from .update.orchestrator import UpdateOrchestrator
from .update.reporter import format_update_result, result_to_json

logger = logging.getLogger(__name__)

EXIT_OK = 0
EXIT_FAILURE = 1
EXIT_INTERRUPTED = 130


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="kit-update",
        description="Update an installed component tree from a remote branch",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  # Preview what an update would change
  kit-update update --repo acme/kit --dry-run

  # Update, replacing the config document instead of merging it
  kit-update update --repo acme/kit --force

  # Update from a branch and keep the backup afterwards
  kit-update update --branch next --keep-backup

  # Show the installed version and file counts
  kit-update info

Settings can also come from KIT_UPDATE_* environment variables, a .env file
or .kit_update/config.yml. Logs are written to stderr.
        """,
    )
    parser.add_argument(
        "--debug", action="store_true", help="Enable debug logging"
    )
    parser.add_argument(
        "--log-file", help="Also append log records to this file"
    )
    parser.add_argument(
        "--debug-format",
        choices=("text", "json"),
        default="text",
        help="Log record format (default: text)",
    )
    parser.add_argument(
        "--version",
        action="version",
        version=f"kit-update version {__version__}",
    )

    sub = parser.add_subparsers(dest="command", required=True)

    update = sub.add_parser("update", help="Update the installed tree")
    update.add_argument(
        "--path", help="Installed tree (default: ./.kit-core or update.installed_dir)"
    )
    update.add_argument(
        "--repo",
        help="Repository: owner/name, clone URL or local path "
        "(takes precedence over KIT_UPDATE_REPO and config files)",
    )
    update.add_argument("--branch", help="Branch to fetch (default: main)")
    update.add_argument(
        "-f",
        "--force",
        action="store_true",
        help="Replace the config document instead of merging it",
    )
    update.add_argument(
        "-n",
        "--dry-run",
        action="store_true",
        help="Show what would change without modifying anything",
    )
    update.add_argument(
        "--keep-backup",
        action="store_true",
        help="Keep the backup after a successful update",
    )
    update.add_argument(
        "--transport", choices=TRANSPORTS, help="How to fetch (default: git)"
    )
    update.add_argument(
        "--json", action="store_true", help="Print the result as JSON"
    )

    info = sub.add_parser("info", help="Show installed version and file counts")
    info.add_argument("--path", help="Installed tree (default: ./.kit-core)")
    info.add_argument(
        "--json", action="store_true", help="Print the result as JSON"
    )
    return parser


def _load_unified_config() -> UnifiedConfig:
    try:
        return build_config(load_hierarchical_config())
    except (yaml.YAMLError, OSError) as exc:
        raise ValueError(f"Cannot load config file: {exc}") from exc


def _emit(payload: dict | str, as_json: bool) -> None:
    if as_json:
        print(json.dumps(payload, indent=2))
    else:
        print(payload)


def cmd_update(args: argparse.Namespace, unified: UnifiedConfig) -> int:
    settings = load_settings(
        unified,
        path=args.path,
        repo=args.repo,
        branch=args.branch,
        transport=args.transport,
        keep_backup=args.keep_backup,
    )
    context = settings.to_context(force=args.force, dry_run=args.dry_run)
    orchestrator = UpdateOrchestrator(
        context, fetcher=create_fetcher(settings.transport)
    )

    try:
        result = orchestrator.run()
    except UpdateError as exc:
        if args.json:
            _emit(
                {
                    "state": orchestrator.state.value,
                    "error": {
                        "kind": exc.kind,
                        "message": exc.message,
                        "hints": list(exc.hints),
                    },
                    "backup_path": str(exc.backup_path) if exc.backup_path else None,
                },
                as_json=True,
            )
        print(format_error(exc), file=sys.stderr)
        return EXIT_FAILURE

    if args.json:
        _emit(result_to_json(result), as_json=True)
    else:
        _emit(format_update_result(result), as_json=False)
    return EXIT_OK


def cmd_info(args: argparse.Namespace, unified: UnifiedConfig) -> int:
    settings = load_settings(unified, path=args.path)
    info = collect_install_info(settings.installed_root, settings.config_file)
    if args.json:
        _emit(info_to_json(info), as_json=True)
    else:
        _emit(format_install_info(info), as_json=False)
    return EXIT_OK


_COMMANDS = {"update": cmd_update, "info": cmd_info}


def main(argv: list[str] | None = None) -> int:
    """Parse *argv*, run the command and return the exit status."""
    parser = build_parser()
    args = parser.parse_args(argv)

    load_dotenv()

    try:
        unified = _load_unified_config()
        setup_logging(
            debug=args.debug,
            log_file=args.log_file
            or os.getenv("LOG_FILE")
            or unified.logging.file,
            debug_format=args.debug_format,
            level=unified.logging.level,
        )
        return _COMMANDS[args.command](args, unified)
    except ValueError as exc:
        print(f"Error (config): {exc}", file=sys.stderr)
        return EXIT_FAILURE
    except KeyboardInterrupt:
        print("\nInterrupted.", file=sys.stderr)
        return EXIT_INTERRUPTED


def run() -> None:
    """Console script entry point."""
    sys.exit(main())


if __name__ == "__main__":
    run()
