"""Command-line interface for LuminaShot.

Entry point flow:
1. Parse arguments (introspection flags exit early)
2. Load configuration once
3. Run the selection mode to get a geometry
4. Capture, then copy/notify/print
"""

import argparse
import asyncio
import json
import logging
import sys
import uuid
from pathlib import Path
from typing import Optional

from . import __version__, emit as events
from .capture import grab
from .config import (
    Config,
    config_defaults,
    config_schema,
    config_to_dict,
    load_config,
    validate_config_file,
)
from .errors import LuminashotError
from .hyprland import Geometry, HyprlandClient
from .output import OutputOptions, deliver
from .selection import Mode, run_mode

log = logging.getLogger(__name__)


def positive_int(value: str) -> int:
    try:
        number = int(value)
    except ValueError:
        raise argparse.ArgumentTypeError(f"invalid integer: {value!r}")
    if number < 1:
        raise argparse.ArgumentTypeError(f"must be >= 1, got {number}")
    return number


def create_argument_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="luminashot",
        description="A reactive screenshot tool for Hyprland",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  %(prog)s                        # Capture the monitor under the cursor
  %(prog)s -m region              # Drag a region
  %(prog)s -m window              # Pick a window, follows workspace switches
  %(prog)s -m window --json       # Print JSON metadata
  %(prog)s -m region -o /tmp/shot.png --no-notification
""",
    )

    parser.add_argument(
        "--version",
        action="version",
        version=f"luminashot {__version__}",
    )
    parser.add_argument(
        "--mode", "-m",
        choices=[m.value for m in Mode],
        default=Mode.MONITOR.value,
        help="What to capture (default: monitor)",
    )
    parser.add_argument(
        "--config",
        metavar="PATH",
        help="Path to config file (default: platform config dir)",
    )

    # Introspection
    parser.add_argument(
        "--print-defaults",
        action="store_true",
        help="Print default configuration as JSON and exit",
    )
    parser.add_argument(
        "--print-config-schema",
        action="store_true",
        help="Print configuration schema as JSON and exit",
    )
    parser.add_argument(
        "--print-resolved",
        action="store_true",
        help="Print resolved configuration as JSON and exit",
    )
    parser.add_argument(
        "--validate-config",
        action="store_true",
        help="Validate configuration file and exit",
    )

    # Output options
    parser.add_argument(
        "--output", "-o",
        metavar="PATH",
        help="Custom output path (default: <output_dir>/<timestamp>-luminashot.png)",
    )
    parser.add_argument(
        "--no-clipboard",
        action="store_true",
        help="Do not copy to clipboard",
    )
    parser.add_argument(
        "--no-notification",
        action="store_true",
        help="Do not show notification",
    )
    parser.add_argument(
        "--stdout",
        action="store_true",
        help="Print output path to stdout",
    )
    parser.add_argument(
        "--json",
        action="store_true",
        help="Output JSON metadata to stdout",
    )

    # Behavior
    parser.add_argument(
        "--poll-interval",
        type=positive_int,
        metavar="MS",
        help="Workspace polling interval in window mode (default: 200)",
    )
    parser.add_argument(
        "--quiet-events",
        action="store_true",
        help="Do not write JSON events to stderr",
    )
    parser.add_argument(
        "--debug",
        action="store_true",
        help="Enable debug logging",
    )

    return parser


def _emit_json(payload: dict) -> None:
    print(json.dumps(payload, indent=2, sort_keys=True))


def _handle_introspection(args: argparse.Namespace) -> Optional[int]:
    config_path = Path(args.config).expanduser() if args.config else None

    if args.print_defaults:
        _emit_json(config_defaults())
        return 0

    if args.print_config_schema:
        _emit_json(config_schema())
        return 0

    if args.print_resolved:
        try:
            config = load_config(config_path=config_path)
        except ValueError as e:
            print(e, file=sys.stderr)
            return 1
        _emit_json(config_to_dict(config))
        return 0

    if args.validate_config:
        try:
            errors = validate_config_file(config_path)
        except ValueError as e:
            errors = [str(e)]
        for error in errors:
            print(error, file=sys.stderr)
        return 1 if errors else 0

    return None


def build_output_options(args: argparse.Namespace, config: Config) -> OutputOptions:
    return OutputOptions.from_config(
        config,
        clipboard=False if args.no_clipboard else None,
        notification=False if args.no_notification else None,
        stdout=args.stdout,
        json_output=args.json,
    )


async def select(mode: Mode, config: Config) -> Optional[Geometry]:
    return await run_mode(mode, HyprlandClient(config), config)


def run(mode: Mode, config: Config, options: OutputOptions, output_path: Optional[Path] = None) -> int:
    """Select, capture and deliver one screenshot. Returns the exit code."""
    operation_id = str(uuid.uuid4())
    events.operation_started(operation_id, mode.value)

    try:
        geometry = asyncio.run(select(mode, config))
        if geometry is None:
            print("Action cancelled.")
            events.operation_completed(operation_id, mode.value)
            return 0

        log.info("Capturing geometry: %s", geometry)
        path = grab(geometry, config, output_path)
        deliver(path, geometry, mode.title, config, options)
    except LuminashotError as e:
        events.error_handled(e, mode.value)
        events.operation_completed(operation_id, mode.value, error=e)
        log.error("%s: %s", type(e).__name__, e)
        return 1

    events.operation_completed(operation_id, mode.value, path=path, geometry=geometry)
    return 0


def main(args: Optional[list[str]] = None) -> int:
    """Main entry point.

    Args:
        args: Command-line arguments (defaults to sys.argv[1:])

    Returns:
        Exit code
    """
    parser = create_argument_parser()
    parsed_args = parser.parse_args(args)

    result = _handle_introspection(parsed_args)
    if result is not None:
        return result

    logging.basicConfig(
        level=logging.DEBUG if parsed_args.debug else logging.INFO,
        format="%(levelname)s: %(message)s",
    )
    events.configure("luminashot", stderr=not parsed_args.quiet_events)

    config_path = Path(parsed_args.config).expanduser() if parsed_args.config else None
    try:
        config = load_config(
            config_path=config_path,
            overrides={"poll_interval_ms": parsed_args.poll_interval},
        )
    except ValueError as e:
        log.error("%s", e)
        return 1

    options = build_output_options(parsed_args, config)
    output_path = Path(parsed_args.output).expanduser() if parsed_args.output else None

    try:
        return run(Mode(parsed_args.mode), config, options, output_path)
    except KeyboardInterrupt:
        log.info("Interrupted")
        return 130


if __name__ == "__main__":
    sys.exit(main())
