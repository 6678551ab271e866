"""
Command-line interface for HelpHive.

Provides commands for:
- Normalizing a help request
- Ranking a task list
- Inspecting or resetting quota usage

Configuration comes from HELPHIVE_* environment variables; set
HELPHIVE_DB_PATH to keep quota and cache state between runs.
"""

import argparse
import json
import logging
import sys
from pathlib import Path
from typing import Optional

from helphive.client import HelpHive
from helphive.config import Settings
from helphive.metrics import MetricsCollector
from helphive.models import InputKind
from helphive.validation import ValidationError


def _print_json(data) -> None:
    print(json.dumps(data, indent=2, default=str))


def cmd_normalize(hive: HelpHive, args) -> int:
    """Normalize a single help request."""
    request = hive.process(args.text, kind=args.kind)
    _print_json(request.to_dict())
    return 0


def cmd_prioritize(hive: HelpHive, args) -> int:
    """Rank tasks read from a JSON file."""
    tasks = json.loads(Path(args.file).read_text())
    ranked = hive.rank(tasks)
    _print_json(ranked)
    return 0


def cmd_usage(hive: HelpHive, args) -> int:
    """Show quota usage, optionally resetting it first."""
    if args.reset:
        hive.reset_usage()
    _print_json(hive.usage())
    return 0


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="helphive",
        description="HelpHive: help-request normalization CLI",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  # Normalize a typed request
  helphive normalize "please help me move lots of furniture"

  # Normalize a voice transcript
  helphive normalize "I need a ride to the clinic tomorrow" --kind voice

  # Rank open tasks
  helphive prioritize tasks.json

  # Show and reset quota usage
  helphive usage --reset
""",
    )
    parser.add_argument("--verbose", "-v", action="store_true",
                        help="Log pipeline events to stderr")

    subparsers = parser.add_subparsers(dest="command", help="Available commands")

    norm_parser = subparsers.add_parser("normalize", help="Normalize a help request")
    norm_parser.add_argument("text", help="The request text")
    norm_parser.add_argument("--kind", "-k", default=InputKind.TEXT.value,
                             choices=[k.value for k in InputKind],
                             help="How the text was produced")

    prio_parser = subparsers.add_parser("prioritize", help="Rank tasks from a JSON file")
    prio_parser.add_argument("file", help="Path to a JSON array of task objects")

    usage_parser = subparsers.add_parser("usage", help="Show quota usage")
    usage_parser.add_argument("--reset", action="store_true",
                              help="Clear counters and cache first")

    return parser


def main(argv: Optional[list[str]] = None) -> int:
    """Main entry point."""
    parser = build_parser()
    args = parser.parse_args(argv)

    if args.command is None:
        parser.print_help()
        return 1

    if args.verbose:
        logging.basicConfig(
            level=logging.DEBUG,
            format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
        )

    commands = {
        "normalize": cmd_normalize,
        "prioritize": cmd_prioritize,
        "usage": cmd_usage,
    }

    try:
        settings = Settings.from_env()
    except ValueError as e:
        print(f"Configuration error: {e}", file=sys.stderr)
        return 2

    hive = HelpHive(settings, metrics=MetricsCollector(enable_logging=args.verbose))
    try:
        return commands[args.command](hive, args)
    except ValidationError as e:
        print(f"Invalid input: {e}", file=sys.stderr)
        return 2
    except (OSError, json.JSONDecodeError) as e:
        print(f"Could not read tasks: {e}", file=sys.stderr)
        return 2
    finally:
        hive.close()


if __name__ == "__main__":
    sys.exit(main())
