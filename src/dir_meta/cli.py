#!/usr/bin/env python3
"""
CLI for walking and watching directories.

Usage:
    dir-meta scan ./documents
    dir-meta scan ./documents --async --json
    dir-meta watch ./documents --events create,delete
"""

import argparse
import asyncio
import json
import logging
import sys
from pathlib import Path
from typing import List, Optional

from .channel import channel
from .config import ScanConfig
from .exceptions import ChannelClosedError, RootOpenError, WatchRemovedError
from .fs_watcher import Watcher
from .models import DirectoryMetadata, WatcherOutcome, WatchMask
from .traversal import DirectoryWalker

logger = logging.getLogger("cli")


def _configure_logging(debug: bool) -> None:
    logging.basicConfig(
        level=logging.DEBUG if debug else logging.INFO,
        format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
        datefmt="%Y-%m-%d %H:%M:%S",
    )


def _print_summary(result: DirectoryMetadata) -> None:
    print(f"\n=== {result.name} ===")
    print(f"Path: {result.path}")
    print(f"Files: {result.file_count}")
    print(f"Directories: {result.directory_count}")
    if result.total_size is not None:
        print(f"Total size: {result.human_size()}")
    print(f"Errors: {len(result.errors)}")
    for error in result.errors:
        print(f"  [{error.kind.value}] {error.message}")
    print()


def _print_matches(result: DirectoryMetadata, name: str) -> None:
    matches = result.find_by_name(name)
    if not matches:
        print(f"No file named {name!r}")
        return

    for file in matches:
        print(f"{file.path}")
        if file.size is not None:
            print(f"  Size: {file.human_size()}")
        modified = file.modified_24hr()
        if modified is not None:
            print(f"  Modified: {modified} ({file.modified_elapsed_human()} ago)")
        print(f"  Format: {file.format.name}")
        if file.read_only:
            print("  Read-only")
        if file.is_symlink:
            print("  Symlink")


def cmd_scan(args) -> int:
    """Walk a directory and print what was found."""
    try:
        config = ScanConfig.from_env()
    except ValueError as e:
        logger.error(str(e))
        return 2

    # Flags given on the command line win over the environment
    if args.no_size:
        config.track_size = False
    if args.no_times:
        config.track_times = False
    if args.no_format:
        config.detect_format = False

    walker = DirectoryWalker(config)
    try:
        if args.use_async:
            result = asyncio.run(walker.walk_async(args.path))
        else:
            result = walker.walk(args.path)
    except RootOpenError as e:
        logger.error(str(e))
        return 1

    if args.json:
        print(json.dumps(result.to_dict(), indent=2))
    elif args.find:
        _print_matches(result, args.find)
    else:
        _print_summary(result)
    return 0


def _format_outcome(outcome: WatcherOutcome, watched: Path) -> str:
    line = f"{outcome.event_kind.value:<16} {outcome.name or watched}"
    if outcome.is_directory:
        line += "/"
    if outcome.cookie:
        line += f" (cookie {outcome.cookie})"
    return line


def cmd_watch(args) -> int:
    """Print filesystem events for a path until interrupted."""
    try:
        mask = WatchMask.parse(args.events) if args.events else None
    except ValueError as e:
        logger.error(str(e))
        return 2

    sender, receiver = channel()
    watcher = Watcher(sender).path(args.path)
    thread = watcher.start(mask)

    try:
        for outcome in receiver:
            print(_format_outcome(outcome, watcher.watched_path), flush=True)
    except KeyboardInterrupt:
        logger.info("Received shutdown signal, stopping...")
        receiver.close()
        return 0

    thread.join()
    error = watcher.error
    if error is None or isinstance(error, (ChannelClosedError, WatchRemovedError)):
        if error is not None:
            logger.info(str(error))
        return 0
    logger.error(str(error))
    return 1


def main(argv: Optional[List[str]] = None) -> int:
    parser = argparse.ArgumentParser(
        prog="dir-meta",
        description="Collect directory metadata and watch for changes",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  # Summarize a directory tree
  dir-meta scan ./documents

  # Dump the full metadata as JSON, walking with asyncio
  dir-meta scan ./documents --async --json

  # Look up every file with a given name
  dir-meta scan ./documents --find README.md

  # Print creations and deletions as they happen
  dir-meta watch ./documents --events create,delete
        """,
    )
    parser.add_argument("-d", "--debug", action="store_true", help="Enable debug logging")

    subparsers = parser.add_subparsers(dest="command", required=True)

    # Scan command
    scan_parser = subparsers.add_parser("scan", help="Walk a directory tree")
    scan_parser.add_argument("path", help="Directory to walk")
    scan_parser.add_argument("--async", dest="use_async", action="store_true", help="Walk with asyncio")
    scan_parser.add_argument("--no-size", action="store_true", help="Do not collect file sizes")
    scan_parser.add_argument("--no-times", action="store_true", help="Do not collect timestamps")
    scan_parser.add_argument("--no-format", action="store_true", help="Do not detect file formats")
    scan_parser.add_argument("--json", action="store_true", help="Print the result as JSON")
    scan_parser.add_argument("--find", metavar="NAME", default=None, help="Print the files with this name")
    scan_parser.set_defaults(func=cmd_scan)

    # Watch command
    watch_parser = subparsers.add_parser("watch", help="Watch a path for changes")
    watch_parser.add_argument("path", help="File or directory to watch")
    watch_parser.add_argument(
        "--events",
        default=None,
        help="Comma separated event names, e.g. create,delete,modify (default: modify,create,delete,delete_self)",
    )
    watch_parser.set_defaults(func=cmd_watch)

    args = parser.parse_args(argv)

    _configure_logging(args.debug)

    return args.func(args)


if __name__ == "__main__":
    sys.exit(main())
