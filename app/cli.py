"""
Print one server health snapshot as JSON.

Usage:
    server-snapshot [--indent N] [--log-level LEVEL]

Collects a snapshot from the local host (same collector as the
/api/server-status endpoint) and writes it to stdout. If collection fails,
the degraded snapshot is printed and the exit code is 1.
"""

from __future__ import annotations

import argparse
import json
import logging
import sys
from typing import List, Optional

from app.config import get_settings
from app.models.server import ServerSnapshot
from app.services import server_monitor


def parse_args(argv: Optional[List[str]] = None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(
        description="Collect a server health snapshot and print it as JSON."
    )
    parser.add_argument(
        "--indent",
        type=int,
        default=2,
        help="JSON indentation (0 for a single line, default: 2)",
    )
    parser.add_argument(
        "--log-level",
        default=None,
        help="Log level for messages on stderr (default: LOG_LEVEL or INFO)",
    )
    return parser.parse_args(argv)


def render(snapshot: ServerSnapshot, indent: int) -> str:
    data = snapshot.model_dump(mode="json", by_alias=True, exclude_none=True)
    return json.dumps(data, indent=indent or None, ensure_ascii=False)


def main(argv: Optional[List[str]] = None) -> int:
    args = parse_args(argv)
    logging.basicConfig(
        level=(args.log_level or get_settings().log_level).upper(),
        stream=sys.stderr,
        format="%(levelname)s %(name)s: %(message)s",
    )

    exit_code = 0
    try:
        snapshot = server_monitor.get_server_snapshot()
    except server_monitor.CollectionError:
        snapshot = server_monitor.degraded_snapshot()
        exit_code = 1

    print(render(snapshot, args.indent))
    return exit_code


if __name__ == "__main__":
    raise SystemExit(main())
