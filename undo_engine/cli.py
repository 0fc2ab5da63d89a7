"""Inspect persisted undo histories.

Examples
--------
``python -m undo_engine.cli keys --backend json --path .histories``
``python -m undo_engine.cli show doc-42 --backend sqlite --path histories.db``
``python -m undo_engine.cli validate doc-42 --set store.backend=json --set store.path=.h``
"""

from __future__ import annotations

import argparse
import logging
import sys
from typing import List, Optional

from undo_engine.common.errors import SerializationError
from undo_engine.config import build_store, load_config

log = logging.getLogger(__name__)


def parse_args(argv: Optional[List[str]] = None) -> argparse.Namespace:
    """Parse command-line arguments."""

    parser = argparse.ArgumentParser(description="Inspect persisted undo histories")
    parser.add_argument("command", choices=["keys", "show", "validate"])
    parser.add_argument("key", nargs="?", help="History key for show/validate")
    parser.add_argument("--config", default=None, help="YAML config file")
    parser.add_argument(
        "--set",
        dest="overrides",
        action="append",
        default=[],
        metavar="KEY=VALUE",
        help="Config override, e.g. store.backend=sqlite",
    )
    parser.add_argument("--backend", choices=["json", "sqlite"], help="Store backend")
    parser.add_argument("--path", help="Store directory (json) or database file (sqlite)")
    parser.add_argument("-v", "--verbose", action="store_true", help="Enable debug logging")
    args = parser.parse_args(argv)
    if args.command != "keys" and not args.key:
        parser.error(f"{args.command} requires a history key")
    return args


def _describe(payload: dict) -> List[str]:
    cursor = int(payload.get("cursor", -1))
    entries = payload.get("entries", [])
    lines = [
        f"capacity: {payload.get('capacity')}  cursor: {cursor}  entries: {len(entries)}",
    ]
    for index, entry in enumerate(entries):
        marker = ">" if index == cursor else ("*" if index < cursor else " ")
        lines.append(f"  {marker} [{index}] {entry.get('description')} ({entry.get('type')})")
    return lines


def main(argv: Optional[List[str]] = None) -> int:
    args = parse_args(argv)
    logging.basicConfig(level=logging.DEBUG if args.verbose else logging.WARNING)

    overrides = list(args.overrides)
    if args.backend:
        overrides.append(f"store.backend={args.backend}")
    if args.path:
        overrides.append(f"store.path={args.path}")
    try:
        cfg = load_config(args.config, overrides)
        store = build_store(cfg)
    except (FileNotFoundError, ValueError) as err:
        print(f"configuration error: {err}", file=sys.stderr)
        return 2
    if store is None:
        print("no store configured; pass --backend and --path", file=sys.stderr)
        return 2

    if args.command == "keys":
        for key in store.keys():
            print(key)
        return 0

    try:
        payload = store.load_payload(args.key)  # type: ignore[attr-defined]
    except KeyError:
        print(f"history {args.key!r} not found", file=sys.stderr)
        return 2
    except SerializationError as err:
        print(f"invalid: {err}", file=sys.stderr)
        return 1

    if args.command == "show":
        print(f"history: {args.key}")
        for line in _describe(payload):
            print(line)
        return 0

    try:
        # receivers are irrelevant for structural checks
        manager = store.codec.load(payload, lambda ref: {})  # type: ignore[attr-defined]
    except SerializationError as err:
        print(f"invalid: {err}", file=sys.stderr)
        return 1
    log.debug("validated %r", manager)
    print(f"ok: {len(manager)} entries, cursor {manager.cursor}")
    return 0


if __name__ == "__main__":  # pragma: no cover - CLI
    raise SystemExit(main())
