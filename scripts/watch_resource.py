#!/usr/bin/env python3
"""Live watcher for one dashboard table.

Loads the table through a :class:`SyncedCollection` and prints the row
count plus derived statistics every time a change event arrives. Use this
to check that inserts/updates/deletes made in the dashboard reach
subscribers.
"""

from __future__ import annotations

import argparse
import asyncio
import json
import logging
import sys
from pathlib import Path
from typing import Any

# Allow running from repo root without installing the package.
_repo = Path(__file__).resolve().parent.parent
_src = _repo / "src"
if _src.is_dir():
    sys.path.insert(0, str(_src))

from pysantiye import SantiyeClient, SantiyeConfig  # noqa: E402
from pysantiye.models import ResourceName  # noqa: E402
from pysantiye.stats import (  # noqa: E402
    summarize_materials,
    summarize_notifications,
    summarize_personnel,
    summarize_reports,
    summarize_sites,
)

_SUMMARIES = {
    ResourceName.SITES: summarize_sites,
    ResourceName.PERSONNEL: summarize_personnel,
    ResourceName.MATERIALS: summarize_materials,
    ResourceName.DAILY_REPORTS: summarize_reports,
    ResourceName.NOTIFICATIONS: summarize_notifications,
}


def _parse_args() -> argparse.Namespace:
    parser = argparse.ArgumentParser(
        description="Watch a dashboard table through the realtime sync layer.",
    )
    parser.add_argument(
        "resource",
        help="Table name, e.g. sites, personnel, materials.",
    )
    parser.add_argument(
        "--owner",
        default=None,
        help="Watch notifications of this user id instead of a whole table.",
    )
    parser.add_argument(
        "--duration",
        type=int,
        default=0,
        help="Maximum runtime in seconds (0 = run until Ctrl+C).",
    )
    parser.add_argument(
        "--json",
        action="store_true",
        help="Print the full collection as JSON after every change.",
    )
    parser.add_argument(
        "--verbose",
        "-v",
        action="store_true",
        help="Enable debug logs.",
    )
    return parser.parse_args()


def _print_rows(resource: str, rows: list[dict[str, Any]], *, as_json: bool) -> None:
    print(f"[watch] {resource}: {len(rows)} row(s)")
    summarize = _SUMMARIES.get(resource)
    if summarize is not None:
        print(f"[watch]   {summarize(rows).model_dump()}")
    if as_json:
        print(json.dumps(rows, indent=2, ensure_ascii=False, default=str))


async def _watch(config: SantiyeConfig, args: argparse.Namespace) -> None:
    async with SantiyeClient(config) as client:
        if args.owner:
            collection = client.notifications(args.owner)
        else:
            collection = client.collection(args.resource)

        collection.add_listener(lambda rows: _print_rows(collection.resource, rows, as_json=args.json))
        async with collection:
            await collection.wait_until_loaded()
            if args.duration > 0:
                await asyncio.sleep(args.duration)
            else:
                await asyncio.Event().wait()


def _main() -> int:
    args = _parse_args()
    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.INFO,
        format="%(levelname)s %(name)s: %(message)s",
    )

    try:
        config = SantiyeConfig.from_env()
        asyncio.run(_watch(config, args))
    except KeyboardInterrupt:
        return 0
    except Exception as exc:
        print(f"[watch] Failed: {exc}", file=sys.stderr)
        return 2
    return 0


if __name__ == "__main__":
    raise SystemExit(_main())
