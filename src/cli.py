#!/usr/bin/env python3
"""Main entry point: serve the dashboard, or write a one-off snapshot."""

import argparse
import asyncio
import logging
import sys
from datetime import datetime
from pathlib import Path

PROJECT_ROOT = Path(__file__).resolve().parent.parent
sys.path.insert(0, str(PROJECT_ROOT / "src"))

from dotenv import load_dotenv

from aggregate import ADAPTERS, aggregate
from config import OUT_DIR, load_catalog, server_settings
from netfetch import log_proxy_status
from render import render_html, render_json

logger = logging.getLogger("ainews.cli")


def setup_logging(level: str = "INFO") -> None:
    logging.basicConfig(
        level=level,
        format="%(asctime)s [%(name)s] %(levelname)s: %(message)s",
        datefmt="%H:%M:%S",
    )


def snapshot(catalog_name: str | None, out_dir: Path) -> int:
    """Aggregate once and write JSON + HTML. Returns the number of failed sources."""
    catalog = load_catalog(catalog_name)
    start = datetime.now()
    envelope = asyncio.run(aggregate(catalog))

    stamp = envelope.fetched_at.strftime("%Y-%m-%d-%H%M%S")
    render_json(envelope, out_dir / f"{stamp}.json")
    render_html(envelope, out_dir / f"{stamp}.html")

    elapsed = (datetime.now() - start).total_seconds()
    logger.info("Snapshot done in %.1fs: %d items, %d errors",
                elapsed, len(envelope.items), len(envelope.errors))
    for error in envelope.errors:
        print(f"  ✗ {error}")
    print(f"{len(envelope.items)} items written to {out_dir}")
    return len(envelope.errors)


def serve(catalog_name: str | None, host: str, port: int, log_level: str) -> None:
    import uvicorn

    from server import create_app

    app = create_app(load_catalog(catalog_name))
    uvicorn.run(app, host=host, port=port, log_level=log_level.lower())


def main():
    load_dotenv()
    settings = server_settings()

    parser = argparse.ArgumentParser(description="AI news dashboard")
    parser.add_argument("--catalog", help="Source catalog name under sources/ (default: ai-news)")
    parser.add_argument("--log-level", default=settings["log_level"])
    sub = parser.add_subparsers(dest="command")

    serve_parser = sub.add_parser("serve", help="Run the dashboard server")
    serve_parser.add_argument("--host", default=settings["host"])
    serve_parser.add_argument("--port", type=int, default=settings["port"])

    snap_parser = sub.add_parser("snapshot", help="Fetch once and write JSON + HTML")
    snap_parser.add_argument("--out", type=Path, default=OUT_DIR)

    args = parser.parse_args()
    setup_logging(args.log_level.upper())
    log_proxy_status()

    if args.command == "serve":
        serve(args.catalog, args.host, args.port, args.log_level)
    elif args.command == "snapshot":
        failed = snapshot(args.catalog, args.out)
        # Only a total outage is a failed run
        if failed >= len(ADAPTERS):
            sys.exit(1)
    else:
        parser.print_help()
        sys.exit(2)


if __name__ == "__main__":
    main()
