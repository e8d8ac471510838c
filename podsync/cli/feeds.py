"""On-demand feed operations: import a new feed or sync one podcast.

Usage:
    python -m podsync.cli.feeds import https://example.com/feed.xml
    python -m podsync.cli.feeds sync 42
    python -m podsync.cli.feeds init-db
"""

from __future__ import annotations

import argparse
import asyncio
import logging
import sys
from typing import Optional, Sequence

from podsync.config import Settings, settings
from podsync.errors import FeedFetchError
from podsync.logging_config import setup_logging
from podsync.services.catalog import SqlCatalog
from podsync.services.podcast_sync_service import build_sync_service
from podsync.utils.db_async import (
    DATABASE_URL,
    SessionLocal,
    describe_database_url,
    dispose_engine,
    init_db,
)

logger = logging.getLogger("podsync.feeds")


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="podsync-feeds",
        description="Import podcast feeds and sync them into the catalog.",
    )
    subparsers = parser.add_subparsers(dest="command", required=True)

    import_parser = subparsers.add_parser("import", help="Import a podcast from its feed URL")
    import_parser.add_argument("url", help="RSS/Atom feed URL")

    sync_parser = subparsers.add_parser("sync", help="Sync one podcast by id")
    sync_parser.add_argument("podcast_id", type=int, help="Catalog podcast id")

    subparsers.add_parser("init-db", help="Create catalog tables (development only)")
    return parser


def should_auto_init_db(config: Settings) -> bool:
    """Local development creates missing tables; deployed databases use Alembic."""
    return config.is_dev and config.auto_init_db


async def run(args: argparse.Namespace) -> int:
    if args.command == "init-db":
        logger.info(f"Creating tables on {describe_database_url(DATABASE_URL)}")
        await init_db()
        return 0

    if should_auto_init_db(settings):
        logger.info(f"Running init_db() on {describe_database_url(DATABASE_URL)}")
        await init_db()

    async with SessionLocal() as db:
        service = build_sync_service(SqlCatalog(db))

        if args.command == "import":
            try:
                podcast_id = await service.import_from_feed(args.url)
            except (FeedFetchError, ValueError) as exc:
                print(f"Import failed: {exc}", file=sys.stderr)
                return 1
            print(f"Imported podcast {podcast_id}")
            return 0

        outcome = await service.sync_podcast_outcome(args.podcast_id)
        if not outcome.succeeded:
            print(f"Sync failed for podcast {args.podcast_id}: {outcome.error}", file=sys.stderr)
            return 1
        print(
            f"Synced podcast {args.podcast_id}: "
            f"{outcome.episodes_added} added, {outcome.episodes_skipped} skipped"
        )
        return 0


async def _main(argv: Optional[Sequence[str]]) -> int:
    args = build_parser().parse_args(argv)
    try:
        return await run(args)
    finally:
        await dispose_engine()


def main(argv: Optional[Sequence[str]] = None) -> int:
    setup_logging(level=settings.log_level, sql_echo=settings.sql_echo)
    return asyncio.run(_main(argv))


if __name__ == "__main__":
    sys.exit(main())
