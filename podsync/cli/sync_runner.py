"""Standalone runner for the catalog-wide podcast sweep.

Designed to be invoked by an external scheduler (cron, a scheduled
machine, a systemd timer) on the cadence in ``SYNC_INTERVAL_MINUTES``.
It runs exactly one sweep and exits.

Usage:
    python -m podsync.cli.sync_runner

Exit codes:
    0 - Sweep completed (individual podcast failures are logged, not fatal)
    1 - Sweep could not run (check logs for details)
"""

import asyncio
import logging
import sys
from datetime import datetime, timezone

from podsync.config import settings
from podsync.logging_config import setup_logging
from podsync.services.catalog import SqlCatalog
from podsync.services.podcast_sync_service import build_sync_service
from podsync.utils.db_async import SessionLocal, dispose_engine

logger = logging.getLogger("sync_runner")


async def main() -> int:
    """Run one podcast sweep.

    Returns:
        Exit code (0 for success, 1 for failure)
    """
    start_time = datetime.now(timezone.utc)
    logger.info("Starting scheduled podcast sweep")

    try:
        async with SessionLocal() as db:
            service = build_sync_service(SqlCatalog(db))
            report = await service.sync_all_podcasts()

        elapsed = (datetime.now(timezone.utc) - start_time).total_seconds()

        logger.info(
            f"Sweep complete in {elapsed:.1f}s: "
            f"{report.podcasts_processed} podcasts, "
            f"{report.podcasts_succeeded} synced, "
            f"{report.episodes_added} episodes added"
        )

        for error in report.errors:
            logger.warning(f"Sweep error: {error}")

        return 0

    except Exception as e:
        elapsed = (datetime.now(timezone.utc) - start_time).total_seconds()
        logger.error(f"Sweep failed after {elapsed:.1f}s: {e}", exc_info=True)
        return 1

    finally:
        await dispose_engine()


if __name__ == "__main__":
    setup_logging(level=settings.log_level, sql_echo=settings.sql_echo)
    exit_code = asyncio.run(main())
    sys.exit(exit_code)
