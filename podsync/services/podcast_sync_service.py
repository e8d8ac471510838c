"""Podcast feed sync orchestration.

Drives a single podcast's sync (fetch, normalize, reconcile, persist), the
catalog-wide sweep, and first-time import from a feed URL. Import and
sync share one code path so both apply identical dedup semantics.
"""

from __future__ import annotations

import logging
from typing import Optional, Sequence

from podsync.errors import DuplicateEpisodeError, FeedFetchError
from podsync.models.feeds import EpisodeCandidate, PodcastMeta
from podsync.models.sync import SweepReport, SyncOutcome
from podsync.services.catalog import Catalog
from podsync.services.feed_normalizer import normalize
from podsync.services.feed_source import FeedSource, HttpFeedSource
from podsync.services.reconciler import merge_podcast_meta, reconcile
from podsync.utils.clock import Clock, utc_now

logger = logging.getLogger(__name__)

UNTITLED_PODCAST = "Untitled Podcast"


class PodcastSyncService:
    """Keeps catalog podcasts in step with their feeds."""

    def __init__(
        self,
        feed_source: FeedSource,
        catalog: Catalog,
        clock: Clock = utc_now,
    ) -> None:
        self._feed_source = feed_source
        self._catalog = catalog
        self._clock = clock

    async def sync_podcast(self, podcast_id: int) -> bool:
        """Sync one podcast.

        Returns:
            True when the sync reached persistence (even with zero new
            episodes); False when the podcast is missing, has no feed URL,
            or its feed could not be fetched.
        """
        outcome = await self.sync_podcast_outcome(podcast_id)
        return outcome.succeeded

    async def sync_podcast_outcome(self, podcast_id: int) -> SyncOutcome:
        """Sync one podcast and report what happened.

        Feed failures are logged and reported as an unsuccessful outcome.
        Anything else (e.g. a database error) propagates to the caller.

        Args:
            podcast_id: Catalog id of the podcast

        Returns:
            SyncOutcome for the podcast
        """
        podcast = await self._catalog.get_podcast(podcast_id)
        if podcast is None:
            logger.info(f"Podcast {podcast_id} not found; nothing to sync")
            return SyncOutcome(
                podcast_id=podcast_id, succeeded=False, error="podcast not found"
            )
        if not podcast.feed_url:
            logger.info(f"Podcast {podcast_id} has no feed URL; nothing to sync")
            return SyncOutcome(
                podcast_id=podcast_id, succeeded=False, error="no feed URL configured"
            )

        logger.info(f"-> Syncing podcast {podcast_id}: {podcast.title}")

        try:
            document = await self._feed_source.fetch(podcast.feed_url)
        except FeedFetchError as exc:
            logger.warning(f"  Fetch failed for podcast {podcast_id}: {exc}")
            return SyncOutcome(podcast_id=podcast_id, succeeded=False, error=str(exc))

        incoming, candidates = normalize(document, podcast.artwork_url)
        logger.info(f"  Normalized {len(candidates)} episode candidate(s)")

        synced_at = self._clock()
        merged = merge_podcast_meta(podcast, incoming, synced_at)

        async with self._catalog.transaction():
            # Fresh read right before insert narrows the window for a racing sync;
            # the unique constraint covers what remains.
            existing = await self._catalog.list_episode_audio_urls(podcast_id)
            accepted = reconcile(podcast_id, existing, candidates)
            await self._catalog.upsert_podcast(merged)
            added = await self._insert_episodes(podcast_id, accepted)

        skipped = len(candidates) - added
        logger.info(f"  Podcast {podcast_id}: {added} added, {skipped} skipped")
        return SyncOutcome(
            podcast_id=podcast_id,
            episodes_added=added,
            episodes_skipped=skipped,
            succeeded=True,
        )

    async def sync_all_podcasts(self) -> SweepReport:
        """Sync every podcast that has a feed URL, one at a time.

        A failure for one podcast is logged and recorded in the report;
        the sweep moves on to the next. Only a failure to list podcasts
        propagates.

        Returns:
            SweepReport with one outcome per podcast
        """
        podcasts = await self._catalog.list_podcasts_with_feed()
        logger.info(f"Starting podcast sweep: {len(podcasts)} podcast(s) with a feed")

        report = SweepReport()
        for podcast in podcasts:
            assert podcast.id is not None
            try:
                outcome = await self.sync_podcast_outcome(podcast.id)
            except Exception as e:
                logger.exception(f"Error syncing podcast {podcast.id}: {podcast.title}")
                outcome = SyncOutcome(podcast_id=podcast.id, succeeded=False, error=str(e))

            report.podcasts_processed += 1
            report.outcomes.append(outcome)
            if outcome.succeeded:
                report.podcasts_succeeded += 1
                report.episodes_added += outcome.episodes_added
            else:
                report.errors.append(
                    f"Failed to sync podcast {podcast.id} ({podcast.title}): {outcome.error}"
                )

        logger.info(
            f"Podcast sweep complete: {report.podcasts_succeeded}/{report.podcasts_processed} "
            f"synced, {report.episodes_added} episode(s) added, {len(report.errors)} error(s)"
        )
        return report

    async def import_from_feed(self, url: str) -> int:
        """Create a podcast from a feed URL and ingest its episodes.

        Unlike the sweep, every failure here propagates: import is an
        explicit user action and the caller must see it fail.

        Args:
            url: Feed URL

        Returns:
            Id of the new podcast

        Raises:
            ValueError: If the URL is blank
            FeedFetchError: If the feed cannot be fetched or parsed
        """
        url = (url or "").strip()
        if not url:
            raise ValueError("Feed URL is required")

        try:
            document = await self._feed_source.fetch(url)
            seed, _ = normalize(document)

            podcast_id = await self._catalog.create_podcast(
                PodcastMeta(
                    title=seed.title or UNTITLED_PODCAST,
                    author=seed.author or "",
                    description=seed.description or "",
                    artwork_url=seed.artwork_url,
                    language=seed.language,
                    feed_url=url,
                    last_synced_at=self._clock(),
                )
            )

            outcome = await self.sync_podcast_outcome(podcast_id)
            if not outcome.succeeded:
                raise FeedFetchError(url, outcome.error or "initial sync failed")
        except Exception:
            logger.exception(f"Error importing podcast from feed {url}")
            raise

        logger.info(
            f"Imported podcast {podcast_id} from {url} with {outcome.episodes_added} episode(s)"
        )
        return podcast_id

    async def _insert_episodes(
        self, podcast_id: int, accepted: Sequence[EpisodeCandidate]
    ) -> int:
        if not accepted:
            return 0

        created_at = self._clock()
        try:
            return await self._catalog.insert_episodes(podcast_id, accepted, created_at)
        except DuplicateEpisodeError as exc:
            # The batch hit a row another sync wrote after our read; retry
            # one at a time and skip the duplicates.
            logger.info(f"  {exc}; inserting episodes individually")

        inserted = 0
        for candidate in accepted:
            try:
                inserted += await self._catalog.insert_episodes(
                    podcast_id, [candidate], created_at
                )
            except DuplicateEpisodeError:
                logger.debug(f"  Skipping already ingested episode {candidate.audio_url}")
        return inserted


def build_sync_service(
    catalog: Catalog,
    feed_source: Optional[FeedSource] = None,
    clock: Clock = utc_now,
) -> PodcastSyncService:
    """Wire a sync service with the HTTP feed source by default."""
    return PodcastSyncService(feed_source or HttpFeedSource(), catalog, clock)
