"""Catalog access for the sync engine.

The engine depends only on the ``Catalog`` protocol. ``SqlCatalog`` is the
SQLModel/SQLAlchemy implementation over the ``podcasts`` and ``episodes``
tables.
"""

from __future__ import annotations

import logging
from contextlib import AbstractAsyncContextManager, asynccontextmanager
from datetime import datetime
from typing import Any, AsyncIterator, Optional, Protocol, Sequence

from sqlalchemy import select, update
from sqlalchemy.dialects.postgresql import insert as pg_insert
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from podsync.models.feeds import EpisodeCandidate, PodcastMeta
from podsync.schemas.episodes import EPISODE_AUDIO_URL_CONSTRAINT, Episode
from podsync.schemas.podcasts import Podcast
from podsync.utils.clock import utc_now

logger = logging.getLogger(__name__)


class Catalog(Protocol):
    """Read/write access to stored podcasts and episodes."""

    def transaction(self) -> AbstractAsyncContextManager[None]:
        """Group the writes made inside the block into one logical write."""
        ...

    async def get_podcast(self, podcast_id: int) -> Optional[PodcastMeta]: ...

    async def list_podcasts_with_feed(self) -> list[PodcastMeta]: ...

    async def list_episode_audio_urls(self, podcast_id: int) -> set[str]: ...

    async def upsert_podcast(self, meta: PodcastMeta) -> int: ...

    async def create_podcast(self, meta: PodcastMeta) -> int: ...

    async def insert_episodes(
        self,
        podcast_id: int,
        candidates: Sequence[EpisodeCandidate],
        created_at: Optional[datetime] = None,
    ) -> int:
        """Insert episodes, returning how many rows were actually written.

        Candidates whose audio URL already exists for the podcast are
        skipped. Implementations that cannot skip raise
        DuplicateEpisodeError instead.
        """
        ...


def _to_meta(podcast: Podcast) -> PodcastMeta:
    return PodcastMeta(
        id=podcast.id,
        title=podcast.title,
        author=podcast.author,
        description=podcast.description,
        artwork_url=podcast.artwork_url,
        language=podcast.language,
        feed_url=podcast.feed_url,
        last_synced_at=podcast.last_synced_at,
    )


class SqlCatalog:
    """Catalog over an async SQLAlchemy session."""

    def __init__(self, db: AsyncSession) -> None:
        self._db = db

    @asynccontextmanager
    async def transaction(self) -> AsyncIterator[None]:
        if self._db.in_transaction():
            # Already inside an outer unit of work; it owns the commit.
            yield
            return
        async with self._db.begin():
            yield

    async def get_podcast(self, podcast_id: int) -> Optional[PodcastMeta]:
        async with self.transaction():
            podcast = await self._db.get(Podcast, podcast_id, populate_existing=True)
            return _to_meta(podcast) if podcast is not None else None

    async def list_podcasts_with_feed(self) -> list[PodcastMeta]:
        stmt = (
            select(Podcast)
            .where(Podcast.feed_url.is_not(None))  # type: ignore[union-attr]
            .where(Podcast.feed_url != "")
            .order_by(Podcast.id)  # type: ignore[arg-type]
        )
        async with self.transaction():
            result = await self._db.execute(stmt)
            return [_to_meta(p) for p in result.scalars().all()]

    async def list_episode_audio_urls(self, podcast_id: int) -> set[str]:
        stmt = select(Episode.audio_url).where(  # type: ignore[call-overload]
            Episode.podcast_id == podcast_id  # type: ignore[arg-type]
        )
        async with self.transaction():
            result = await self._db.execute(stmt)
            return set(result.scalars().all())

    async def create_podcast(self, meta: PodcastMeta) -> int:
        podcast = Podcast(
            title=meta.title or "",
            author=meta.author or "",
            description=meta.description or "",
            artwork_url=meta.artwork_url,
            language=meta.language,
            feed_url=meta.feed_url,
            last_synced_at=meta.last_synced_at,
        )
        async with self.transaction():
            self._db.add(podcast)
            await self._db.flush()
        assert podcast.id is not None
        logger.info(f"Created podcast {podcast.id}: {podcast.title}")
        return podcast.id

    async def upsert_podcast(self, meta: PodcastMeta) -> int:
        if meta.id is None:
            return await self.create_podcast(meta)

        values: dict[str, Any] = {
            name: getattr(meta, name)
            for name in (
                "title",
                "author",
                "description",
                "artwork_url",
                "language",
                "feed_url",
                "last_synced_at",
            )
            if getattr(meta, name) is not None
        }
        async with self.transaction():
            await self._db.execute(
                update(Podcast)
                .where(Podcast.id == meta.id)  # type: ignore[arg-type]
                .values(**values)
            )
        return meta.id

    async def insert_episodes(
        self,
        podcast_id: int,
        candidates: Sequence[EpisodeCandidate],
        created_at: Optional[datetime] = None,
    ) -> int:
        """Insert episodes idempotently.

        On PostgreSQL this is a single INSERT ... ON CONFLICT DO NOTHING on
        the (podcast_id, audio_url) unique constraint. Other dialects get
        one savepoint per row with IntegrityError treated as already
        ingested.
        """
        if not candidates:
            return 0

        created_at = created_at or utc_now()
        rows = [
            {
                "podcast_id": podcast_id,
                "title": c.title,
                "description": c.description,
                "audio_url": c.audio_url,
                "duration_seconds": c.duration_seconds,
                "published_at": c.published_at,
                "episode_number": c.episode_number,
                "season_number": c.season_number,
                "artwork_url": c.artwork_url,
                "created_at": created_at,
            }
            for c in candidates
        ]

        async with self.transaction():
            if self._db.get_bind().dialect.name == "postgresql":
                inserted = await self._insert_rows_on_conflict(rows)
            else:
                inserted = await self._insert_rows_individually(rows)

        if inserted < len(rows):
            logger.info(
                f"Podcast {podcast_id}: {len(rows) - inserted} episode(s) already ingested"
            )
        return inserted

    async def _insert_rows_on_conflict(self, rows: list[dict[str, Any]]) -> int:
        stmt = (
            pg_insert(Episode)
            .values(rows)
            .on_conflict_do_nothing(constraint=EPISODE_AUDIO_URL_CONSTRAINT)
            .returning(Episode.__table__.c.id)  # type: ignore[attr-defined]
        )
        result = await self._db.execute(stmt)
        return len(list(result.scalars().all()))

    async def _insert_rows_individually(self, rows: list[dict[str, Any]]) -> int:
        inserted = 0
        for row in rows:
            try:
                async with self._db.begin_nested():
                    self._db.add(Episode(**row))
                inserted += 1
            except IntegrityError:
                logger.debug(f"Skipping already ingested episode {row['audio_url']}")
        return inserted
