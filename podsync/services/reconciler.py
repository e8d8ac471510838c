"""Decide which episode candidates are new for a podcast."""

from __future__ import annotations

import logging
from dataclasses import replace
from datetime import datetime
from typing import AbstractSet, Iterable

from podsync.models.feeds import EpisodeCandidate, PodcastMeta

logger = logging.getLogger(__name__)

# Podcast fields a sync may overwrite, and only with a non-empty value.
_SYNCED_PODCAST_FIELDS = ("title", "author", "description", "artwork_url", "language")


def reconcile(
    podcast_id: int,
    existing_audio_urls: AbstractSet[str],
    candidates: Iterable[EpisodeCandidate],
) -> list[EpisodeCandidate]:
    """Return the candidates that should be inserted, in feed order.

    A candidate is skipped when its audio URL is already stored for the
    podcast or was accepted earlier in the same run, so the result never
    holds two candidates with the same audio URL.

    Args:
        podcast_id: Podcast the candidates belong to (used for logging)
        existing_audio_urls: Audio URLs already stored for the podcast;
            not mutated
        candidates: Normalized candidates in feed order

    Returns:
        Candidates to insert
    """
    seen: set[str] = set(existing_audio_urls)
    accepted: list[EpisodeCandidate] = []
    skipped = 0

    for candidate in candidates:
        if candidate.audio_url in seen:
            skipped += 1
            continue
        seen.add(candidate.audio_url)
        accepted.append(candidate)

    logger.debug(
        f"Podcast {podcast_id}: {len(accepted)} new candidate(s), {skipped} already known"
    )
    return accepted


def merge_podcast_meta(
    existing: PodcastMeta,
    incoming: PodcastMeta,
    synced_at: datetime,
) -> PodcastMeta:
    """Apply feed metadata to a stored podcast.

    Fields are replaced only when the feed supplies a non-empty value;
    absent fields never erase stored data. Identity and feed URL always
    come from the stored podcast.
    """
    updates: dict[str, object] = {"last_synced_at": synced_at}
    for name in _SYNCED_PODCAST_FIELDS:
        value = getattr(incoming, name)
        if value is not None and str(value).strip():
            updates[name] = value
    return replace(existing, **updates)
