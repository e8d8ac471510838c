"""Map a fetched feed into podcast metadata and episode candidates.

Structured feed fields always win; the metadata extractor only fills
what the feed leaves out.
"""

from __future__ import annotations

import logging
from typing import Optional

from podsync.models.feeds import EpisodeCandidate, FeedDocument, FeedItem, PodcastMeta
from podsync.services.metadata_extractor import (
    clean_text,
    extract_audio_url,
    extract_duration,
    extract_episode_numbers,
    extract_image_url,
)

logger = logging.getLogger(__name__)

UNTITLED_EPISODE = "Untitled Episode"


def normalize(
    document: FeedDocument,
    fallback_artwork_url: Optional[str] = None,
) -> tuple[PodcastMeta, list[EpisodeCandidate]]:
    """Normalize a feed document.

    Args:
        document: Parsed feed
        fallback_artwork_url: Artwork to use for episodes when neither the
            episode nor the feed supplies one (typically the podcast's
            stored artwork)

    Returns:
        Tuple of (podcast metadata, episode candidates in feed order).
        Items without any resolvable audio URL are dropped.
    """
    podcast = _normalize_podcast(document)
    podcast_artwork = podcast.artwork_url or _non_empty(fallback_artwork_url)

    candidates: list[EpisodeCandidate] = []
    dropped = 0
    for item in document.items:
        candidate = _normalize_item(item, podcast_artwork)
        if candidate is None:
            dropped += 1
            continue
        candidates.append(candidate)

    if dropped:
        logger.debug(f"Dropped {dropped} feed item(s) without an audio URL")

    return podcast, candidates


def _normalize_podcast(document: FeedDocument) -> PodcastMeta:
    author = _non_empty(document.author)
    if author is None and document.items:
        author = _non_empty(document.items[0].author)

    return PodcastMeta(
        title=_non_empty(document.title),
        author=author or "",
        description=_non_empty(document.description),
        artwork_url=_non_empty(document.artwork_url),
        language=_non_empty(document.language),
    )


def _normalize_item(
    item: FeedItem, podcast_artwork: Optional[str]
) -> Optional[EpisodeCandidate]:
    audio_url = _non_empty(item.enclosure_url)
    if audio_url is None:
        audio_url = _non_empty(extract_audio_url(item.content or item.description))
    if audio_url is None:
        return None

    title = _non_empty(item.title) or UNTITLED_EPISODE
    description = item.description if clean_text(item.description) else item.content
    body = description or ""

    episode_number = _parse_int_field(item.episode_number)
    season_number = _parse_int_field(item.season_number)
    if episode_number is None or season_number is None:
        inferred_episode, inferred_season = extract_episode_numbers(item.title)
        if episode_number is None:
            episode_number = inferred_episode
        if season_number is None:
            season_number = inferred_season

    duration_seconds = _parse_itunes_duration(item.duration)
    if duration_seconds is None:
        duration_seconds = extract_duration(body)

    artwork_url = (
        _non_empty(item.artwork_url)
        or _non_empty(extract_image_url(body))
        or podcast_artwork
    )

    return EpisodeCandidate(
        title=title,
        audio_url=audio_url,
        description=description,
        published_at=item.published_at,
        episode_number=episode_number,
        season_number=season_number,
        duration_seconds=duration_seconds,
        artwork_url=artwork_url,
    )


def _non_empty(value: Optional[str]) -> Optional[str]:
    if value is None:
        return None
    value = value.strip()
    return value or None


def _parse_int_field(raw: Optional[str]) -> Optional[int]:
    """Parse a structured integer field such as itunes:episode."""
    if raw is None:
        return None
    try:
        return int(str(raw).strip())
    except (ValueError, TypeError):
        return None


def _parse_itunes_duration(raw: Optional[str]) -> Optional[int]:
    """Parse an itunes:duration value to seconds.

    Handles formats: HH:MM:SS, MM:SS, raw seconds string.

    Args:
        raw: itunes:duration text

    Returns:
        Duration in seconds, or None if not parseable
    """
    if not raw:
        return None

    raw = str(raw).strip()
    if not raw:
        return None

    if raw.isdigit():
        return int(raw)

    parts = raw.split(":")
    try:
        if len(parts) == 3:
            return int(parts[0]) * 3600 + int(parts[1]) * 60 + int(parts[2])
        elif len(parts) == 2:
            return int(parts[0]) * 60 + int(parts[1])
    except (ValueError, IndexError):
        pass

    return None
