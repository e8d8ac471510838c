"""In-memory records passed between the feed source, normalizer and catalog."""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from typing import Optional


@dataclass(frozen=True, slots=True)
class FeedItem:
    """One entry of a fetched feed.

    Structured fields are None when the feed does not declare them; the
    normalizer falls back to heuristics over ``description``/``content``.
    """

    title: Optional[str] = None
    description: Optional[str] = None
    content: Optional[str] = None
    published_at: Optional[datetime] = None
    author: Optional[str] = None
    enclosure_url: Optional[str] = None
    episode_number: Optional[str] = None
    season_number: Optional[str] = None
    duration: Optional[str] = None  # raw itunes:duration value
    artwork_url: Optional[str] = None


@dataclass(frozen=True, slots=True)
class FeedDocument:
    """A parsed feed reduced to the fields the engine reads."""

    title: Optional[str] = None
    description: Optional[str] = None
    artwork_url: Optional[str] = None
    language: Optional[str] = None
    author: Optional[str] = None
    items: tuple[FeedItem, ...] = ()


@dataclass(slots=True)
class PodcastMeta:
    """Podcast-level metadata as read from, or written to, the catalog.

    A None field coming out of the normalizer means "the feed did not
    supply it", which never erases a stored value.
    """

    id: Optional[int] = None
    title: Optional[str] = None
    author: Optional[str] = None
    description: Optional[str] = None
    artwork_url: Optional[str] = None
    language: Optional[str] = None
    feed_url: Optional[str] = None
    last_synced_at: Optional[datetime] = None


@dataclass(frozen=True, slots=True)
class EpisodeCandidate:
    """An episode extracted from the current fetch, not yet persisted."""

    title: str
    audio_url: str
    description: Optional[str] = None
    published_at: Optional[datetime] = None
    episode_number: Optional[int] = None
    season_number: Optional[int] = None
    duration_seconds: Optional[int] = None
    artwork_url: Optional[str] = None

