"""Fetch podcast feeds over HTTP and reduce them to FeedDocument records.

Uses feedparser to handle the various RSS/Atom dialects with
podcast-specific field mapping (itunes:*, enclosures). Everything past
this module works on the closed FeedDocument surface, never on raw
feedparser dicts.
"""

from __future__ import annotations

import asyncio
import logging
from datetime import datetime
from typing import Any, Optional, Protocol

import feedparser  # type: ignore[import-untyped]
import httpx

from podsync.config import settings
from podsync.errors import FeedFetchError
from podsync.models.feeds import FeedDocument, FeedItem

logger = logging.getLogger(__name__)


class FeedSource(Protocol):
    """Anything that can turn a feed URL into a FeedDocument."""

    async def fetch(self, url: str) -> FeedDocument:
        """Fetch and parse a feed, raising FeedFetchError on failure."""
        ...


def default_timeout() -> httpx.Timeout:
    return httpx.Timeout(
        connect=settings.feed_connect_timeout,
        read=settings.feed_read_timeout,
        write=5.0,
        pool=5.0,
    )


class HttpFeedSource:
    """FeedSource backed by httpx and feedparser."""

    def __init__(
        self,
        client: Optional[httpx.AsyncClient] = None,
        timeout: Optional[httpx.Timeout] = None,
        user_agent: Optional[str] = None,
    ) -> None:
        self._client = client
        self._timeout = timeout or default_timeout()
        self._user_agent = user_agent or settings.feed_user_agent

    async def fetch(self, url: str) -> FeedDocument:
        if not url or not url.startswith(("http://", "https://")):
            raise FeedFetchError(url, "not an http(s) URL")

        content = await self._download(url)
        feed = await asyncio.to_thread(feedparser.parse, content)
        return to_document(feed, url)

    async def _download(self, url: str) -> bytes:
        try:
            if self._client is not None:
                response = await self._client.get(
                    url, headers={"User-Agent": self._user_agent}
                )
                response.raise_for_status()
                return response.content

            async with httpx.AsyncClient(
                headers={"User-Agent": self._user_agent},
                timeout=self._timeout,
                follow_redirects=True,
            ) as client:
                response = await client.get(url)
                response.raise_for_status()
                return response.content
        except (httpx.HTTPError, httpx.InvalidURL) as exc:
            raise FeedFetchError(url, str(exc) or type(exc).__name__) from exc


def parse_feed(content: bytes | str, url: str = "<inline>") -> FeedDocument:
    """Parse raw feed XML into a FeedDocument.

    Args:
        content: Feed payload
        url: Source URL, used for error messages

    Returns:
        Parsed feed document

    Raises:
        FeedFetchError: If the payload is not recognizable as a feed
    """
    return to_document(feedparser.parse(content), url)


def to_document(feed: Any, url: str) -> FeedDocument:
    """Map a feedparser result onto a FeedDocument.

    Malformed feeds are accepted on a best-effort basis; only a payload
    with neither a channel title nor any entries is rejected.
    """
    channel = feed.get("feed", {})
    entries = feed.get("entries", [])

    if feed.get("bozo"):
        if not entries and not channel.get("title"):
            raise FeedFetchError(url, f"unparseable feed: {feed.get('bozo_exception')}")
        logger.warning(f"Feed parse warning for {url}: {feed.get('bozo_exception')}")

    return FeedDocument(
        title=channel.get("title"),
        description=channel.get("subtitle") or channel.get("description"),
        artwork_url=_image_href(channel),
        language=channel.get("language"),
        author=channel.get("author"),
        items=tuple(_to_item(entry) for entry in entries),
    )


def _to_item(entry: Any) -> FeedItem:
    return FeedItem(
        title=entry.get("title"),
        description=entry.get("summary", entry.get("description")),
        content=_content_value(entry),
        published_at=_parse_published_date(entry),
        author=entry.get("author"),
        enclosure_url=_extract_enclosure_url(entry),
        episode_number=_as_text(entry.get("itunes_episode")),
        season_number=_as_text(entry.get("itunes_season")),
        duration=_as_text(entry.get("itunes_duration")),
        artwork_url=_image_href(entry),
    )


def _as_text(value: Any) -> Optional[str]:
    if value is None:
        return None
    return str(value)


def _content_value(entry: Any) -> Optional[str]:
    for content in entry.get("content", []) or []:
        value = content.get("value")
        if value:
            return value
    return None


def _image_href(node: Any) -> Optional[str]:
    """Extract itunes:image (or RSS <image>) href from a feed or entry."""
    image = node.get("image", {})
    if isinstance(image, dict) and image.get("href"):
        return image["href"]
    return None


def _extract_enclosure_url(entry: Any) -> Optional[str]:
    """Extract the media URL from entry enclosures.

    Prefers an audio/* enclosure, then any enclosure that is not an image.

    Args:
        entry: feedparser entry dict

    Returns:
        Enclosure URL if found, None otherwise
    """
    enclosures = entry.get("enclosures", []) or []
    for enclosure in enclosures:
        if enclosure.get("type", "").startswith("audio/"):
            href = enclosure.get("href", enclosure.get("url"))
            if href:
                return href
    for enclosure in enclosures:
        if enclosure.get("type", "").startswith("image/"):
            continue
        href = enclosure.get("href", enclosure.get("url"))
        if href:
            return href
    return None


def _parse_published_date(entry: Any) -> Optional[datetime]:
    """Return the entry's publish date as a naive UTC datetime, if any."""
    for key in ("published_parsed", "updated_parsed"):
        parsed = entry.get(key)
        if parsed:
            try:
                return datetime(*parsed[:6])
            except (TypeError, ValueError):
                continue
    return None
