"""Exceptions raised by the feed ingestion engine."""


class PodsyncError(Exception):
    """Base exception for all podsync errors."""

    pass


class FeedFetchError(PodsyncError):
    """A feed could not be fetched or parsed.

    Covers network failures, timeouts, non-2xx responses and payloads
    that are not a recognizable feed.
    """

    def __init__(self, url: str, reason: str) -> None:
        self.url = url
        self.reason = reason
        super().__init__(f"Failed to fetch feed {url}: {reason}")


class DuplicateEpisodeError(PodsyncError):
    """An episode's audio URL already exists for its podcast."""

    def __init__(self, podcast_id: int, audio_url: str) -> None:
        self.podcast_id = podcast_id
        self.audio_url = audio_url
        super().__init__(
            f"Episode with audio URL {audio_url} already exists for podcast {podcast_id}"
        )
