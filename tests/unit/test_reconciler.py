"""Unit tests for reconciliation and the podcast metadata merge."""

from datetime import datetime

from podsync.models.feeds import EpisodeCandidate, PodcastMeta
from podsync.services.reconciler import merge_podcast_meta, reconcile


def _candidate(url: str, title: str = "t") -> EpisodeCandidate:
    return EpisodeCandidate(title=title, audio_url=url)


class TestReconcile:
    """Tests for reconcile()."""

    def test_all_new(self) -> None:
        candidates = [_candidate("a"), _candidate("b")]
        assert reconcile(1, set(), candidates) == candidates

    def test_skips_existing(self) -> None:
        result = reconcile(1, {"a"}, [_candidate("a"), _candidate("b")])
        assert [c.audio_url for c in result] == ["b"]

    def test_skips_duplicates_within_run(self) -> None:
        """The first occurrence in feed order wins."""
        candidates = [_candidate("a", "first"), _candidate("b"), _candidate("a", "second")]
        result = reconcile(1, set(), candidates)
        assert [(c.audio_url, c.title) for c in result] == [("a", "first"), ("b", "t")]

    def test_preserves_feed_order(self) -> None:
        candidates = [_candidate(u) for u in ["z", "m", "a"]]
        assert [c.audio_url for c in reconcile(1, set(), candidates)] == ["z", "m", "a"]

    def test_existing_set_not_mutated(self) -> None:
        existing = {"a"}
        reconcile(1, existing, [_candidate("b")])
        assert existing == {"a"}

    def test_nothing_new(self) -> None:
        assert reconcile(1, {"a", "b"}, [_candidate("b"), _candidate("a")]) == []


class TestMergePodcastMeta:
    """Tests for the partial-overwrite rule."""

    def setup_method(self) -> None:
        self.existing = PodcastMeta(
            id=7,
            title="Stored Title",
            author="Stored Author",
            description="Stored description",
            artwork_url="https://img.example.com/old.jpg",
            language="en",
            feed_url="https://feeds.example.com/pod.xml",
        )
        self.synced_at = datetime(2026, 1, 1, 8, 30)

    def test_empty_incoming_does_not_erase(self) -> None:
        merged = merge_podcast_meta(
            self.existing, PodcastMeta(title="", author="", description=None), self.synced_at
        )
        assert merged.title == "Stored Title"
        assert merged.author == "Stored Author"
        assert merged.description == "Stored description"
        assert merged.artwork_url == "https://img.example.com/old.jpg"

    def test_non_empty_incoming_overwrites(self) -> None:
        incoming = PodcastMeta(title="New Title", artwork_url="https://img.example.com/new.jpg")
        merged = merge_podcast_meta(self.existing, incoming, self.synced_at)
        assert merged.title == "New Title"
        assert merged.artwork_url == "https://img.example.com/new.jpg"
        assert merged.language == "en"

    def test_identity_and_feed_url_kept(self) -> None:
        incoming = PodcastMeta(id=99, feed_url="https://elsewhere.example.com/feed")
        merged = merge_podcast_meta(self.existing, incoming, self.synced_at)
        assert merged.id == 7
        assert merged.feed_url == "https://feeds.example.com/pod.xml"

    def test_stamps_last_synced(self) -> None:
        merged = merge_podcast_meta(self.existing, PodcastMeta(), self.synced_at)
        assert merged.last_synced_at == self.synced_at
        assert self.existing.last_synced_at is None
