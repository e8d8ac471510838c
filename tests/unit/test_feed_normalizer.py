"""Unit tests for feed normalization."""

from datetime import datetime

from podsync.models.feeds import FeedDocument, FeedItem
from podsync.services.feed_normalizer import UNTITLED_EPISODE, _parse_itunes_duration, normalize
from tests.fakes import make_feed, make_item


class TestNormalizePodcast:
    """Podcast-level field mapping."""

    def test_copies_non_empty_fields(self) -> None:
        meta, _ = normalize(make_feed(author="Host Name"))
        assert meta.title == "Test Pod"
        assert meta.description == "A podcast about tests"
        assert meta.artwork_url == "https://cdn.example.com/art.jpg"
        assert meta.language == "en"
        assert meta.author == "Host Name"

    def test_empty_fields_are_not_supplied(self) -> None:
        meta, _ = normalize(FeedDocument(title="  ", description="", language=None))
        assert meta.title is None
        assert meta.description is None
        assert meta.language is None
        assert meta.artwork_url is None

    def test_author_from_first_item(self) -> None:
        feed = make_feed(
            make_item(1, author="First Author"),
            make_item(2, author="Second Author"),
        )
        meta, _ = normalize(feed)
        assert meta.author == "First Author"

    def test_author_defaults_to_empty(self) -> None:
        meta, _ = normalize(make_feed())
        assert meta.author == ""


class TestNormalizeEpisodes:
    """Episode candidate mapping."""

    def test_structured_enclosure_used(self) -> None:
        _, episodes = normalize(make_feed(make_item(1)))
        assert len(episodes) == 1
        assert episodes[0].audio_url == "https://cdn.example.com/audio/ep1.mp3"
        assert episodes[0].published_at == datetime(2025, 1, 1)

    def test_audio_url_from_content_when_no_enclosure(self) -> None:
        item = FeedItem(
            title="Ep. 3 Talk",
            description="desc",
            content='<p>Download: https://cdn.example.com/three.m4a</p>',
        )
        _, episodes = normalize(make_feed(item))
        assert episodes[0].audio_url == "https://cdn.example.com/three.m4a"

    def test_audio_url_from_description_when_no_content(self) -> None:
        item = FeedItem(title="x", description="get https://cdn.example.com/d.mp3")
        _, episodes = normalize(make_feed(item))
        assert episodes[0].audio_url == "https://cdn.example.com/d.mp3"

    def test_item_without_audio_dropped(self) -> None:
        keep = make_item(1)
        drop = FeedItem(title="Trailer", description="No media here")
        _, episodes = normalize(make_feed(drop, keep))
        assert [e.audio_url for e in episodes] == [keep.enclosure_url]

    def test_feed_order_preserved(self) -> None:
        items = [make_item(3), make_item(1), make_item(2)]
        _, episodes = normalize(make_feed(*items))
        assert [e.title for e in episodes] == ["Episode 3", "Episode 1", "Episode 2"]

    def test_title_placeholder(self) -> None:
        _, episodes = normalize(make_feed(make_item(1, title="")))
        assert episodes[0].title == UNTITLED_EPISODE

    def test_description_falls_back_to_content(self) -> None:
        item = FeedItem(
            enclosure_url="https://cdn.example.com/a.mp3",
            description="",
            content="<p>Full notes</p>",
        )
        _, episodes = normalize(make_feed(item))
        assert episodes[0].description == "<p>Full notes</p>"

    def test_numbers_inferred_from_title(self) -> None:
        _, episodes = normalize(make_feed(make_item(1, title="S02E07 Deep Dive")))
        assert episodes[0].episode_number == 7
        assert episodes[0].season_number == 2

    def test_structured_numbers_win(self) -> None:
        item = make_item(1, title="Episode 99", episode_number="12", season_number="3")
        _, episodes = normalize(make_feed(item))
        assert episodes[0].episode_number == 12
        assert episodes[0].season_number == 3

    def test_malformed_structured_number_falls_back(self) -> None:
        item = make_item(1, title="Episode 8", episode_number="eight")
        _, episodes = normalize(make_feed(item))
        assert episodes[0].episode_number == 8

    def test_structured_duration_wins(self) -> None:
        item = FeedItem(
            enclosure_url="https://cdn.example.com/a.mp3",
            description="Runs 10:00",
            duration="1:00:00",
        )
        _, episodes = normalize(make_feed(item))
        assert episodes[0].duration_seconds == 3600

    def test_duration_inferred_from_description(self) -> None:
        item = FeedItem(enclosure_url="https://cdn.example.com/a.mp3", description="Runs 45:10")
        _, episodes = normalize(make_feed(item))
        assert episodes[0].duration_seconds == 2710

    def test_artwork_structured_then_markup_then_podcast(self) -> None:
        structured = make_item(1, artwork_url="https://img.example.com/ep1.jpg")
        markup = FeedItem(
            enclosure_url="https://cdn.example.com/2.mp3",
            description='<img src="https://img.example.com/ep2.jpg">',
        )
        bare = make_item(3)
        _, episodes = normalize(make_feed(structured, markup, bare))
        assert [e.artwork_url for e in episodes] == [
            "https://img.example.com/ep1.jpg",
            "https://img.example.com/ep2.jpg",
            "https://cdn.example.com/art.jpg",
        ]

    def test_fallback_artwork_when_feed_has_none(self) -> None:
        feed = make_feed(make_item(1), artwork_url=None)
        _, episodes = normalize(feed, fallback_artwork_url="https://img.example.com/stored.jpg")
        assert episodes[0].artwork_url == "https://img.example.com/stored.jpg"


class TestParseItunesDuration:
    """Tests for the _parse_itunes_duration helper."""

    def test_hh_mm_ss(self) -> None:
        assert _parse_itunes_duration("1:02:03") == 3723

    def test_mm_ss(self) -> None:
        assert _parse_itunes_duration("45:30") == 2730

    def test_raw_seconds(self) -> None:
        assert _parse_itunes_duration("2700") == 2700

    def test_empty_string(self) -> None:
        assert _parse_itunes_duration("") is None

    def test_missing_field(self) -> None:
        assert _parse_itunes_duration(None) is None

    def test_invalid_format(self) -> None:
        assert _parse_itunes_duration("not-a-time") is None
