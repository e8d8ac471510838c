"""Episodes table for ingested feed entries."""

from datetime import datetime
from typing import Optional

from sqlalchemy import UniqueConstraint
from sqlmodel import Field, SQLModel

from podsync.utils.clock import utc_now

EPISODE_AUDIO_URL_CONSTRAINT = "uq_episodes_podcast_audio_url"


class Episode(SQLModel, table=True):  # type: ignore[call-arg]
    """An episode ingested from a podcast feed.

    The audio URL is the deduplication key within a podcast. Rows are
    written once by the sync engine and never rewritten by it.
    """

    __tablename__ = "episodes"
    __table_args__ = (
        UniqueConstraint(
            "podcast_id", "audio_url", name=EPISODE_AUDIO_URL_CONSTRAINT
        ),
    )

    id: Optional[int] = Field(default=None, primary_key=True)
    podcast_id: int = Field(foreign_key="podcasts.id", index=True)

    title: str
    description: Optional[str] = Field(default=None)
    audio_url: str
    duration_seconds: Optional[int] = Field(default=None)
    published_at: Optional[datetime] = Field(default=None, index=True)
    episode_number: Optional[int] = Field(default=None)
    season_number: Optional[int] = Field(default=None)
    artwork_url: Optional[str] = Field(default=None)

    created_at: datetime = Field(default_factory=utc_now)
