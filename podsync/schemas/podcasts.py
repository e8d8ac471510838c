"""Podcast catalog table."""

from datetime import datetime
from typing import Optional

from sqlmodel import Field, SQLModel

from podsync.utils.clock import utc_now


class Podcast(SQLModel, table=True):  # type: ignore[call-arg]
    """A podcast in the catalog.

    Created by an import, then updated in place by every successful sync.
    Rows without a feed_url are skipped by the sweep.
    """

    __tablename__ = "podcasts"

    id: Optional[int] = Field(default=None, primary_key=True)
    title: str = Field(default="", index=True)
    author: str = Field(default="")
    description: str = Field(default="")
    artwork_url: Optional[str] = Field(default=None)
    language: Optional[str] = Field(default=None)
    categories: Optional[str] = Field(default=None)  # comma-separated
    feed_url: Optional[str] = Field(default=None, index=True)
    created_at: datetime = Field(default_factory=utc_now)
    last_synced_at: Optional[datetime] = Field(default=None)
