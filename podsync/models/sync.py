"""Result models reported by the sync orchestrator."""

from typing import Optional

from sqlmodel import Field, SQLModel


class SyncOutcome(SQLModel):
    """Result of syncing a single podcast. Never persisted."""

    podcast_id: int
    episodes_added: int = 0
    episodes_skipped: int = 0
    succeeded: bool
    error: Optional[str] = None


class SweepReport(SQLModel):
    """Result of one pass over every podcast with a feed URL."""

    podcasts_processed: int = 0
    podcasts_succeeded: int = 0
    episodes_added: int = 0
    outcomes: list[SyncOutcome] = Field(default_factory=list)
    errors: list[str] = Field(default_factory=list)

    @property
    def podcasts_failed(self) -> int:
        return self.podcasts_processed - self.podcasts_succeeded
