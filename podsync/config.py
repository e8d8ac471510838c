# podsync/config.py
from typing import Literal

from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    database_url: str = "postgresql+asyncpg://localhost:5432/podsync"
    env: Literal["dev", "stage", "prod"] = "dev"
    debug: bool = False
    log_level: str = "INFO"
    sql_echo: bool = False
    auto_init_db: bool = True

    # Feed fetching
    feed_user_agent: str = "podsync/1.0 (+https://github.com/podsync/podsync)"
    feed_connect_timeout: float = 5.0
    feed_read_timeout: float = 20.0

    # Advisory cadence for whatever scheduler runs the sweep
    sync_interval_minutes: int = 60

    @property
    def is_dev(self) -> bool:
        return self.env == "dev" or self.debug is True

    model_config = SettingsConfigDict(
        env_file=".env",
        env_prefix="",
        case_sensitive=False,
        extra="ignore",
    )


settings = Settings()
