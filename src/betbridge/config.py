"""Environment-driven configuration helpers for betbridge."""

from __future__ import annotations

from functools import lru_cache

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict

DEFAULT_USER_AGENT = (
    "Mozilla/5.0 (Macintosh; Intel Mac OS X 10_15_7) AppleWebKit/537.36 "
    "(KHTML, like Gecko) Chrome/120.0.0.0 Safari/537.36"
)


class Settings(BaseSettings):
    """Runtime configuration loaded from environment variables or .env files."""

    model_config = SettingsConfigDict(env_file=".env", env_file_encoding="utf-8", extra="ignore")

    upstream_base_url: str = Field(
        default="https://backend.play23.ag", validation_alias="UPSTREAM_BASE_URL"
    )
    upstream_timeout_s: float = Field(default=30.0, gt=0.0, validation_alias="UPSTREAM_TIMEOUT_S")
    upstream_max_redirects: int = Field(
        default=10, ge=0, le=50, validation_alias="UPSTREAM_MAX_REDIRECTS"
    )
    upstream_user_agent: str = Field(
        default=DEFAULT_USER_AGENT, validation_alias="UPSTREAM_USER_AGENT"
    )

    min_stake: int = Field(default=25, ge=1, validation_alias="MIN_STAKE")
    default_league_id: int = Field(default=535, validation_alias="DEFAULT_LEAGUE_ID")

    log_level: str = Field(default="INFO", validation_alias="LOG_LEVEL")
    cors_origins: str = Field(default="*", validation_alias="CORS_ORIGINS")

    def cors_origin_list(self) -> list[str]:
        return [origin.strip() for origin in self.cors_origins.split(",") if origin.strip()]


@lru_cache(maxsize=1)
def get_settings() -> Settings:
    """Return cached application settings."""

    return Settings()  # type: ignore[call-arg]
