"""Application configuration management."""

from __future__ import annotations

from functools import lru_cache
from typing import Any, Optional

from pydantic import Field, ValidationError, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

DEFAULT_PREFIX = "#"
INFLUENCE_ASTEROID_CONTRACT = "0x6e4c6d9b0930073e958abd2aba516b885260b8ff"


class Settings(BaseSettings):
    """Runtime configuration loaded from environment or `.env`."""

    model_config = SettingsConfigDict(
        env_file=(".env",),
        env_file_encoding="utf-8",
        extra="ignore",
        populate_by_name=True,
    )

    discord_token: str = Field(..., alias="DISCORD_TOKEN", min_length=1)
    prefix: str = Field(default=DEFAULT_PREFIX, alias="PREFIX")
    test_user: Optional[str] = Field(default=None, alias="TEST_USER")

    verification_link: Optional[str] = Field(default=None, alias="VERIFICATION_LINK")

    infura_project_id: Optional[str] = Field(default=None, alias="INFURA_PROJECT_ID")
    infura_project_secret: Optional[str] = Field(
        default=None, alias="INFURA_PROJECT_SECRET"
    )
    infura_network: str = Field(default="mainnet", alias="INFURA_NETWORK")

    asteroid_contract: str = Field(
        default=INFLUENCE_ASTEROID_CONTRACT,
        alias="ASTEROID_CONTRACT",
    )
    asteroid_scans_contract: Optional[str] = Field(
        default=None,
        alias="ASTEROID_SCANS_CONTRACT",
    )
    asteroid_url: str = Field(
        default="https://game.influenceth.io/asteroids/{id}",
        alias="ASTEROID_URL",
    )

    database_url: str = Field(
        default="sqlite+aiosqlite:///./database.sqlite",
        alias="DATABASE_URL",
    )

    event_poll_seconds: int = Field(
        default=60,
        alias="EVENT_POLL_SECONDS",
        ge=5,
        le=3600,
    )

    log_level: str = Field(default="INFO", alias="LOG_LEVEL")

    @field_validator("prefix", mode="before")
    @classmethod
    def _default_prefix(cls, value: Any) -> str:
        if value in (None, ""):
            return DEFAULT_PREFIX
        return str(value)

    @field_validator(
        "test_user",
        "verification_link",
        "infura_project_id",
        "infura_project_secret",
        "asteroid_scans_contract",
        mode="before",
    )
    @classmethod
    def _blank_as_none(cls, value: Any) -> Optional[str]:
        if value is None:
            return None
        value = str(value).strip()
        return value or None

    @property
    def chain_enabled(self) -> bool:
        """Whether Infura credentials are present for on-chain lookups."""
        return bool(self.infura_project_id and self.infura_project_secret)


@lru_cache(maxsize=1)
def load_settings() -> Settings:
    """Return cached Settings instance, raising a helpful message on failure."""
    try:
        return Settings()
    except ValidationError as exc:
        raise RuntimeError(f"Invalid configuration: {exc}") from exc


__all__ = ["Settings", "load_settings", "DEFAULT_PREFIX"]
