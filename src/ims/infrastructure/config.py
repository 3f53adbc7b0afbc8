"""Runtime settings, read from ``IMS_*`` environment variables or a ``.env`` file."""

from __future__ import annotations

from functools import lru_cache
from pathlib import Path

from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    model_config = SettingsConfigDict(env_prefix="IMS_", env_file=".env", extra="ignore")

    data_dir: Path = Path("data")
    low_stock_threshold: int = 10
    default_actor: str = "admin"
    log_level: str = "INFO"
    log_json: bool = False


@lru_cache
def get_settings() -> Settings:
    return Settings()
