"""
Configuration settings for lab request metrics.

Uses Pydantic Settings to load environment variables for logging, metrics
defaults and report output. Values can also come from a local `.env` file.
"""
from __future__ import annotations

from functools import lru_cache
from typing import List

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    # Application
    app_env: str = Field("development", alias="APP_ENV")
    log_level: str = Field("INFO", alias="LOG_LEVEL")
    log_json: bool = Field(False, alias="LOG_JSON")

    # Metrics defaults
    metrics_granularities: str = Field("day,week,month", alias="METRICS_GRANULARITIES")
    metrics_gap_fill: bool = Field(False, alias="METRICS_GAP_FILL")

    # Reports
    results_dir: str = Field("results", alias="RESULTS_DIR")
    sample_rows: int = Field(500, alias="SAMPLE_ROWS")
    sample_seed: int = Field(42, alias="SAMPLE_SEED")

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
        populate_by_name=True,
    )

    @property
    def granularity_names(self) -> List[str]:
        return [
            part.strip().lower() for part in self.metrics_granularities.split(",") if part.strip()
        ]


@lru_cache(maxsize=1)
def get_settings() -> Settings:
    """
    Retrieve a cached instance of Settings to avoid repeated env parsing.
    """
    return Settings()


__all__ = ["Settings", "get_settings"]
