"""Pydantic model for validated cache settings."""

from __future__ import annotations

from pathlib import Path
from typing import Any

from pydantic import BaseModel, Field, field_validator

from imgcache.config.defaults import (
    DEFAULT_CACHE_DIR,
    DEFAULT_DISK_MAX_AGE_SECONDS,
    DEFAULT_JPEG_QUALITY,
    DEFAULT_LOG_LEVEL,
    DEFAULT_MEMORY_MAX_ENTRIES,
    DEFAULT_WRITER_MAX_PENDING,
)

_LOG_LEVELS = {"DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"}


class CacheSettings(BaseModel):
    cache_dir: Path = Path(DEFAULT_CACHE_DIR)
    memory_max_entries: int = Field(default=DEFAULT_MEMORY_MAX_ENTRIES, ge=1)
    disk_max_age_seconds: float = Field(default=DEFAULT_DISK_MAX_AGE_SECONDS, gt=0)
    jpeg_quality: int = Field(default=DEFAULT_JPEG_QUALITY, ge=1, le=95)
    cache_disabled: bool = False
    writer_max_pending: int = Field(default=DEFAULT_WRITER_MAX_PENDING, ge=1)
    sweep_on_start: bool = True
    fetch_timeout: float | None = Field(default=None, gt=0)
    log_level: str = DEFAULT_LOG_LEVEL

    @field_validator("log_level")
    @classmethod
    def _known_log_level(cls, v: str) -> str:
        level = v.strip().upper()
        if level not in _LOG_LEVELS:
            raise ValueError(f"Unknown log level: {v!r}")
        return level

    @classmethod
    def from_mapping(cls, data: dict[str, Any]) -> CacheSettings:
        """Build from a merged config dict, ignoring keys this model does not know."""
        known = {k: v for k, v in data.items() if k in cls.model_fields}
        return cls(**known)
