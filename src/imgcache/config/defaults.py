"""Package-level default configuration values."""

from __future__ import annotations

from pathlib import Path
from typing import Any

# Cache tiers
DEFAULT_CACHE_DIR = str(Path.home() / ".imgcache" / "images")
DEFAULT_MEMORY_MAX_ENTRIES = 50
DEFAULT_DISK_MAX_AGE_SECONDS = 60 * 60 * 24 * 7  # 7 days
DEFAULT_JPEG_QUALITY = 80
DEFAULT_CACHE_DISABLED = False

# Background work
DEFAULT_WRITER_MAX_PENDING = 256
DEFAULT_SWEEP_ON_START = True

# Network (None = transport default)
DEFAULT_FETCH_TIMEOUT = None

# Log level
DEFAULT_LOG_LEVEL = "WARNING"


def get_defaults() -> dict[str, Any]:
    """Return all defaults as a flat dictionary for merging."""
    return {
        "cache_dir": DEFAULT_CACHE_DIR,
        "memory_max_entries": DEFAULT_MEMORY_MAX_ENTRIES,
        "disk_max_age_seconds": DEFAULT_DISK_MAX_AGE_SECONDS,
        "jpeg_quality": DEFAULT_JPEG_QUALITY,
        "cache_disabled": DEFAULT_CACHE_DISABLED,
        "writer_max_pending": DEFAULT_WRITER_MAX_PENDING,
        "sweep_on_start": DEFAULT_SWEEP_ON_START,
        "fetch_timeout": DEFAULT_FETCH_TIMEOUT,
        "log_level": DEFAULT_LOG_LEVEL,
    }
