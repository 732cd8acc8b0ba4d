"""Cache statistics and disk entry models."""

from __future__ import annotations

from pydantic import BaseModel


class DiskEntryInfo(BaseModel):
    """One file in the disk tier."""

    key: str
    size_bytes: int = 0
    modified_at: float = 0.0
    age_seconds: float = 0.0


class CacheStats(BaseModel):
    """Aggregate cache statistics."""

    memory_entries: int = 0
    memory_max_entries: int = 0
    memory_evictions: int = 0
    disk_entries: int = 0
    disk_size_mb: float = 0.0
    pending_writes: int = 0
    memory_hits: int = 0
    disk_hits: int = 0
    misses: int = 0
    fetches: int = 0
    fetch_failures: int = 0

    @property
    def hits(self) -> int:
        return self.memory_hits + self.disk_hits

    @property
    def hit_rate(self) -> float:
        total = self.hits + self.misses
        return self.hits / total if total > 0 else 0.0
