"""Cache manager — orchestrates L1 (memory), L2 (disk) and the network fetcher."""

from __future__ import annotations

import asyncio
import logging
import threading
from pathlib import Path
from typing import Any

from PIL import Image

from imgcache.cache.disk import DiskCache
from imgcache.cache.fetcher import ImageFetcher
from imgcache.cache.keys import encode_key
from imgcache.cache.memory import MemoryCache
from imgcache.cache.stats import CacheStats
from imgcache.cache.writer import BackgroundWriter
from imgcache.config.defaults import (
    DEFAULT_DISK_MAX_AGE_SECONDS,
    DEFAULT_JPEG_QUALITY,
    DEFAULT_MEMORY_MAX_ENTRIES,
    DEFAULT_WRITER_MAX_PENDING,
)
from imgcache.errors.exceptions import DecodeError, StorageError
from imgcache.utils.image import decode_image

logger = logging.getLogger(__name__)


class ImageCache:
    """Two-tier image cache: L1 in-memory → L2 on-disk → network.

    Construct one at startup and pass it to whatever needs images. Every
    public method is fail-soft: cache or network trouble shows up as None
    (and a log line), never as an exception.
    """

    def __init__(
        self,
        cache_dir: Path | None = None,
        memory_max_entries: int = DEFAULT_MEMORY_MAX_ENTRIES,
        disk_max_age_seconds: float = DEFAULT_DISK_MAX_AGE_SECONDS,
        jpeg_quality: int = DEFAULT_JPEG_QUALITY,
        fetcher: ImageFetcher | None = None,
        enabled: bool = True,
        sweep_on_start: bool = True,
        writer_max_pending: int = DEFAULT_WRITER_MAX_PENDING,
        fetch_timeout: float | None = None,
    ) -> None:
        self._enabled = enabled
        self._max_age_seconds = disk_max_age_seconds
        self._l1 = MemoryCache(max_entries=memory_max_entries)
        self._writer = BackgroundWriter(max_pending=writer_max_pending)
        self._l2 = (
            DiskCache(cache_dir=cache_dir, quality=jpeg_quality, writer=self._writer)
            if enabled
            else None
        )
        self._owns_fetcher = fetcher is None
        self._fetcher = fetcher or ImageFetcher(timeout=fetch_timeout)
        self._stats = CacheStats()
        self._stats_lock = threading.Lock()
        self._inflight: set[asyncio.Task] = set()

        if self._l2 and sweep_on_start:
            self._writer.submit(self._l2.sweep_expired, self._max_age_seconds)

    @classmethod
    def from_config(cls, fetcher: ImageFetcher | None = None, **overrides: Any) -> ImageCache:
        """Build a cache from the layered config (defaults → YAML → env → overrides)."""
        from imgcache.config.hierarchy import load_config_hierarchy
        from imgcache.config.schema import CacheSettings

        settings = CacheSettings.from_mapping(load_config_hierarchy(**overrides))
        return cls(
            cache_dir=settings.cache_dir,
            memory_max_entries=settings.memory_max_entries,
            disk_max_age_seconds=settings.disk_max_age_seconds,
            jpeg_quality=settings.jpeg_quality,
            fetcher=fetcher,
            enabled=not settings.cache_disabled,
            sweep_on_start=settings.sweep_on_start,
            writer_max_pending=settings.writer_max_pending,
            fetch_timeout=settings.fetch_timeout,
        )

    @property
    def enabled(self) -> bool:
        return self._enabled

    @property
    def memory(self) -> MemoryCache:
        return self._l1

    @property
    def disk(self) -> DiskCache | None:
        return self._l2

    @property
    def max_age_seconds(self) -> float:
        return self._max_age_seconds

    def get(self, locator: str) -> Image.Image | None:
        """Look up a locator in the tiers only. L1 first, then L2 (with promotion)."""
        if not self._enabled:
            self._count("misses")
            return None

        key = encode_key(locator)
        img = self._lookup_memory(key)
        if img is None:
            img = self._lookup_disk(key)
        if img is None:
            self._count("misses")
        return img

    def set(self, locator: str, img: Image.Image) -> None:
        """Store a private copy in L1 now and schedule the L2 write.

        Blocks only while the disk write queue is full. Later changes the
        caller makes to ``img`` do not reach either tier.
        """
        if not self._enabled:
            return
        self._store(encode_key(locator), img.copy())

    async def load_image(self, locator: str) -> Image.Image | None:
        """Return the image behind ``locator``, fetching it on a full miss.

        Cancelling the caller does not cancel an in-flight fetch; it
        finishes and populates both tiers for later callers.
        """
        if not self._enabled:
            self._count("misses")
            return await self._fetch_and_decode(locator)

        key = encode_key(locator)
        img = self._lookup_memory(key)
        if img is not None:
            return img

        img = await asyncio.to_thread(self._lookup_disk, key)
        if img is not None:
            return img

        self._count("misses")
        task = asyncio.ensure_future(self._fetch_and_store(locator, key))
        self._inflight.add(task)
        task.add_done_callback(self._inflight.discard)
        return await asyncio.shield(task)

    def clear(self) -> None:
        """Clear both tiers and reset counters."""
        self._l1.clear()
        if self._l2:
            try:
                self._l2.clear()
            except StorageError as e:
                logger.warning("Disk cache clear failed: %s", e.message)
        with self._stats_lock:
            self._stats = CacheStats()

    def clear_cache(self) -> None:
        self.clear()

    def sweep_expired(self, max_age_seconds: float | None = None) -> int:
        """Remove disk entries older than the max age. Returns count removed."""
        if not self._l2:
            return 0
        age = max_age_seconds if max_age_seconds is not None else self._max_age_seconds
        return self._l2.sweep_expired(age)

    async def sweep_periodically(self, interval_seconds: float) -> None:
        """Run the expiry sweep every ``interval_seconds`` until cancelled."""
        while True:
            await asyncio.sleep(interval_seconds)
            removed = await asyncio.to_thread(self.sweep_expired)
            logger.debug("Periodic sweep removed %d file(s)", removed)

    def flush(self, timeout: float | None = None) -> bool:
        """Block until every scheduled disk write has landed."""
        return self._writer.flush(timeout)

    async def drain(self) -> None:
        """Wait for in-flight fetches, then for the disk writes they queued."""
        if self._inflight:
            await asyncio.gather(*list(self._inflight), return_exceptions=True)
        await asyncio.to_thread(self._writer.flush)

    def stats(self) -> CacheStats:
        """Return aggregate cache statistics."""
        with self._stats_lock:
            counters = self._stats.model_copy()
        return counters.model_copy(
            update={
                "memory_entries": len(self._l1),
                "memory_max_entries": self._l1.max_entries,
                "memory_evictions": self._l1.evictions,
                "disk_entries": self._l2.entry_count if self._l2 else 0,
                "disk_size_mb": self._l2.size_mb if self._l2 else 0.0,
                "pending_writes": self._writer.pending,
            }
        )

    def close(self) -> None:
        """Flush pending writes and stop the writer thread."""
        self._writer.close()

    async def aclose(self) -> None:
        await self.drain()
        self.close()
        if self._owns_fetcher:
            await self._fetcher.aclose()

    def _lookup_memory(self, key: str) -> Image.Image | None:
        img = self._l1.get(key)
        if img is not None:
            self._count("memory_hits")
        return img

    def _lookup_disk(self, key: str) -> Image.Image | None:
        if not self._l2:
            return None
        data = self._l2.get(key)
        if data is None:
            return None
        try:
            img = decode_image(data)
        except DecodeError as e:
            # Undecodable files would otherwise miss forever
            logger.warning("Removing corrupt cache entry %s: %s", key, e.message)
            self._l2.remove(key)
            return None
        # Promote to L1
        self._l1.put(key, img)
        self._count("disk_hits")
        return img

    def _store(self, key: str, img: Image.Image, block: bool = True) -> None:
        self._l1.put(key, img)
        if self._l2 and not self._l2.put_image(key, img, block=block):
            logger.warning(
                "Disk write not queued (writer full or closed), %s kept in memory only", key
            )

    async def _fetch_and_store(self, locator: str, key: str) -> Image.Image | None:
        img = await self._fetch_and_decode(locator)
        if img is not None:
            # Runs on the event loop, so a full write queue must not stall it
            self._store(key, img, block=False)
        return img

    async def _fetch_and_decode(self, locator: str) -> Image.Image | None:
        self._count("fetches")
        try:
            data = await self._fetcher.fetch(locator)
        except Exception as e:
            # Fetchers are expected to return None, but a broken one must
            # not take the caller down with it
            logger.error("Fetcher raised for %s: %s", locator, e)
            data = None
        if data is None:
            self._count("fetch_failures")
            return None
        try:
            return await asyncio.to_thread(decode_image, data)
        except DecodeError as e:
            logger.warning("Fetched payload for %s is not an image: %s", locator, e.message)
            self._count("fetch_failures")
            return None

    def _count(self, field: str, n: int = 1) -> None:
        with self._stats_lock:
            setattr(self._stats, field, getattr(self._stats, field) + n)
