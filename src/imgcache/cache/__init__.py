"""Cache subsystem — two-tier (memory + disk) image cache with network fallback."""

from imgcache.cache.disk import DiskCache
from imgcache.cache.fetcher import ImageFetcher
from imgcache.cache.keys import encode_key
from imgcache.cache.manager import ImageCache
from imgcache.cache.memory import MemoryCache
from imgcache.cache.stats import CacheStats, DiskEntryInfo

__all__ = [
    "ImageCache",
    "MemoryCache",
    "DiskCache",
    "ImageFetcher",
    "CacheStats",
    "DiskEntryInfo",
    "encode_key",
]
