"""imgcache — two-tier cache for remote images."""

from imgcache.cache.manager import ImageCache
from imgcache.cache.stats import CacheStats

__all__ = ["ImageCache", "CacheStats"]
