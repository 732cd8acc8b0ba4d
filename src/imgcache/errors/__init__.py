"""Error handling — exception hierarchy for the image cache."""

from imgcache.errors.exceptions import (
    DecodeError,
    FetchError,
    ImageCacheError,
    StorageError,
)

__all__ = [
    "ImageCacheError",
    "FetchError",
    "DecodeError",
    "StorageError",
]
