"""Custom exception hierarchy for imgcache.

None of these escape ``ImageCache``: each component raises them internally and
the seam that calls it turns them into a miss or an absent result.
"""

from __future__ import annotations

from pathlib import Path
from typing import Any


class ImageCacheError(Exception):
    """Base exception for all imgcache errors."""

    def __init__(self, message: str = "", **kwargs: Any) -> None:
        super().__init__(message)
        self.message = message


class FetchError(ImageCacheError):
    """Network retrieval failed.

    Examples: connection refused, timeout, non-2xx status, empty body.
    """

    def __init__(
        self,
        message: str = "",
        locator: str = "",
        http_status: int | None = None,
        original: Exception | None = None,
    ) -> None:
        super().__init__(message)
        self.locator = locator
        self.http_status = http_status
        self.original = original


class DecodeError(ImageCacheError):
    """Bytes could not be decoded into an image (or encoded back to bytes)."""

    def __init__(self, message: str = "", original: Exception | None = None) -> None:
        super().__init__(message)
        self.original = original


class StorageError(ImageCacheError):
    """A cache directory or file operation failed."""

    def __init__(
        self,
        message: str = "",
        path: Path | None = None,
        original: Exception | None = None,
    ) -> None:
        super().__init__(message)
        self.path = path
        self.original = original
