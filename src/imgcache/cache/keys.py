"""Cache key generation — locator to filesystem-safe identifier."""

from __future__ import annotations

import hashlib


def encode_key(locator: str) -> str:
    """Map a locator (usually a URL) to a SHA256 hex digest.

    The digest is 64 lowercase hex characters, so it is safe as a file name
    on every filesystem and the same locator always yields the same key.
    """
    # surrogatepass keeps lone surrogates hashable instead of raising
    return hashlib.sha256(locator.encode("utf-8", "surrogatepass")).hexdigest()
