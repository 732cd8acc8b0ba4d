"""L1 in-memory LRU cache of decoded images."""

from __future__ import annotations

import threading
from collections import OrderedDict

from PIL import Image

_DEFAULT_MAX_ENTRIES = 50


class MemoryCache:
    """Count-bounded LRU cache, safe to share between threads."""

    def __init__(self, max_entries: int = _DEFAULT_MAX_ENTRIES) -> None:
        if max_entries < 1:
            raise ValueError(f"max_entries must be >= 1, got {max_entries}")
        self._store: OrderedDict[str, Image.Image] = OrderedDict()
        self._max_entries = max_entries
        self._lock = threading.Lock()
        self._evictions = 0

    def get(self, key: str) -> Image.Image | None:
        with self._lock:
            img = self._store.get(key)
            if img is None:
                return None
            # Move to end (most recently used)
            self._store.move_to_end(key)
            return img

    def put(self, key: str, img: Image.Image) -> None:
        with self._lock:
            if key in self._store:
                self._store.move_to_end(key)
            else:
                # Evict before inserting so the new entry is never the victim
                while len(self._store) >= self._max_entries:
                    self._store.popitem(last=False)
                    self._evictions += 1
            self._store[key] = img

    def remove(self, key: str) -> bool:
        with self._lock:
            return self._store.pop(key, None) is not None

    def clear(self) -> None:
        with self._lock:
            self._store.clear()

    def keys(self) -> list[str]:
        """Keys from least to most recently used."""
        with self._lock:
            return list(self._store)

    @property
    def max_entries(self) -> int:
        return self._max_entries

    @property
    def evictions(self) -> int:
        return self._evictions

    def __contains__(self, key: object) -> bool:
        # Membership check does not touch recency
        with self._lock:
            return key in self._store

    def __len__(self) -> int:
        with self._lock:
            return len(self._store)
