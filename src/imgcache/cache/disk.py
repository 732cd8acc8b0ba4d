"""L2 disk cache — one file per key in a dedicated directory."""

from __future__ import annotations

import logging
import os
import shutil
import time
import uuid
from pathlib import Path

from PIL import Image

from imgcache.cache.stats import DiskEntryInfo
from imgcache.cache.writer import BackgroundWriter
from imgcache.errors.exceptions import StorageError
from imgcache.utils.image import DEFAULT_JPEG_QUALITY, encode_jpeg

logger = logging.getLogger(__name__)

_DEFAULT_CACHE_DIR = Path.home() / ".imgcache" / "images"
_TMP_SUFFIX = ".tmp"


class DiskCache:
    """Directory-backed persistent cache with mtime-based expiry.

    Reads are synchronous and treat every failure as a miss. Writes are
    handed to a BackgroundWriter and land atomically (temp file, then
    ``os.replace``), so a reader never sees a half-written file; the last
    writer for a key wins.
    """

    def __init__(
        self,
        cache_dir: Path | None = None,
        quality: int = DEFAULT_JPEG_QUALITY,
        writer: BackgroundWriter | None = None,
    ) -> None:
        self._dir = Path(cache_dir) if cache_dir else _DEFAULT_CACHE_DIR
        self._quality = quality
        self._owns_writer = writer is None
        self._writer = writer or BackgroundWriter()
        self._ensure_dir()

    @property
    def cache_dir(self) -> Path:
        return self._dir

    @property
    def writer(self) -> BackgroundWriter:
        return self._writer

    def path_for(self, key: str) -> Path:
        return self._dir / key

    def get(self, key: str) -> bytes | None:
        path = self.path_for(key)
        try:
            return path.read_bytes()
        except FileNotFoundError:
            return None
        except OSError as e:
            logger.debug("Disk read failed for %s: %s", path, e)
            return None

    def put(self, key: str, data: bytes) -> None:
        """Schedule a write of raw bytes; returns before the write lands."""
        self._writer.submit(self._write, key, data)

    def put_image(self, key: str, img: Image.Image, block: bool = True) -> bool:
        """Schedule JPEG encoding plus the write, both off the caller's thread.

        With ``block=False`` a full write queue drops the write instead of
        waiting for room. Returns False when the write was dropped.
        """
        if block:
            self._writer.submit(self._encode_and_write, key, img)
            return True
        return self._writer.try_submit(self._encode_and_write, key, img)

    def remove(self, key: str) -> bool:
        try:
            self.path_for(key).unlink()
            return True
        except FileNotFoundError:
            return False
        except OSError as e:
            logger.warning("Failed to remove cache file for %s: %s", key, e)
            return False

    def clear(self) -> None:
        """Delete the whole cache directory and recreate it empty."""
        # Queued writes would otherwise recreate entries after the wipe
        self._writer.flush()
        try:
            shutil.rmtree(self._dir)
        except FileNotFoundError:
            pass
        except OSError as e:
            raise StorageError(f"Failed to clear cache directory: {e}", path=self._dir, original=e) from e
        self._ensure_dir()

    def sweep_expired(self, max_age_seconds: float, now: float | None = None) -> int:
        """Remove every file whose mtime is older than ``max_age_seconds``.

        A file that cannot be stat'ed or deleted is skipped. Returns the
        number of files removed.
        """
        cutoff = (now if now is not None else time.time()) - max_age_seconds
        removed = 0
        try:
            scanner = os.scandir(self._dir)
        except FileNotFoundError:
            return 0
        except OSError as e:
            logger.warning("Cannot scan cache directory %s: %s", self._dir, e)
            return 0

        with scanner:
            for entry in scanner:
                try:
                    if not entry.is_file(follow_symlinks=False):
                        continue
                    if entry.stat(follow_symlinks=False).st_mtime < cutoff:
                        os.unlink(entry.path)
                        removed += 1
                except OSError as e:
                    logger.debug("Skipping %s during sweep: %s", entry.path, e)
                    continue

        if removed:
            logger.info("Swept %d expired file(s) from %s", removed, self._dir)
        return removed

    def entries(self) -> list[DiskEntryInfo]:
        """Committed entries (in-flight temp files excluded), oldest first."""
        now = time.time()
        result: list[DiskEntryInfo] = []
        try:
            scanner = os.scandir(self._dir)
        except OSError:
            return result
        with scanner:
            for entry in scanner:
                if entry.name.endswith(_TMP_SUFFIX):
                    continue
                try:
                    if not entry.is_file(follow_symlinks=False):
                        continue
                    st = entry.stat(follow_symlinks=False)
                except OSError:
                    continue
                result.append(
                    DiskEntryInfo(
                        key=entry.name,
                        size_bytes=st.st_size,
                        modified_at=st.st_mtime,
                        age_seconds=max(0.0, now - st.st_mtime),
                    )
                )
        result.sort(key=lambda e: e.modified_at)
        return result

    @property
    def entry_count(self) -> int:
        return len(self.entries())

    @property
    def size_mb(self) -> float:
        return sum(e.size_bytes for e in self.entries()) / (1024 * 1024)

    def flush(self, timeout: float | None = None) -> bool:
        """Block until all scheduled writes have completed."""
        return self._writer.flush(timeout)

    def close(self) -> None:
        if self._owns_writer:
            self._writer.close()
        else:
            self._writer.flush()

    def _ensure_dir(self) -> None:
        try:
            self._dir.mkdir(parents=True, exist_ok=True)
        except OSError as e:
            # Reads will miss and writes will retry the mkdir
            logger.warning("Cannot create cache directory %s: %s", self._dir, e)

    def _encode_and_write(self, key: str, img: Image.Image) -> None:
        self._write(key, encode_jpeg(img, quality=self._quality))

    def _write(self, key: str, data: bytes) -> None:
        path = self.path_for(key)
        tmp = path.with_name(f"{key}.{uuid.uuid4().hex}{_TMP_SUFFIX}")
        try:
            self._dir.mkdir(parents=True, exist_ok=True)
            tmp.write_bytes(data)
            os.replace(tmp, path)
        except OSError as e:
            tmp.unlink(missing_ok=True)
            raise StorageError(f"Failed to write {path}: {e}", path=path, original=e) from e
