"""Background worker that runs disk writes off the caller's thread."""

from __future__ import annotations

import logging
import queue
import threading
from collections.abc import Callable
from typing import Any

logger = logging.getLogger(__name__)

_DEFAULT_MAX_PENDING = 256
_STOP = object()


class BackgroundWriter:
    """Single daemon thread draining a bounded job queue.

    ``submit`` returns as soon as the job is queued; it only blocks when
    ``max_pending`` jobs are already waiting. ``try_submit`` never blocks and
    drops the job instead, which is what event-loop callers want. ``flush``
    blocks until every job queued so far has finished. A failing job is
    logged and dropped so one bad write never stops the worker.
    """

    def __init__(self, max_pending: int = _DEFAULT_MAX_PENDING, name: str = "imgcache-writer") -> None:
        self._queue: queue.Queue[Any] = queue.Queue(maxsize=max_pending)
        self._name = name
        self._thread: threading.Thread | None = None
        self._state = threading.Condition()
        self._submitting = 0
        self._idle = threading.Condition()
        self._pending = 0
        self._closed = False
        self._completed = 0
        self._failed = 0
        self._dropped = 0

    def submit(self, fn: Callable[..., object], *args: Any) -> None:
        """Queue ``fn(*args)`` for execution on the worker thread."""
        if not self._enter():
            # Writer is gone; run inline so the work is not silently lost
            logger.debug("Writer closed, running %s inline", getattr(fn, "__name__", fn))
            self._run(fn, args)
            return
        try:
            self._track(1)
            self._queue.put((fn, args))
        finally:
            self._leave()

    def try_submit(self, fn: Callable[..., object], *args: Any) -> bool:
        """Queue ``fn(*args)`` without blocking. Returns False if it was dropped."""
        if not self._enter():
            return False
        try:
            self._track(1)
            try:
                self._queue.put_nowait((fn, args))
            except queue.Full:
                self._track(-1)
                self._dropped += 1
                logger.debug("Writer queue full, dropped %s", getattr(fn, "__name__", fn))
                return False
            return True
        finally:
            self._leave()

    def flush(self, timeout: float | None = None) -> bool:
        """Wait for queued jobs to finish. Returns False on timeout."""
        with self._idle:
            return self._idle.wait_for(lambda: self._pending == 0, timeout)

    def close(self) -> None:
        """Drain outstanding jobs and stop the worker thread."""
        with self._state:
            if self._closed:
                return
            self._closed = True
            # _STOP must land behind every job already being enqueued
            self._state.wait_for(lambda: self._submitting == 0)
            thread = self._thread
        if thread is not None:
            self._queue.put(_STOP)
            thread.join()
            self._thread = None

    @property
    def pending(self) -> int:
        return self._pending

    @property
    def stats(self) -> dict:
        return {
            "pending": self.pending,
            "completed": self._completed,
            "failed": self._failed,
            "dropped": self._dropped,
        }

    def _track(self, delta: int) -> None:
        with self._idle:
            self._pending += delta
            if self._pending == 0:
                self._idle.notify_all()

    def _enter(self) -> bool:
        with self._state:
            if self._closed:
                return False
            self._submitting += 1
            self._ensure_started()
            return True

    def _leave(self) -> None:
        with self._state:
            self._submitting -= 1
            if self._submitting == 0:
                self._state.notify_all()

    def _ensure_started(self) -> None:
        if self._thread is None:
            self._thread = threading.Thread(target=self._loop, name=self._name, daemon=True)
            self._thread.start()

    def _loop(self) -> None:
        while True:
            item = self._queue.get()
            if item is _STOP:
                return
            fn, args = item
            try:
                self._run(fn, args)
            finally:
                self._track(-1)

    def _run(self, fn: Callable[..., object], args: tuple) -> None:
        try:
            fn(*args)
            self._completed += 1
        except Exception as e:
            self._failed += 1
            logger.warning("Background job %s failed: %s", getattr(fn, "__name__", fn), e)
