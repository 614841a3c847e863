"""
Fire-and-forget persistence writer.

Mastery saves and log appends run on a single background worker so the
interactive flow never waits on storage. A failed write is logged and
dropped; the caller carries on with its in-memory state.

Usage:
    writer = BackgroundWriter()
    writer.submit("save_mastery_map", store.save_mastery_map, snapshot)
    # ... session runs ...
    writer.close()  # waits for pending writes
"""

from __future__ import annotations

import threading
from collections.abc import Callable
from concurrent.futures import Future, ThreadPoolExecutor, wait
from dataclasses import dataclass
from typing import Any

from loguru import logger


@dataclass
class WriterStatus:
    """Counters for dispatched writes."""

    submitted: int = 0
    succeeded: int = 0
    failed: int = 0
    last_error: str | None = None


class BackgroundWriter:
    """
    Single-worker executor for persistence calls.

    With ``inline=True`` every write runs synchronously on the caller's
    thread, which keeps tests deterministic.
    """

    def __init__(self, inline: bool = False):
        self.inline = inline
        self._status = WriterStatus()
        self._lock = threading.Lock()
        self._pending: set[Future] = set()
        self._closed = False
        self._executor: ThreadPoolExecutor | None = None
        if not inline:
            self._executor = ThreadPoolExecutor(max_workers=1, thread_name_prefix="kisokyu-writer")

    @property
    def status(self) -> WriterStatus:
        return self._status

    def submit(self, name: str, fn: Callable[..., Any], *args: Any) -> bool:
        """
        Dispatch a write.

        Returns:
            False if the writer is already closed, True otherwise
        """
        if self._closed:
            logger.warning(f"Writer closed, dropping {name}")
            return False

        with self._lock:
            self._status.submitted += 1

        if self._executor is None:
            self._run(name, fn, args)
            return True

        future = self._executor.submit(self._run, name, fn, args)
        with self._lock:
            self._pending.add(future)
        future.add_done_callback(self._discard)
        return True

    def _run(self, name: str, fn: Callable[..., Any], args: tuple) -> None:
        try:
            fn(*args)
        except Exception as e:
            logger.warning(f"Background write {name} failed: {e}")
            with self._lock:
                self._status.failed += 1
                self._status.last_error = str(e)
            return
        with self._lock:
            self._status.succeeded += 1

    def _discard(self, future: Future) -> None:
        with self._lock:
            self._pending.discard(future)

    def flush(self, timeout: float | None = None) -> None:
        """Wait for every write dispatched so far."""
        with self._lock:
            pending = list(self._pending)
        if pending:
            wait(pending, timeout=timeout)

    def close(self) -> None:
        """Drain pending writes and stop the worker."""
        if self._closed:
            return
        self._closed = True
        if self._executor is not None:
            self._executor.shutdown(wait=True)
        logger.debug(
            f"Writer closed: {self._status.succeeded} ok, {self._status.failed} failed"
        )
