"""
Outline file watcher — polling-based.

Editors often save in several quick writes, and bind-mounted volumes do not
reliably forward filesystem events, so the outline's mtime is polled instead
of subscribing to inotify.

The watcher runs a daemon thread that:
1. Stats the outline every POLL_INTERVAL seconds
2. Asks the cache whether the file is newer than its last load or write
   (the session's own writes therefore never count as changes)
3. Waits until the mtime has been stable for DEBOUNCE_MS
4. Enqueues a single cache refresh for that mtime
"""

import logging
import os
import threading
import time
from pathlib import Path
from typing import Optional

log = logging.getLogger(__name__)

_DEFAULT_POLL_INTERVAL = 2.0
_DEFAULT_DEBOUNCE_MS = 500


class OutlineWatcher:
    """
    Polling-based outline watcher.

    Usage:
        watcher = OutlineWatcher(cache, outline_path)
        watcher.start()
        ...
        watcher.stop()
    """

    def __init__(
        self,
        cache,
        file_path: Path,
        poll_interval: Optional[float] = None,
        debounce_ms: Optional[int] = None,
    ) -> None:
        self._cache = cache
        self._file_path = file_path
        self._poll_interval = poll_interval or float(
            os.environ.get("POLL_INTERVAL", _DEFAULT_POLL_INTERVAL)
        )
        if debounce_ms is None:
            debounce_ms = int(os.environ.get("DEBOUNCE_MS", _DEFAULT_DEBOUNCE_MS))
        self._debounce = debounce_ms / 1000.0
        self._stop_event = threading.Event()
        self._thread: Optional[threading.Thread] = None

        # mtime waiting out the debounce window, and when it was first seen
        self._pending_mtime: Optional[float] = None
        self._pending_since: float = 0.0
        self._last_enqueued_mtime: Optional[float] = None

    def start(self) -> None:
        """Start the polling thread (daemon)."""
        log.info(
            "Starting outline watcher on %s (polling every %.1fs)",
            self._file_path,
            self._poll_interval,
        )
        self._thread = threading.Thread(
            target=self._poll_loop, daemon=True, name="outline-watcher"
        )
        self._thread.start()

    def stop(self) -> None:
        """Signal the poll thread to stop and wait for it."""
        log.info("Stopping outline watcher")
        self._stop_event.set()
        if self._thread:
            self._thread.join(timeout=self._poll_interval + 2)

    # ------------------------------------------------------------------
    # Internal
    # ------------------------------------------------------------------

    def _poll_loop(self) -> None:
        while not self._stop_event.is_set():
            self._stop_event.wait(self._poll_interval)
            if self._stop_event.is_set():
                break
            try:
                self.check_for_changes()
            except Exception:
                log.exception("Error during poll cycle")

    def check_for_changes(self, now: Optional[float] = None) -> bool:
        """
        Single poll cycle. Returns True when a refresh was enqueued.

        ``now`` is a time.monotonic() value and only needs passing in tests.
        """
        now = time.monotonic() if now is None else now

        if not self._cache.is_file_stale():
            self._pending_mtime = None
            return False

        try:
            mtime = self._file_path.stat().st_mtime
        except OSError:
            log.debug("Outline %s disappeared during poll", self._file_path)
            self._pending_mtime = None
            return False

        if mtime == self._last_enqueued_mtime:
            return False

        if mtime != self._pending_mtime:
            log.debug("Outline modified (mtime %s), debouncing", mtime)
            self._pending_mtime = mtime
            self._pending_since = now
            if self._debounce > 0:
                return False

        if now - self._pending_since < self._debounce:
            return False

        log.info("Outline changed on disk, scheduling reload")
        self._cache.enqueue_refresh()
        self._last_enqueued_mtime = mtime
        self._pending_mtime = None
        return True
