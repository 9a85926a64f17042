"""
Progress Ticker
===============

Background thread that feeds rotating status messages to a callback while a
long call is in flight.

Usage::

    with ProgressTicker(["Working...", "Still working..."], on_progress, interval=1.5):
        result = slow_call()

The first message is delivered immediately, then one every *interval*
seconds, cycling through the list until the block exits.  Callback errors
are logged and swallowed so a broken progress sink never breaks the call it
decorates.
"""

from __future__ import annotations

import itertools
import logging
import threading
from typing import Callable, Sequence

logger = logging.getLogger(__name__)

ProgressCallback = Callable[[str], None]


class ProgressTicker:
    """Cycle *messages* into *callback* on a daemon thread."""

    def __init__(
        self,
        messages: Sequence[str],
        callback: ProgressCallback | None,
        *,
        interval: float = 1.5,
    ):
        self._messages = tuple(messages)
        self._callback = callback
        self._interval = interval
        self._stop = threading.Event()
        self._thread: threading.Thread | None = None

    def start(self) -> None:
        if self._callback is None or not self._messages or self._interval <= 0 or self._thread is not None:
            return
        self._thread = threading.Thread(target=self._run, name="progress-ticker", daemon=True)
        self._thread.start()

    def stop(self) -> None:
        self._stop.set()
        if self._thread is not None and self._thread is not threading.current_thread():
            self._thread.join(timeout=self._interval + 1.0)

    def _run(self) -> None:
        # The first message goes out even if the call already finished
        for message in itertools.cycle(self._messages):
            try:
                self._callback(message)  # type: ignore[misc]
            except Exception as exc:
                logger.warning("Progress callback failed: %s", exc)
            if self._stop.wait(self._interval):
                return

    def __enter__(self) -> ProgressTicker:
        self.start()
        return self

    def __exit__(self, *exc_info) -> None:
        self.stop()
