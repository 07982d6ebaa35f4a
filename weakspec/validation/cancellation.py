# Copyright Rand Arete @ Weakspec 2025
# Licensed under the Apache License, Version 2.0
"""Cancellation tokens threaded into program sources."""

from __future__ import annotations

import logging
import threading
from typing import Callable, List

logger = logging.getLogger(__name__)


class CancellationToken:
    """A one-shot flag telling a program source to stop producing.

    A validator creates one token per get_violations call, hands it to the
    program source and cancels it in a finally block, so the source is
    released whether the stream is exhausted, abandoned or fails.

    Example:
        >>> token = CancellationToken()
        >>> token.add_callback(lambda: print("released"))
        >>> token.cancel()
        released
        >>> token.cancelled
        True
    """

    def __init__(self) -> None:
        self._event = threading.Event()
        self._callbacks: List[Callable[[], None]] = []
        self._lock = threading.Lock()

    @property
    def cancelled(self) -> bool:
        return self._event.is_set()

    def add_callback(self, callback: Callable[[], None]) -> None:
        """Run callback on cancellation, immediately if already cancelled."""
        with self._lock:
            if not self._event.is_set():
                self._callbacks.append(callback)
                return
        callback()

    def cancel(self) -> None:
        """Cancel the token and run its callbacks once."""
        with self._lock:
            if self._event.is_set():
                return
            self._event.set()
            callbacks, self._callbacks = self._callbacks, []

        for callback in callbacks:
            callback()
        logger.debug("cancelled program source (%d callbacks)", len(callbacks))
