# orders/services/coalescing.py

"""
Trailing-edge debounce.

A burst of trigger() calls within `delay` seconds results in exactly one
callback, fired `delay` seconds after the last call.
"""

from __future__ import annotations

import threading
from typing import Callable


class CoalescingTrigger:
    def __init__(
        self,
        delay: float,
        callback: Callable[[], None],
        *,
        timer_factory: Callable[..., threading.Timer] = threading.Timer,
    ):
        self.delay = max(0.0, float(delay))
        self.callback = callback
        self._timer_factory = timer_factory
        self._timer: threading.Timer | None = None
        self._generation = 0
        self._lock = threading.Lock()

    @property
    def pending(self) -> bool:
        with self._lock:
            return self._timer is not None

    def trigger(self) -> None:
        with self._lock:
            if self._timer is not None:
                self._timer.cancel()
            self._generation += 1
            timer = self._timer_factory(self.delay, self._fire, args=(self._generation,))
            timer.daemon = True
            self._timer = timer
        timer.start()

    def _fire(self, generation: int) -> None:
        with self._lock:
            # superseded by a later trigger, flush or cancel
            if generation != self._generation or self._timer is None:
                return
            self._timer = None
        self.callback()

    def flush(self) -> bool:
        """Run a pending callback now, on the calling thread. Returns True if one ran."""
        with self._lock:
            self._generation += 1
            timer, self._timer = self._timer, None
        if timer is None:
            return False
        timer.cancel()
        self.callback()
        return True

    def cancel(self) -> None:
        with self._lock:
            self._generation += 1
            timer, self._timer = self._timer, None
        if timer is not None:
            timer.cancel()
