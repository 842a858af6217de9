from __future__ import annotations

"""Trailing-edge debouncer used for draft autosave.

Each :meth:`Debouncer.call` cancels the pending timer and schedules a new
one, so the callback runs once, *delay* seconds after the last call. The
timer factory defaults to :class:`threading.Timer`; tests inject a fake to
fire timers deterministically, and a UI can pass a factory built on its own
event loop (Tk's ``after``/``after_cancel``) to keep every callback on the
UI thread.

With thread-based timers the callback runs on the timer thread.
:meth:`Debouncer.cancel` blocks until a callback that is already running has
returned, so once ``cancel()`` returns no callback is running and none will
start.
"""

import logging
import threading
from typing import Any, Callable, Optional, Protocol

__all__ = ["Debouncer", "TimerLike"]

logger = logging.getLogger(__name__)


class TimerLike(Protocol):
    def start(self) -> None: ...

    def cancel(self) -> None: ...


TimerFactory = Callable[[float, Callable[[], None]], TimerLike]


def _daemon_timer(delay: float, callback: Callable[[], None]) -> threading.Timer:
    timer = threading.Timer(delay, callback)
    timer.daemon = True
    return timer


class Debouncer:
    def __init__(self, delay: float, callback: Callable[[], Any],
                 timer_factory: Optional[TimerFactory] = None) -> None:
        if delay < 0:
            raise ValueError("delay must be >= 0")
        self._delay = delay
        self._callback = callback
        self._timer_factory: TimerFactory = timer_factory or _daemon_timer
        self._timer: Optional[TimerLike] = None
        self._generation = 0
        self._lock = threading.Lock()
        # Held while the callback runs; re-entrant so the callback may cancel.
        self._run_lock = threading.RLock()

    @property
    def delay(self) -> float:
        return self._delay

    @property
    def pending(self) -> bool:
        with self._lock:
            return self._timer is not None

    def call(self) -> None:
        """(Re)arm the timer."""
        with self._lock:
            if self._timer is not None:
                self._timer.cancel()
            self._generation += 1
            generation = self._generation
            timer = self._timer_factory(self._delay, lambda: self._fire(generation))
            self._timer = timer
        timer.start()

    def cancel(self) -> None:
        """Drop the pending call and wait for a running callback to finish."""
        with self._lock:
            timer, self._timer = self._timer, None
        if timer is not None:
            timer.cancel()
        with self._run_lock:
            pass

    def flush(self) -> bool:
        """Run a pending callback immediately; return True if one was pending."""
        with self._run_lock:
            with self._lock:
                timer, self._timer = self._timer, None
            if timer is None:
                return False
            timer.cancel()
            self._run()
        return True

    def _fire(self, generation: int) -> None:
        with self._run_lock:
            # A timer cancelled after it started firing must not run the callback.
            with self._lock:
                if self._timer is None or generation != self._generation:
                    return
                self._timer = None
            self._run()

    def _run(self) -> None:
        try:
            self._callback()
        except Exception:
            logger.exception("Debounced callback failed")
