"""
Leading-edge request throttle.

The first call in a window fires immediately. Calls made during the cooldown
are not queued: only the most recent one is kept and fires at the window
boundary, earlier ones are dropped. A burst of N calls therefore does not
produce N requests.
"""

import logging
import threading
import time
from dataclasses import dataclass
from functools import partial
from typing import Any, Callable, Optional, Tuple

logger = logging.getLogger(__name__)


@dataclass
class ThrottleState:
    """Mutable throttle bookkeeping owned by a single client."""
    last_call: Optional[float] = None
    pending: Optional[Tuple[Callable[[], Any], Optional[Callable[[], Any]]]] = None
    timer: Optional[Any] = None
    generation: int = 0


class Throttle:
    """
    Spaces calls at least ``interval`` seconds apart.

    Args:
        interval: Minimum spacing between fired calls, in seconds
        clock: Monotonic clock returning seconds
        timer_factory: Callable ``(delay, fn)`` returning an object with
            ``start()`` and ``cancel()``, ``threading.Timer`` by default
    """

    def __init__(self, interval: float, clock: Callable[[], float] = time.monotonic,
                 timer_factory: Callable[..., Any] = threading.Timer):
        self.interval = interval
        self.clock = clock
        self.timer_factory = timer_factory
        self.state = ThrottleState()
        # timers fire on their own threads
        self._lock = threading.Lock()

    def submit(self, fn: Callable[[], Any], on_drop: Optional[Callable[[], Any]] = None) -> bool:
        """
        Run ``fn`` now if the window is open, otherwise make it the pending call.

        Args:
            fn: Call to run
            on_drop: Invoked if ``fn`` is superseded before it fires

        Returns:
            True if ``fn`` ran immediately, False if it was deferred
        """
        dropped = None
        with self._lock:
            state = self.state
            now = self.clock()
            if state.timer is None and (state.last_call is None
                                        or now - state.last_call >= self.interval):
                state.last_call = now
                run_now = True
            else:
                run_now = False
                dropped = state.pending
                state.pending = (fn, on_drop)
                if state.timer is None:
                    delay = max(0.0, self.interval - (now - state.last_call))
                    state.generation += 1
                    state.timer = self.timer_factory(delay, partial(self._flush, state.generation))
                    state.timer.start()
                    logger.debug("Deferring call by %.3fs", delay)

        if dropped is not None:
            logger.debug("Coalescing throttled call, superseded by a newer one")
            if dropped[1] is not None:
                dropped[1]()

        if run_now:
            fn()
        return run_now

    def _flush(self, generation: int):
        """Fire the pending call at the window boundary."""
        with self._lock:
            state = self.state
            # stale timer, cancelled or replaced after it woke
            if state.timer is None or generation != state.generation:
                return
            state.timer = None
            pending, state.pending = state.pending, None
            if pending is None:
                return
            state.last_call = self.clock()
        pending[0]()

    def cancel(self):
        """Disarm the timer and drop the pending call, if any."""
        with self._lock:
            state = self.state
            timer, state.timer = state.timer, None
            pending, state.pending = state.pending, None
        if timer is not None:
            timer.cancel()
        if pending is not None and pending[1] is not None:
            pending[1]()
