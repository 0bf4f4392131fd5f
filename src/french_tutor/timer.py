"""Countdown for timed questions.

The controller schedules a single callback through a scheduler with a
``schedule(delay, callback) -> handle`` / ``cancel(handle)`` interface. On
expiry it forces the timed-out submission on the session. Once cancelled
it never fires.
"""
import logging
import threading
import time
from typing import Callable, Optional

from french_tutor.session import QuestionSession

logger = logging.getLogger(__name__)

WARNING_RATIO = 0.5
URGENT_RATIO = 0.2


class ThreadingScheduler:
    """Runs callbacks on daemon ``threading.Timer`` threads."""

    def schedule(self, delay_s: float, callback: Callable[[], None]) -> threading.Timer:
        timer = threading.Timer(delay_s, callback)
        timer.daemon = True
        timer.start()
        return timer

    def cancel(self, handle: threading.Timer) -> None:
        handle.cancel()


class TimeoutController:
    def __init__(self, session: QuestionSession, scheduler=None, clock: Callable[[], float] = time.monotonic) -> None:
        self.session = session
        self.scheduler = scheduler or ThreadingScheduler()
        self._clock = clock
        self._lock = threading.Lock()
        self._handle = None
        self._deadline: Optional[float] = None
        self._fired = False
        self._cancelled = False

    @property
    def time_limit(self) -> Optional[float]:
        return self.session.question.time_limit_seconds

    @property
    def fired(self) -> bool:
        return self._fired

    @property
    def running(self) -> bool:
        return self._handle is not None and not (self._fired or self._cancelled)

    def start(self) -> bool:
        """Arm the countdown. Untimed questions and repeat calls are ignored."""
        with self._lock:
            if not self.session.question.is_timed or self._handle is not None or self._cancelled:
                return False
            elapsed_s = self.session.elapsed_ms() / 1000
            delay = max(0.0, self.time_limit - elapsed_s)
            self._deadline = self._clock() + delay
            self._handle = self.scheduler.schedule(delay, self._on_timeout)
            logger.debug("Armed %.1fs countdown for %s", delay, self.session.question.id)
            return True

    def cancel(self) -> None:
        with self._lock:
            if self._cancelled or self._fired:
                return
            self._cancelled = True
            if self._handle is not None:
                self.scheduler.cancel(self._handle)

    def _on_timeout(self) -> None:
        with self._lock:
            if self._cancelled or self._fired:
                return
            self._fired = True
        self.session.timeout()

    def remaining_seconds(self) -> Optional[float]:
        if self.time_limit is None:
            return None
        if self._deadline is None:
            return max(0.0, self.time_limit - self.session.elapsed_ms() / 1000)
        return max(0.0, self._deadline - self._clock())

    def urgency(self) -> str:
        """``normal``, ``warning`` (half time left) or ``urgent`` (a fifth left)."""
        remaining = self.remaining_seconds()
        if remaining is None:
            return "normal"
        ratio = remaining / self.time_limit
        if ratio <= URGENT_RATIO:
            return "urgent"
        if ratio <= WARNING_RATIO:
            return "warning"
        return "normal"
