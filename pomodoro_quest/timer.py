import time
import logging
from typing import Callable

from .config import TIMER_DURATION_SEC

IDLE = "idle"
RUNNING = "running"


class SessionTimer:
    """Fixed-length countdown measured against the wall clock.

    Remaining time is recomputed from the start instant on every tick, so a
    process that was suspended picks up the right value on its next tick.
    """

    def __init__(
        self,
        logger: logging.Logger,
        duration_sec: int = TIMER_DURATION_SEC,
        clock: Callable[[], float] = time.time,
    ):
        self._logger = logger
        self._clock = clock
        self.duration_sec = int(duration_sec)
        self.state = IDLE
        self.started_at: float | None = None
        self.remaining_sec = self.duration_sec

    @property
    def is_running(self) -> bool:
        return self.state == RUNNING

    def now(self) -> float:
        return self._clock()

    def start(self) -> bool:
        if self.state == RUNNING:
            return False
        self.state = RUNNING
        self.started_at = self._clock()
        self.remaining_sec = self.duration_sec
        self._logger.info(f"Timer start duration={self.duration_sec}s")
        return True

    def stop(self) -> bool:
        if self.state != RUNNING:
            return False
        self.state = IDLE
        self.started_at = None
        self._logger.info(f"Timer stop remaining={self.remaining_sec}s")
        return True

    def reset(self) -> None:
        self.stop()
        self.remaining_sec = self.duration_sec

    def elapsed(self, now: float | None = None) -> float:
        if self.started_at is None:
            return 0.0
        if now is None:
            now = self._clock()
        return max(0.0, now - self.started_at)

    def tick(self, now: float | None = None) -> bool:
        """Refresh ``remaining_sec``; returns True when the countdown just hit zero."""
        if self.state != RUNNING:
            return False
        elapsed = int(self.elapsed(now))
        self.remaining_sec = max(0, self.duration_sec - elapsed)
        if self.remaining_sec > 0:
            return False
        self.state = IDLE
        self.started_at = None
        self._logger.info("Timer completed")
        return True
