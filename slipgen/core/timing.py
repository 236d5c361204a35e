import time
from typing import Callable

from slipgen.core.errors import DeadlineExceeded

Clock = Callable[[], float]


class VirtualClock:
    """Manually advanced monotonic clock (seconds)."""

    def __init__(self, start: float = 0.0) -> None:
        self.now = start

    def __call__(self) -> float:
        return self.now

    def advance(self, seconds: float) -> None:
        self.now += max(0.0, seconds)


class Deadline:
    def __init__(self, budget_seconds: float, *, clock: Clock = time.monotonic) -> None:
        self.budget_seconds = budget_seconds
        self._clock = clock
        self._expires_at = clock() + budget_seconds

    def remaining_ms(self) -> int:
        return max(0, int((self._expires_at - self._clock()) * 1000))

    @property
    def expired(self) -> bool:
        return self._clock() >= self._expires_at

    def check(self, phase: str | None = None) -> None:
        if self.expired:
            raise DeadlineExceeded(self.budget_seconds, phase)

    def clip(self, timeout_ms: int, phase: str | None = None) -> int:
        """Shrink a per-operation timeout so it never outlives the run."""
        self.check(phase)
        return max(1, min(int(timeout_ms), self.remaining_ms()))
