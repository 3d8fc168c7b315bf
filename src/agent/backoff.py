"""Linear reconnect backoff.

The n-th consecutive failure (0-based) waits n seconds before the next
attempt; any success resets the counter. An optional cap bounds the delay
without changing the linear shape below it.
"""

from __future__ import annotations

import time
from dataclasses import dataclass
from typing import Callable

import structlog


@dataclass(frozen=True)
class BackoffState:
    attempt: int = 0


def on_failure(state: BackoffState, cap: float | None = None) -> tuple[float, BackoffState]:
    """Return ``(delay, next_state)`` for a failed round trip."""
    delay = float(state.attempt)
    if cap is not None:
        delay = min(delay, cap)
    return delay, BackoffState(state.attempt + 1)


def on_success(state: BackoffState) -> BackoffState:
    return BackoffState(0)


class Backoff:
    """Stateful wrapper the control loop holds for one generation."""

    def __init__(
        self,
        *,
        cap: float | None = None,
        sleep: Callable[[float], None] = time.sleep,
    ) -> None:
        self.state = BackoffState()
        self._cap = cap
        self._sleep = sleep
        self._log = structlog.get_logger("backoff")

    @property
    def attempt(self) -> int:
        return self.state.attempt

    def failed(self, error: object = None) -> float:
        """Wait out the current delay and advance the counter; returns the delay."""
        delay, self.state = on_failure(self.state, self._cap)
        self._log.warning(
            "coordinator_offline",
            wait_seconds=delay,
            attempt=self.state.attempt,
            error=str(error) if error is not None else None,
        )
        self._sleep(delay)
        return delay

    def succeeded(self) -> None:
        if self.state.attempt:
            self._log.info("coordinator_back", after_failures=self.state.attempt)
        self.state = on_success(self.state)
