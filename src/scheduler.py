from __future__ import annotations

import itertools
import time
from collections import OrderedDict
from typing import Callable, Optional, Protocol

Callback = Callable[[], None]


class TickDriver(Protocol):
    def request(self, callback: Callback) -> int: ...

    def cancel(self, token: int) -> None: ...


class ManualDriver:
    """Runs scheduled ticks only when step() is called. Used by tests and offline runs."""

    def __init__(self) -> None:
        self._pending: "OrderedDict[int, Callback]" = OrderedDict()
        self._ids = itertools.count(1)
        self.ticks_run = 0

    def request(self, callback: Callback) -> int:
        token = next(self._ids)
        self._pending[token] = callback
        return token

    def cancel(self, token: int) -> None:
        self._pending.pop(token, None)

    @property
    def pending(self) -> int:
        return len(self._pending)

    def step(self) -> bool:
        if not self._pending:
            return False
        _, callback = self._pending.popitem(last=False)
        self.ticks_run += 1
        callback()
        return True

    def run(self, max_ticks: Optional[int] = None) -> int:
        n = 0
        while (max_ticks is None or n < max_ticks) and self.step():
            n += 1
        return n


class RealtimeDriver(ManualDriver):
    """
    Stand-in for a display refresh callback: at most one tick per
    1/refresh_hz seconds. A tick that overruns just delays the next one;
    nothing queues up behind it.
    """

    def __init__(self, refresh_hz: float = 60.0,
                 clock: Callable[[], float] = time.monotonic,
                 sleep: Callable[[float], None] = time.sleep) -> None:
        super().__init__()
        if refresh_hz <= 0:
            raise ValueError("refresh_hz must be positive")
        self.period = 1.0 / refresh_hz
        self._clock = clock
        self._sleep = sleep
        self._next_at: Optional[float] = None

    def step(self) -> bool:
        if not self.pending:
            return False
        now = self._clock()
        if self._next_at is not None and now < self._next_at:
            self._sleep(self._next_at - now)
            now = self._next_at
        self._next_at = now + self.period
        return super().step()
