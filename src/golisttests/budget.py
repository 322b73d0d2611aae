from __future__ import annotations

from dataclasses import dataclass, field
from typing import Protocol
import threading
import time

from golisttests.exceptions import DeadlineExpired, FileQuotaExhausted
from golisttests.invariants import never


class ExecutionBudget(Protocol):
    def tick(self) -> None:
        """Account for one visited file; raise BudgetExceeded when spent."""


@dataclass(frozen=True)
class MonotonicClock:
    """Default wall-clock implementation used when no clock is injected."""

    def get_mark(self) -> int:
        return time.monotonic_ns()


_SYSTEM_CLOCK = MonotonicClock()


@dataclass(frozen=True)
class Deadline:
    deadline_ns: int
    timeout_ms: int = 0
    clock: MonotonicClock = _SYSTEM_CLOCK

    @classmethod
    def from_timeout_ms(
        cls, milliseconds: int, *, clock: MonotonicClock = _SYSTEM_CLOCK
    ) -> "Deadline":
        value = int(milliseconds)
        if value < 0:
            never("invalid timeout milliseconds", milliseconds=milliseconds)
        return cls(
            deadline_ns=clock.get_mark() + value * 1_000_000,
            timeout_ms=value,
            clock=clock,
        )

    def expired(self) -> bool:
        return self.clock.get_mark() >= self.deadline_ns


@dataclass
class FileQuota:
    """Deterministic file counter; a limit of N admits exactly N files."""

    limit: int
    current: int = 0

    def __post_init__(self) -> None:
        if int(self.limit) <= 0:
            never("invalid file quota limit", limit=self.limit)
        self.limit = int(self.limit)
        self.current = int(self.current)
        if self.current < 0:
            never("invalid file quota current", current=self.current)

    @property
    def remaining(self) -> int:
        return self.limit - self.current

    def consume(self) -> None:
        if self.current >= self.limit:
            raise FileQuotaExhausted(
                f"number of files exceeded limit ({self.limit})"
            )
        self.current += 1


@dataclass(frozen=True)
class UnlimitedBudget:
    def tick(self) -> None:
        return


@dataclass
class LimitedBudget:
    quota: FileQuota
    deadline: Deadline
    _lock: threading.Lock = field(default_factory=threading.Lock, repr=False)

    @classmethod
    def from_limits(cls, max_files: int, max_execution_ms: int) -> "LimitedBudget":
        return cls(
            quota=FileQuota(limit=max_files),
            deadline=Deadline.from_timeout_ms(max_execution_ms),
        )

    def tick(self) -> None:
        with self._lock:
            if self.quota.remaining <= 0:
                raise FileQuotaExhausted(
                    f"number of files exceeded limit ({self.quota.limit})"
                )
            if self.deadline.expired():
                raise DeadlineExpired(
                    f"execution time exceeded limit ({self.deadline.timeout_ms}ms)"
                )
            self.quota.consume()
