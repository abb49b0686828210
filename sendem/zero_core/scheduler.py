"""
Cadence Scheduler
=================

Single-threaded virtual clock that dispatches named tasks at fixed
intervals. Every dispatch runs to completion before the next one starts, so
two tasks never interleave their mutation passes.

Two kinds of schedule exist:

- Periodic: fires every `interval_ms`, never expires.
- Timer: one-shot countdown, removed when it fires.

While frozen the clock does not move at all; elapsed and remaining values
are preserved so that thawing resumes every cadence where it stopped.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Callable, Dict, List, Optional, Tuple

logger = logging.getLogger(__name__)


@dataclass
class Periodic:
    """Recurring schedule. Fires every `interval_ms` of unfrozen time."""
    name: str
    interval_ms: float
    elapsed_ms: float = 0.0

    @property
    def due_in(self) -> float:
        return max(0.0, self.interval_ms - self.elapsed_ms)


@dataclass
class Timer:
    """One-shot countdown. Fires when remaining reaches 0, then detaches."""
    name: str
    remaining_ms: float


class CadenceScheduler:
    """
    Virtual-time dispatcher for the engine's periodic work.

    Ties at the same instant resolve in registration order, periodics first,
    then timers in the order they were started.
    """

    def __init__(self):
        self._periodics: Dict[str, Periodic] = {}
        self._timers: Dict[str, Timer] = {}
        self._frozen: bool = False
        self._now_ms: float = 0.0

    @property
    def frozen(self) -> bool:
        return self._frozen

    @property
    def now_ms(self) -> float:
        """Total unfrozen virtual time consumed since the last clear."""
        return self._now_ms

    def add_periodic(self, name: str, interval_ms: float) -> Periodic:
        if interval_ms <= 0:
            raise ValueError(f"Interval for {name!r} must be positive, got {interval_ms}")
        periodic = Periodic(name=name, interval_ms=float(interval_ms))
        self._periodics[name] = periodic
        return periodic

    def set_interval(self, name: str, interval_ms: float) -> None:
        """Change a periodic's interval, keeping the time already elapsed."""
        if interval_ms <= 0:
            raise ValueError(f"Interval for {name!r} must be positive, got {interval_ms}")
        self._periodics[name].interval_ms = float(interval_ms)

    def restart(self, name: str) -> None:
        """Restart a periodic's phase so its next fire is a full interval away."""
        self._periodics[name].elapsed_ms = 0.0

    def get_periodic(self, name: str) -> Optional[Periodic]:
        return self._periodics.get(name)

    def start_timer(self, name: str, delay_ms: float) -> Timer:
        """Start (or restart) a one-shot timer."""
        self._timers.pop(name, None)
        timer = Timer(name=name, remaining_ms=max(0.0, float(delay_ms)))
        self._timers[name] = timer
        return timer

    def cancel_timer(self, name: str) -> bool:
        """Cancel a pending timer. Returns False if none was pending."""
        return self._timers.pop(name, None) is not None

    def has_timer(self, name: str) -> bool:
        return name in self._timers

    def timer_remaining(self, name: str) -> Optional[float]:
        timer = self._timers.get(name)
        return timer.remaining_ms if timer is not None else None

    def freeze(self) -> None:
        self._frozen = True

    def thaw(self) -> None:
        self._frozen = False

    def clear(self) -> None:
        """Drop every schedule. Used on restart and game over."""
        self._periodics.clear()
        self._timers.clear()
        self._frozen = False
        self._now_ms = 0.0

    def _next_due(self) -> Optional[Tuple[float, int, int, str]]:
        """(wait_ms, kind_rank, order, name) of the earliest schedule."""
        candidates: List[Tuple[float, int, int, str]] = []
        for order, periodic in enumerate(self._periodics.values()):
            candidates.append((periodic.due_in, 0, order, periodic.name))
        for order, timer in enumerate(self._timers.values()):
            candidates.append((timer.remaining_ms, 1, order, timer.name))
        if not candidates:
            return None
        return min(candidates)

    def _consume(self, elapsed_ms: float) -> None:
        if elapsed_ms <= 0:
            return
        self._now_ms += elapsed_ms
        for periodic in self._periodics.values():
            periodic.elapsed_ms += elapsed_ms
        for timer in self._timers.values():
            timer.remaining_ms = max(0.0, timer.remaining_ms - elapsed_ms)

    def advance(self, elapsed_ms: float, dispatch: Callable[[str], None]) -> int:
        """
        Move the clock forward, dispatching every schedule that comes due.

        Dispatch happens one schedule at a time, in time order. If a dispatch
        freezes the scheduler, the rest of `elapsed_ms` is discarded; if it
        clears the scheduler, nothing further fires.

        Args:
            elapsed_ms: Virtual time to consume.
            dispatch: Called with the schedule name each time one fires.

        Returns:
            Number of dispatches performed.
        """
        budget = float(elapsed_ms)
        fired = 0

        while budget >= 0 and not self._frozen:
            nxt = self._next_due()
            if nxt is None or nxt[0] > budget:
                self._consume(budget)
                break

            wait, kind_rank, _, name = nxt
            self._consume(wait)
            budget -= wait

            if kind_rank == 1:
                del self._timers[name]
            else:
                self._periodics[name].elapsed_ms = 0.0

            logger.debug("dispatch %s at %.1fms", name, self._now_ms)
            dispatch(name)
            fired += 1

        return fired
