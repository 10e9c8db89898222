"""
Simulation clock and the ready-set logic shared by the preemptive policies.
"""

from __future__ import annotations

import logging
from typing import Callable, List, Optional, Sequence

from .errors import InternalConsistencyError
from .models import Interval, ProcessRunState

logger = logging.getLogger(__name__)

CompletionHook = Callable[[ProcessRunState, int], None]


class SimulationClock:
    """Single integer clock. It only ever moves forward."""

    def __init__(self, start: int = 0) -> None:
        self._now = start

    @property
    def now(self) -> int:
        return self._now

    def tick(self, units: int = 1) -> int:
        if units <= 0:
            raise InternalConsistencyError(f"Clock must advance, got {units}")
        self._now += units
        return self._now

    def __repr__(self) -> str:
        return f"SimulationClock(now={self._now})"


def ready_set(states: Sequence[ProcessRunState], now: int) -> List[ProcessRunState]:
    """
    Processes that have arrived by ``now`` and are not completed, in the
    order they appear in ``states``.
    """
    return [s for s in states if s.arrival_time <= now and not s.completed]


def pick_first_min(
    candidates: Sequence[ProcessRunState], key: Callable[[ProcessRunState], int]
) -> Optional[ProcessRunState]:
    """
    Linear scan keeping the first candidate with a strictly smaller key, so the
    earliest entry wins among equal keys.
    """
    best: Optional[ProcessRunState] = None
    best_key = None
    for state in candidates:
        k = key(state)
        if best is None or k < best_key:
            best = state
            best_key = k
    return best


def run_preemptive(
    states: Sequence[ProcessRunState],
    key: Callable[[ProcessRunState], int],
    clock: Optional[SimulationClock] = None,
    on_complete: Optional[CompletionHook] = None,
) -> List[Interval]:
    """
    Per-tick decision loop.

    At every tick the ready process with the smallest ``key`` runs for one
    unit. An idle tick (nothing ready) records no interval. The interval
    currently open is extended while the same process keeps the CPU; a switch
    or a completion closes it.
    """
    clock = clock or SimulationClock()
    timeline: List[Interval] = []
    current: Optional[Interval] = None
    pending = sum(1 for s in states if not s.completed)

    while pending:
        chosen = pick_first_min(ready_set(states, clock.now), key)
        if chosen is None:
            clock.tick()
            continue

        if current is None or current.pid != chosen.pid or current.end_time != clock.now:
            current = Interval(pid=chosen.pid, start_time=clock.now, end_time=clock.now)
            timeline.append(current)

        chosen.run_for(1)
        clock.tick()
        current.end_time = clock.now

        if chosen.remaining_time == 0:
            chosen.finish(clock.now)
            pending -= 1
            current = None
            logger.debug("P%d completed at t=%d", chosen.pid, clock.now)
            if on_complete is not None:
                on_complete(chosen, clock.now)

    return timeline
