from __future__ import annotations

import logging
from typing import Iterable, Iterator, List, Optional, Tuple

from .errors import CapacityExceeded, ValidationError
from .models import ProcessRunState, ProcessSpec

logger = logging.getLogger(__name__)

DEFAULT_CAPACITY = 100


def _require_int(name: str, value, minimum: int) -> int:
    # bool is an int subclass; True/False are never meaningful times.
    if isinstance(value, bool) or not isinstance(value, int):
        raise ValidationError(f"Invalid {name}: {value!r} (must be an integer)")
    if value < minimum:
        qualifier = "non-negative" if minimum == 0 else f">= {minimum}"
        raise ValidationError(f"Invalid {name}: {value} (must be {qualifier})")
    return value


def validate_process_fields(arrival_time, burst_time, priority) -> Tuple[int, int, int]:
    return (
        _require_int("arrival time", arrival_time, 0),
        _require_int("burst time", burst_time, 1),
        _require_int("priority", priority, 0),
    )


class ProcessRegistry:
    """
    Ordered table of the processes defined for a simulation.

    The registry owns the immutable ProcessSpec templates plus one canonical
    run-state per process. Policy runs never touch the canonical copies; they
    work on the fresh states returned by :meth:`snapshot`.

    Observers are plain objects that may define ``on_process_created(spec)``
    and ``on_process_completed(spec, now)``. They are informed of events and
    never influence scheduling.
    """

    def __init__(self, capacity: int = DEFAULT_CAPACITY, observers: Iterable[object] = ()) -> None:
        self._capacity = _require_int("capacity", capacity, 1)
        self._states: List[ProcessRunState] = []
        self._next_pid = 1
        self._observers: List[object] = list(observers)

    @property
    def capacity(self) -> int:
        return self._capacity

    @property
    def is_full(self) -> bool:
        return len(self._states) >= self._capacity

    def __len__(self) -> int:
        return len(self._states)

    def __iter__(self) -> Iterator[ProcessSpec]:
        return (state.spec for state in self._states)

    @property
    def processes(self) -> List[ProcessSpec]:
        return list(self)

    @property
    def states(self) -> List[ProcessRunState]:
        """Canonical run-state copies, in insertion order."""
        return list(self._states)

    def add_observer(self, observer: object) -> None:
        self._observers.append(observer)

    def add_process(self, arrival_time: int, burst_time: int, priority: int = 0) -> ProcessSpec:
        if self.is_full:
            raise CapacityExceeded(self._capacity)

        arrival_time, burst_time, priority = validate_process_fields(arrival_time, burst_time, priority)

        spec = ProcessSpec(
            pid=self._next_pid,
            arrival_time=arrival_time,
            burst_time=burst_time,
            priority=priority,
        )
        self._states.append(ProcessRunState.from_spec(spec))
        self._next_pid += 1

        logger.info(
            "Added P%d (arrival=%d, burst=%d, priority=%d)",
            spec.pid,
            spec.arrival_time,
            spec.burst_time,
            spec.priority,
        )
        self._notify("on_process_created", spec)
        return spec

    def add_processes(self, rows: Iterable[Tuple[int, int, int]]) -> List[ProcessSpec]:
        """
        Add several processes as one operation: either every row is added or,
        on the first invalid row or a capacity overflow, none is.
        """
        checked = [validate_process_fields(*row) for row in rows]
        if len(self._states) + len(checked) > self._capacity:
            raise CapacityExceeded(self._capacity)
        return [self.add_process(*row) for row in checked]

    def get(self, pid: int) -> Optional[ProcessSpec]:
        for state in self._states:
            if state.pid == pid:
                return state.spec
        return None

    def snapshot(self) -> List[ProcessRunState]:
        """
        Fresh run states (remaining = burst, not completed) in registry order.
        """
        return [ProcessRunState.from_spec(state.spec) for state in self._states]

    def reset(self) -> None:
        for state in self._states:
            state.reset()
        logger.debug("Reset run state of %d process(es)", len(self._states))

    def notify_completed(self, spec: ProcessSpec, now: int) -> None:
        self._notify("on_process_completed", spec, now)

    def _notify(self, event: str, *args) -> None:
        for observer in self._observers:
            handler = getattr(observer, event, None)
            if handler is not None:
                handler(*args)
