from __future__ import annotations

import enum
import logging
from collections import deque
from typing import Callable, Deque, Dict, List, Optional, Set

from .clock import SimulationClock, ready_set, run_preemptive
from .errors import EmptyRegistry, InternalConsistencyError, ValidationError
from .metrics import compute_metrics, compute_system_metrics, summarize_process_metrics
from .models import Interval, ProcessRunState, ScheduleResult
from .registry import ProcessRegistry

logger = logging.getLogger(__name__)


class Policy(enum.Enum):
    FCFS = "fcfs"
    SJF = "sjf"
    PRIORITY = "priority"
    ROUND_ROBIN = "rr"

    @property
    def display_name(self) -> str:
        return _DISPLAY_NAMES[self]

    @classmethod
    def parse(cls, name: "str | Policy") -> "Policy":
        if isinstance(name, Policy):
            return name
        key = str(name).strip().lower().replace("-", "_")
        if key in ("round_robin", "roundrobin"):
            key = "rr"
        try:
            return cls(key)
        except ValueError:
            known = ", ".join(p.value for p in cls)
            raise ValidationError(f"Unknown policy '{name}' (choose from {known})") from None


_DISPLAY_NAMES = {
    Policy.FCFS: "First-Come, First-Served (FCFS)",
    Policy.SJF: "Preemptive Shortest Job First (SJF)",
    Policy.PRIORITY: "Preemptive Priority Scheduling",
    Policy.ROUND_ROBIN: "Round Robin (RR)",
}


def validate_quantum(quantum: Optional[int]) -> int:
    if isinstance(quantum, bool) or not isinstance(quantum, int) or quantum <= 0:
        raise ValidationError(f"Round Robin requires a positive integer quantum, got {quantum!r}")
    return quantum


def _snapshot(registry: ProcessRegistry) -> List[ProcessRunState]:
    if len(registry) == 0:
        raise EmptyRegistry()
    return registry.snapshot()


def _completion_hook(registry: ProcessRegistry) -> Callable[[ProcessRunState, int], None]:
    def hook(state: ProcessRunState, now: int) -> None:
        registry.notify_completed(state.spec, now)

    return hook


def _finalize(
    policy: Policy,
    registry: ProcessRegistry,
    states: List[ProcessRunState],
    timeline: List[Interval],
    quantum: Optional[int] = None,
) -> ScheduleResult:
    unfinished = [s.pid for s in states if not s.completed]
    if unfinished:
        raise InternalConsistencyError(f"{policy.display_name}: processes left incomplete: {unfinished}")

    processes = compute_metrics(states, registry, timeline)
    # Report in pid order regardless of execution order.
    processes = {pid: processes[pid] for pid in sorted(processes)}
    summary = summarize_process_metrics(list(processes.values()))

    result = ScheduleResult(
        policy=policy.value,
        algorithm=policy.display_name,
        quantum=quantum,
        timeline=timeline,
        processes=processes,
        avg_waiting_time=summary["avg_waiting"],
        avg_turnaround_time=summary["avg_turnaround"],
    )
    compute_system_metrics(result)
    logger.debug(
        "%s: %d interval(s), avg waiting %.2f, avg turnaround %.2f",
        policy.display_name,
        len(timeline),
        result.avg_waiting_time,
        result.avg_turnaround_time,
    )
    return result


def schedule_fcfs(registry: ProcessRegistry, quantum: Optional[int] = None) -> ScheduleResult:
    """
    First-Come First-Serve (non-preemptive) scheduling.

    Processes are taken in arrival order; ``sorted`` is stable, so equal
    arrivals keep their registry order. Each process contributes exactly one
    interval.
    """
    states = _snapshot(registry)
    on_complete = _completion_hook(registry)
    clock = SimulationClock()
    timeline: List[Interval] = []

    for state in sorted(states, key=lambda s: s.arrival_time):
        start_time = max(clock.now, state.arrival_time)
        if start_time > clock.now:
            clock.tick(start_time - clock.now)

        state.run_for(state.burst_time)
        clock.tick(state.burst_time)
        timeline.append(Interval(pid=state.pid, start_time=start_time, end_time=clock.now))

        state.finish(clock.now)
        on_complete(state, clock.now)

    return _finalize(Policy.FCFS, registry, states, timeline)


def schedule_sjf(registry: ProcessRegistry, quantum: Optional[int] = None) -> ScheduleResult:
    """
    Shortest Job First, preemptive (shortest remaining time first).

    Re-evaluated every time unit. Among ready processes with equal remaining
    time the one entered first in the registry wins.
    """
    states = _snapshot(registry)
    timeline = run_preemptive(
        states,
        key=lambda s: s.remaining_time,
        on_complete=_completion_hook(registry),
    )
    return _finalize(Policy.SJF, registry, states, timeline)


def schedule_priority(registry: ProcessRegistry, quantum: Optional[int] = None) -> ScheduleResult:
    """
    Priority scheduling, preemptive.

    Lower numeric priority value means higher priority; ties go to the process
    entered first. There is no aging, so a low-priority process may starve
    while more urgent work keeps arriving.
    """
    states = _snapshot(registry)
    timeline = run_preemptive(
        states,
        key=lambda s: s.priority,
        on_complete=_completion_hook(registry),
    )
    return _finalize(Policy.PRIORITY, registry, states, timeline)


def schedule_rr(registry: ProcessRegistry, quantum: Optional[int] = None) -> ScheduleResult:
    """
    Round Robin scheduling with a fixed time quantum.

    Processes that arrive while a slice runs join the queue ahead of the
    process whose slice just expired.
    """
    quantum = validate_quantum(quantum)
    states = _snapshot(registry)
    on_complete = _completion_hook(registry)

    # Admission order only; the ready queue itself is FIFO.
    by_arrival = sorted(states, key=lambda s: s.arrival_time)

    clock = SimulationClock()
    timeline: List[Interval] = []
    ready: Deque[ProcessRunState] = deque()
    queued: Set[int] = set()
    pending = len(states)

    def enqueue_new_arrivals(running: Optional[ProcessRunState] = None) -> None:
        for state in ready_set(by_arrival, clock.now):
            if state.pid not in queued and state is not running:
                ready.append(state)
                queued.add(state.pid)

    while pending:
        enqueue_new_arrivals()

        if not ready:
            clock.tick()
            continue

        state = ready.popleft()
        queued.discard(state.pid)

        run_time = min(state.remaining_time, quantum)
        start_time = clock.now
        state.run_for(run_time)
        clock.tick(run_time)
        timeline.append(Interval(pid=state.pid, start_time=start_time, end_time=clock.now))

        enqueue_new_arrivals(running=state)

        if state.remaining_time == 0:
            state.finish(clock.now)
            pending -= 1
            on_complete(state, clock.now)
        else:
            ready.append(state)
            queued.add(state.pid)

    return _finalize(Policy.ROUND_ROBIN, registry, states, timeline, quantum=quantum)


ALGORITHMS: Dict[Policy, Callable[..., ScheduleResult]] = {
    Policy.FCFS: schedule_fcfs,
    Policy.SJF: schedule_sjf,
    Policy.PRIORITY: schedule_priority,
    Policy.ROUND_ROBIN: schedule_rr,
}


def run_policy(
    kind: "str | Policy", registry: ProcessRegistry, quantum: Optional[int] = None
) -> ScheduleResult:
    """
    Dispatch to the requested policy. The quantum is only used by Round Robin.
    """
    policy = Policy.parse(kind)
    func = ALGORITHMS[policy]
    return func(registry, quantum=quantum)
