from __future__ import annotations

from typing import TYPE_CHECKING, Dict, Iterable, List, Optional, Sequence

from .errors import InternalConsistencyError
from .models import Interval, ProcessMetrics, ProcessRunState, ScheduleResult, SystemMetrics

if TYPE_CHECKING:
    from .registry import ProcessRegistry


def compute_metrics(
    run_states: Iterable[ProcessRunState],
    registry: "ProcessRegistry",
    timeline: Optional[Sequence[Interval]] = None,
) -> Dict[int, ProcessMetrics]:
    """
    Fill in turnaround and waiting time for every run state and return the
    per-process metrics keyed by pid.

    Arrival and burst are taken from the registry's copy of the process, not
    from the run state, so a run can never skew its own numbers. When a
    timeline is given, start and response times are derived from the first
    interval of each process.
    """
    first_start: Dict[int, int] = {}
    for iv in timeline or ():
        first_start.setdefault(iv.pid, iv.start_time)

    metrics: Dict[int, ProcessMetrics] = {}
    for state in run_states:
        spec = registry.get(state.pid)
        if spec is None:
            raise InternalConsistencyError(f"P{state.pid} is not in the registry")
        if state.completion_time is None:
            raise InternalConsistencyError(f"P{state.pid} has no completion time; the run is incomplete")

        state.turnaround_time = state.completion_time - spec.arrival_time
        state.waiting_time = state.turnaround_time - spec.burst_time

        start_time = first_start.get(state.pid)
        metrics[state.pid] = ProcessMetrics(
            pid=spec.pid,
            arrival_time=spec.arrival_time,
            burst_time=spec.burst_time,
            priority=spec.priority,
            completion_time=state.completion_time,
            waiting_time=state.waiting_time,
            turnaround_time=state.turnaround_time,
            start_time=start_time,
            response_time=None if start_time is None else start_time - spec.arrival_time,
        )

    return metrics


def compute_system_metrics(result: ScheduleResult) -> SystemMetrics:
    """
    Compute throughput and CPU utilization given populated per-process metrics
    and timeline intervals.
    """
    processes = list(result.processes.values())
    if not processes:
        system = SystemMetrics(cpu_busy_time=0, makespan=0, throughput=0.0, cpu_utilization=0.0)
        result.system = system
        return system

    makespan = max(p.completion_time for p in processes)
    cpu_busy_time = sum(iv.duration for iv in result.timeline)

    throughput = len(processes) / makespan if makespan > 0 else 0.0
    cpu_utilization = cpu_busy_time / makespan if makespan > 0 else 0.0

    # A process counts as starved when it waited more than twice the average.
    avg_wait = sum(p.waiting_time for p in processes) / len(processes)
    starvation_count = sum(1 for p in processes if p.waiting_time > 2 * avg_wait)

    system = SystemMetrics(
        cpu_busy_time=cpu_busy_time,
        makespan=makespan,
        throughput=throughput,
        cpu_utilization=cpu_utilization,
        starvation_count=starvation_count,
    )
    result.system = system
    return system


def summarize_process_metrics(processes: List[ProcessMetrics]) -> dict:
    """
    Return averages of the key per-process metrics for quick comparison.
    """
    if not processes:
        return {"avg_waiting": 0.0, "avg_turnaround": 0.0, "avg_response": 0.0}

    n = len(processes)
    responses = [p.response_time for p in processes if p.response_time is not None]
    return {
        "avg_waiting": sum(p.waiting_time for p in processes) / n,
        "avg_turnaround": sum(p.turnaround_time for p in processes) / n,
        "avg_response": sum(responses) / len(responses) if responses else 0.0,
    }
