import pytest

from procsched.clock import SimulationClock, pick_first_min, ready_set, run_preemptive
from procsched.errors import InternalConsistencyError
from procsched.metrics import compute_metrics, summarize_process_metrics
from procsched.models import Interval, ProcessRunState, ProcessSpec
from procsched.registry import ProcessRegistry


def _registry():
    registry = ProcessRegistry()
    registry.add_process(0, 5, 2)
    registry.add_process(1, 3, 1)
    return registry


def test_compute_metrics_uses_registry_times():
    registry = _registry()
    states = registry.snapshot()
    for state, completion in zip(states, (8, 4)):
        state.run_for(state.remaining_time)
        state.finish(completion)

    timeline = [Interval(1, 0, 1), Interval(2, 1, 4), Interval(1, 4, 8)]
    metrics = compute_metrics(states, registry, timeline)

    assert metrics[1].turnaround_time == 8
    assert metrics[1].waiting_time == 3
    assert metrics[2].turnaround_time == 3
    assert metrics[2].waiting_time == 0
    assert metrics[2].start_time == 1
    assert metrics[2].response_time == 0
    # Run states carry the derived values as well.
    assert states[0].waiting_time == 3


def test_compute_metrics_rejects_incomplete_run():
    registry = _registry()
    states = registry.snapshot()
    with pytest.raises(InternalConsistencyError):
        compute_metrics(states, registry)


def test_compute_metrics_rejects_unknown_process():
    registry = _registry()
    stray = ProcessRunState.from_spec(ProcessSpec(pid=42, arrival_time=0, burst_time=1))
    stray.run_for(1)
    stray.finish(1)
    with pytest.raises(InternalConsistencyError):
        compute_metrics([stray], registry)


def test_summarize_empty():
    assert summarize_process_metrics([]) == {"avg_waiting": 0.0, "avg_turnaround": 0.0, "avg_response": 0.0}


def test_clock_only_moves_forward():
    clock = SimulationClock()
    assert clock.now == 0
    assert clock.tick() == 1
    assert clock.tick(4) == 5
    with pytest.raises(InternalConsistencyError):
        clock.tick(0)


def test_ready_set_and_first_min_scan():
    states = _registry().snapshot()
    assert ready_set(states, 0) == [states[0]]
    assert ready_set(states, 1) == states
    states[0].remaining_time = 3
    assert pick_first_min(states, key=lambda s: s.remaining_time) is states[0]
    assert pick_first_min([], key=lambda s: s.remaining_time) is None


def test_run_preemptive_extends_open_interval_and_closes_on_completion():
    states = _registry().snapshot()
    completed = []
    timeline = run_preemptive(
        states,
        key=lambda s: s.priority,
        on_complete=lambda state, now: completed.append((state.pid, now)),
    )
    assert [(iv.pid, iv.start_time, iv.end_time) for iv in timeline] == [(1, 0, 1), (2, 1, 4), (1, 4, 8)]
    assert completed == [(2, 4), (1, 8)]
    assert all(s.remaining_time == 0 and s.completed for s in states)
