import pytest

from procsched.algorithms import run_policy
from procsched.errors import CapacityExceeded, InternalConsistencyError, ValidationError
from procsched.memory_sim import MemorySimulator
from procsched.models import ProcessRunState, ProcessSpec
from procsched.registry import DEFAULT_CAPACITY, ProcessRegistry


def test_ids_start_at_one_and_increase():
    registry = ProcessRegistry()
    specs = [registry.add_process(0, 1, 0), registry.add_process(4, 2, 1), registry.add_process(1, 3, 0)]
    assert [s.pid for s in specs] == [1, 2, 3]
    assert [s.pid for s in registry] == [1, 2, 3]
    assert registry.get(2) == ProcessSpec(pid=2, arrival_time=4, burst_time=2, priority=1)
    assert registry.get(9) is None


@pytest.mark.parametrize(
    "arrival, burst, priority",
    [(-1, 3, 0), (0, 0, 0), (0, -2, 0), (0, 3, -1), ("1", 3, 0), (0, 2.5, 0), (True, 3, 0)],
)
def test_invalid_input_is_rejected_without_side_effects(arrival, burst, priority):
    registry = ProcessRegistry()
    registry.add_process(0, 1, 0)
    with pytest.raises(ValidationError):
        registry.add_process(arrival, burst, priority)
    assert len(registry) == 1
    # The rejected call must not consume an id.
    assert registry.add_process(1, 1, 0).pid == 2


def test_capacity_exceeded():
    registry = ProcessRegistry()
    assert registry.capacity == DEFAULT_CAPACITY == 100
    for i in range(100):
        registry.add_process(i, 1, 0)
    assert registry.is_full
    with pytest.raises(CapacityExceeded):
        registry.add_process(0, 1, 0)
    assert len(registry) == 100


def test_custom_capacity():
    registry = ProcessRegistry(capacity=2)
    registry.add_process(0, 1, 0)
    registry.add_process(0, 1, 0)
    with pytest.raises(CapacityExceeded) as excinfo:
        registry.add_process(0, 1, 0)
    assert excinfo.value.capacity == 2
    with pytest.raises(ValidationError):
        ProcessRegistry(capacity=0)


def test_reset_restores_run_state():
    registry = ProcessRegistry()
    registry.add_process(0, 4, 0)
    registry.add_process(1, 2, 0)
    for state in registry.states:
        state.run_for(state.remaining_time)
        state.finish(10)
        state.waiting_time = 3
        state.turnaround_time = 7

    registry.reset()

    assert len(registry) == 2
    for state in registry.states:
        assert state.remaining_time == state.burst_time
        assert not state.completed
        assert state.completion_time is None
        assert state.waiting_time == 0
        assert state.turnaround_time == 0


def test_snapshot_returns_independent_copies():
    registry = ProcessRegistry()
    registry.add_process(0, 4, 0)
    first = registry.snapshot()
    first[0].run_for(2)
    assert registry.snapshot()[0].remaining_time == 4
    assert registry.states[0].remaining_time == 4


def test_run_state_refuses_double_completion():
    state = ProcessRunState.from_spec(ProcessSpec(pid=1, arrival_time=0, burst_time=2))
    with pytest.raises(InternalConsistencyError):
        state.finish(1)
    state.run_for(2)
    state.finish(2)
    with pytest.raises(InternalConsistencyError):
        state.finish(3)
    with pytest.raises(InternalConsistencyError):
        state.run_for(1)


class _Recorder:
    def __init__(self):
        self.created = []
        self.completed = []

    def on_process_created(self, spec):
        self.created.append(spec.pid)

    def on_process_completed(self, spec, now):
        self.completed.append((spec.pid, now))


def test_observers_see_creation_and_completion():
    recorder = _Recorder()
    registry = ProcessRegistry(observers=[recorder])
    registry.add_process(0, 5, 2)
    registry.add_process(1, 3, 1)
    registry.add_process(2, 8, 3)
    assert recorder.created == [1, 2, 3]

    run_policy("sjf", registry)
    assert recorder.completed == [(2, 4), (1, 8), (3, 16)]


def test_observer_without_hooks_is_ignored():
    registry = ProcessRegistry(observers=[object()])
    registry.add_process(0, 1, 0)
    run_policy("fcfs", registry)


def test_memory_simulation_allocates_and_frees_once():
    memory = MemorySimulator(base_address=0x1000)
    registry = ProcessRegistry()
    registry.add_observer(memory)
    registry.add_process(0, 5, 0)
    registry.add_process(0, 2, 0)

    assert memory.block_for(1).address == 0x1000
    assert memory.block_for(1).size == 50
    # 50 bytes rounded up to the 16-byte alignment.
    assert memory.block_for(2).address == 0x1000 + 64

    fcfs = run_policy("fcfs", registry)
    rr = run_policy("rr", registry, quantum=1)

    assert memory.allocated == {}
    assert len(memory.events) == 4
    assert memory.events[0].startswith("Allocated 50 bytes for PID 1")
    assert "Freeing memory for PID 1" in memory.events[2]
    # Decoration only: scheduling numbers are unaffected.
    assert fcfs.avg_waiting_time == 2.5
    assert rr.processes[2].completion_time == 4


def test_add_processes_is_all_or_nothing():
    recorder = _Recorder()
    registry = ProcessRegistry(capacity=3, observers=[recorder])
    with pytest.raises(ValidationError):
        registry.add_processes([(0, 1, 0), (1, 2, 0), (2, -1, 0)])
    with pytest.raises(CapacityExceeded):
        registry.add_processes([(0, 1, 0)] * 4)
    assert len(registry) == 0
    assert recorder.created == []

    specs = registry.add_processes([(0, 1, 0), (1, 2, 3)])
    assert [s.pid for s in specs] == [1, 2]
    assert recorder.created == [1, 2]
