from __future__ import annotations

from dataclasses import dataclass, field
from typing import Dict, List, Optional

from .errors import InternalConsistencyError


@dataclass(frozen=True)
class ProcessSpec:
    """Immutable process template as entered by the user."""

    pid: int
    arrival_time: int
    burst_time: int
    priority: int = 0


@dataclass
class ProcessRunState:
    """
    Mutable, per-run projection of a ProcessSpec.

    A fresh instance is built for every policy run so that no run can see
    another run's progress.
    """

    spec: ProcessSpec
    remaining_time: int
    completed: bool = False
    completion_time: Optional[int] = None
    waiting_time: int = 0
    turnaround_time: int = 0

    @classmethod
    def from_spec(cls, spec: ProcessSpec) -> "ProcessRunState":
        return cls(spec=spec, remaining_time=spec.burst_time)

    @property
    def pid(self) -> int:
        return self.spec.pid

    @property
    def arrival_time(self) -> int:
        return self.spec.arrival_time

    @property
    def burst_time(self) -> int:
        return self.spec.burst_time

    @property
    def priority(self) -> int:
        return self.spec.priority

    def run_for(self, units: int) -> None:
        if units <= 0 or units > self.remaining_time:
            raise InternalConsistencyError(
                f"P{self.pid}: cannot run {units} unit(s) with {self.remaining_time} remaining"
            )
        self.remaining_time -= units

    def finish(self, now: int) -> None:
        if self.completed or self.completion_time is not None:
            raise InternalConsistencyError(f"P{self.pid} completed twice")
        if self.remaining_time != 0:
            raise InternalConsistencyError(
                f"P{self.pid} marked complete with {self.remaining_time} unit(s) remaining"
            )
        self.completed = True
        self.completion_time = now

    def reset(self) -> None:
        self.remaining_time = self.spec.burst_time
        self.completed = False
        self.completion_time = None
        self.waiting_time = 0
        self.turnaround_time = 0


@dataclass
class Interval:
    """
    One contiguous slice of execution for a process in the Gantt chart.
    """

    pid: int
    start_time: int
    end_time: int

    @property
    def duration(self) -> int:
        return self.end_time - self.start_time


@dataclass
class ProcessMetrics:
    pid: int
    arrival_time: int
    burst_time: int
    priority: int
    completion_time: int
    waiting_time: int
    turnaround_time: int
    start_time: Optional[int] = None
    response_time: Optional[int] = None


@dataclass
class SystemMetrics:
    cpu_busy_time: int
    makespan: int
    throughput: float
    cpu_utilization: float
    starvation_count: int = 0


@dataclass
class ScheduleResult:
    policy: str
    algorithm: str
    quantum: Optional[int]
    timeline: List[Interval] = field(default_factory=list)
    processes: Dict[int, ProcessMetrics] = field(default_factory=dict)
    avg_waiting_time: float = 0.0
    avg_turnaround_time: float = 0.0
    system: Optional[SystemMetrics] = None

    def intervals_for(self, pid: int) -> List[Interval]:
        return [iv for iv in self.timeline if iv.pid == pid]
