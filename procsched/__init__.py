"""
Process scheduling simulator.

Computes execution order, Gantt timelines and waiting / turnaround metrics
for FCFS, preemptive SJF, preemptive Priority and Round Robin scheduling.
"""

from .algorithms import Policy, run_policy
from .compare import compare_policies
from .errors import (
    CapacityExceeded,
    EmptyRegistry,
    InternalConsistencyError,
    SchedulerError,
    ValidationError,
)
from .registry import ProcessRegistry

__all__ = [
    "CapacityExceeded",
    "EmptyRegistry",
    "InternalConsistencyError",
    "Policy",
    "ProcessRegistry",
    "SchedulerError",
    "ValidationError",
    "compare_policies",
    "run_policy",
]
