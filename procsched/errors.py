from __future__ import annotations


class SchedulerError(Exception):
    """Base class for every error raised by the scheduling engine."""


class ValidationError(SchedulerError, ValueError):
    """Bad arrival / burst / priority / quantum input. The operation is rejected."""


class CapacityExceeded(SchedulerError):
    """The process registry is full."""

    def __init__(self, capacity: int) -> None:
        super().__init__(f"Maximum process limit reached ({capacity})")
        self.capacity = capacity


class EmptyRegistry(SchedulerError):
    """A policy was invoked with no processes to schedule."""

    def __init__(self, message: str = "No processes to schedule. Add processes first.") -> None:
        super().__init__(message)


class InternalConsistencyError(SchedulerError, RuntimeError):
    """
    A run finished in a state that correct clock advancement cannot produce,
    e.g. a process without a completion time.
    """
