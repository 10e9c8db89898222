from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Dict, List, Optional

from .algorithms import Policy, run_policy, validate_quantum
from .errors import EmptyRegistry
from .models import ScheduleResult
from .registry import ProcessRegistry

logger = logging.getLogger(__name__)

ADVISORY_NOTES = (
    "Compare the average waiting time of each policy: the lowest is generally "
    "the most efficient for this workload.",
    "For throughput-oriented systems SJF is often optimal.",
    "For interactive systems Round Robin gives better response times.",
)


@dataclass
class ComparisonRow:
    policy: Policy
    algorithm: str
    quantum: Optional[int]
    avg_waiting_time: float
    avg_turnaround_time: float


@dataclass
class ComparisonReport:
    quantum: int
    rows: List[ComparisonRow] = field(default_factory=list)
    results: Dict[Policy, ScheduleResult] = field(default_factory=dict)

    def avg_waiting_by_policy(self) -> Dict[Policy, float]:
        return {row.policy: row.avg_waiting_time for row in self.rows}


def compare_policies(registry: ProcessRegistry, quantum: int) -> ComparisonReport:
    """
    Run every policy against the same registry and collect their averages.

    Each run takes its own snapshot of the registry, so the runs are
    independent of each other and of their order. No winner is chosen here.
    """
    if len(registry) == 0:
        raise EmptyRegistry("No processes to compare. Add processes first.")
    # Reject a bad quantum before any policy runs and notifies observers.
    validate_quantum(quantum)

    report = ComparisonReport(quantum=quantum)
    for policy in Policy:
        q = quantum if policy is Policy.ROUND_ROBIN else None
        result = run_policy(policy, registry, quantum=q)
        report.results[policy] = result
        report.rows.append(
            ComparisonRow(
                policy=policy,
                algorithm=result.algorithm,
                quantum=result.quantum,
                avg_waiting_time=result.avg_waiting_time,
                avg_turnaround_time=result.avg_turnaround_time,
            )
        )
        logger.debug("%s: avg waiting %.2f", result.algorithm, result.avg_waiting_time)

    return report
