from __future__ import annotations

import argparse
import logging
import time
from pathlib import Path
from typing import Optional

from rich import box
from rich.console import Console
from rich.logging import RichHandler
from rich.markup import escape
from rich.table import Table

from .algorithms import Policy, run_policy
from .compare import ADVISORY_NOTES, ComparisonReport, compare_policies
from .errors import SchedulerError
from .gantt import build_rich_gantt, render_gantt
from .memory_sim import MemorySimulator
from .metrics import summarize_process_metrics
from .models import ScheduleResult
from .registry import DEFAULT_CAPACITY, ProcessRegistry
from .workload_io import dump_workload, load_workload

logger = logging.getLogger(__name__)

POLICY_CHOICES = [p.value for p in Policy]


def configure_logging(verbose: bool = False) -> None:
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.WARNING,
        format="%(message)s",
        datefmt="[%X]",
        handlers=[RichHandler(rich_tracebacks=True, show_path=False)],
        force=True,
    )


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="procsched",
        description="CPU process scheduling simulator (FCFS, preemptive SJF, preemptive Priority, RR).",
    )
    parser.add_argument(
        "--capacity",
        type=int,
        default=DEFAULT_CAPACITY,
        help=f"Maximum number of processes (default: {DEFAULT_CAPACITY}).",
    )
    parser.add_argument(
        "--memory-sim",
        action="store_true",
        help="Log simulated memory allocation and release for each process.",
    )
    parser.add_argument("--verbose", "-v", action="store_true", help="Enable debug logging.")

    subparsers = parser.add_subparsers(dest="command", required=True)

    run_parser = subparsers.add_parser("run", help="Run a scheduling policy on a workload file.")
    run_parser.add_argument(
        "--policy",
        "-p",
        required=True,
        help=f"Policy to use ({', '.join(POLICY_CHOICES)}).",
    )
    run_parser.add_argument(
        "--workload",
        "-w",
        required=True,
        help="Path to JSON or CSV workload file.",
    )
    run_parser.add_argument(
        "--quantum",
        "-q",
        type=int,
        default=None,
        help="Time quantum for round-robin (ignored by the other policies).",
    )
    run_parser.add_argument(
        "--step",
        action="store_true",
        help="Show a simple time-stepped simulation in the terminal.",
    )
    run_parser.add_argument(
        "--step-delay",
        type=float,
        default=0.3,
        help="Seconds to wait between steps when --step is used (default: 0.3).",
    )
    run_parser.add_argument(
        "--plain",
        action="store_true",
        help="Draw the Gantt chart as plain ASCII text.",
    )

    compare_parser = subparsers.add_parser(
        "compare",
        help="Run all four policies on the same workload and compare average metrics.",
    )
    compare_parser.add_argument(
        "--workload",
        "-w",
        required=True,
        help="Path to JSON or CSV workload file.",
    )
    compare_parser.add_argument(
        "--quantum",
        "-q",
        type=int,
        default=2,
        help="Time quantum used for round-robin (default: 2).",
    )

    menu_parser = subparsers.add_parser(
        "menu",
        help="Interactive menu to add processes and run policies.",
    )
    menu_parser.add_argument(
        "--workload",
        "-w",
        default=None,
        help="Optional workload file to preload into the menu.",
    )
    menu_parser.add_argument(
        "--quantum",
        "-q",
        type=int,
        default=2,
        help="Default quantum to prefill for round-robin (default: 2).",
    )

    return parser


def _new_registry(args: argparse.Namespace) -> ProcessRegistry:
    observers = [MemorySimulator()] if args.memory_sim else []
    return ProcessRegistry(capacity=args.capacity, observers=observers)


def _print_result(result: ScheduleResult, console: Console, plain: bool = False) -> None:
    console.print(f"[bold]Algorithm:[/bold] {result.algorithm}")
    if result.quantum is not None:
        console.print(f"[bold]Quantum:[/bold] {result.quantum}")

    console.print()

    headers = [
        "PID",
        "Arrival",
        "Burst",
        "Priority",
        "Completion",
        "Turnaround",
        "Waiting",
    ]

    proc_table = Table(title="Per-process metrics", box=box.SIMPLE_HEAVY)
    for h in headers:
        justify = "center" if h in {"PID", "Priority"} else "right"
        proc_table.add_column(h, justify=justify)

    for p in result.processes.values():
        proc_table.add_row(
            f"P{p.pid}",
            str(p.arrival_time),
            str(p.burst_time),
            str(p.priority),
            str(p.completion_time),
            str(p.turnaround_time),
            str(p.waiting_time),
        )

    console.print(proc_table)

    averages = summarize_process_metrics(list(result.processes.values()))
    summary = Table(box=box.SIMPLE_HEAVY, show_header=False)
    summary.add_column("Metric")
    summary.add_column("Value", justify="right")
    summary.add_row("Average waiting time", f"{result.avg_waiting_time:.2f}")
    summary.add_row("Average turnaround time", f"{result.avg_turnaround_time:.2f}")
    summary.add_row("Average response time", f"{averages['avg_response']:.2f}")
    if result.system:
        sys = result.system
        summary.add_row("Throughput (proc/time)", f"{sys.throughput:.3f}")
        summary.add_row("CPU utilization", f"{sys.cpu_utilization*100:.1f}%")
        summary.add_row("Starvation count", str(sys.starvation_count))
    console.print(summary)

    if plain:
        console.print(render_gantt(result.timeline), markup=False, highlight=False, soft_wrap=True)
        return

    panel, time_marks = build_rich_gantt(result.timeline)
    console.print(panel)
    if time_marks:
        console.print(time_marks)


def _print_comparison(report: ComparisonReport, console: Console, title: str = "Policy comparison") -> None:
    summary_table = Table(title=title, box=box.SIMPLE_HEAVY)
    summary_table.add_column("Policy")
    summary_table.add_column("Quantum", justify="right")
    summary_table.add_column("Avg waiting", justify="right")
    summary_table.add_column("Avg turnaround", justify="right")

    for row in report.rows:
        summary_table.add_row(
            row.algorithm,
            "" if row.quantum is None else str(row.quantum),
            f"{row.avg_waiting_time:.2f}",
            f"{row.avg_turnaround_time:.2f}",
        )

    console.print(summary_table)
    for note in ADVISORY_NOTES:
        console.print(f"[dim]{note}[/dim]")


def _animate_result(result: ScheduleResult, delay: float, console: Console) -> None:
    """
    Simple time-stepped textual simulation using the computed schedule.
    """
    timeline = sorted(result.timeline, key=lambda s: (s.start_time, s.end_time))
    if not timeline:
        console.print("[red]No execution to animate.[/red]")
        return

    makespan = max(s.end_time for s in timeline)
    console.print(f"[bold]Simulating {result.algorithm}[/bold] (duration {makespan} time units)")
    console.print("[dim]Press Ctrl+C to skip animation.[/dim]")

    for t in range(makespan):
        running = next((sl for sl in timeline if sl.start_time <= t < sl.end_time), None)
        if running is None:
            console.print(f"t={t:2d}: [dim]idle[/dim]")
        else:
            bar = f"[green]{'█' * (t - running.start_time + 1)}[/green]"
            console.print(f"t={t:2d}: P{running.pid} {bar}")
        time.sleep(delay)


def _prompt_int(prompt: str, default: Optional[int] = None) -> Optional[int]:
    raw = input(prompt).strip()
    if not raw:
        return default
    try:
        return int(raw)
    except ValueError:
        return None


def _menu_add_process(registry: ProcessRegistry, console: Console) -> None:
    console.print(f"\n[bold]Add new process (P{len(registry) + 1})[/bold]")
    arrival = _prompt_int("Arrival time: ")
    burst = _prompt_int("Burst time: ")
    priority = _prompt_int("Priority (lower number = higher priority): ")
    if arrival is None or burst is None or priority is None:
        console.print("[red]Invalid input. Please enter integers.[/red]")
        return
    spec = registry.add_process(arrival, burst, priority)
    console.print(f"[green]Process P{spec.pid} added.[/green]")


def _interactive_menu(registry: ProcessRegistry, default_quantum: int, console: Console) -> None:
    try:
        _menu_loop(registry, default_quantum, console)
    except EOFError:
        console.print("\nInput closed. Exiting simulator.")


def _menu_loop(registry: ProcessRegistry, default_quantum: int, console: Console) -> None:
    entries = [
        ("Add process", None),
        ("Run FCFS", Policy.FCFS),
        ("Run preemptive SJF", Policy.SJF),
        ("Run preemptive Priority", Policy.PRIORITY),
        ("Run Round Robin", Policy.ROUND_ROBIN),
        ("Compare all policies", None),
        ("Load workload file", None),
        ("Save workload file", None),
    ]

    while True:
        console.print("\n[bold cyan]Process Scheduling Simulator[/bold cyan] [dim](q to quit)[/dim]")
        console.print(f"[bold]Processes defined:[/bold] [green]{len(registry)}[/green]/{registry.capacity}")
        for idx, (label, _) in enumerate(entries, start=1):
            console.print(f"  [yellow]{idx}[/yellow]. [white]{label}[/white]")

        choice = input(f"Choice [1-{len(entries)} or q]: ").strip().lower()
        if choice in {"q", "quit", "exit"}:
            console.print("Exiting simulator. Goodbye!")
            return

        try:
            idx = int(choice) - 1
            if idx < 0:
                raise IndexError(idx)
            label, policy = entries[idx]
        except (ValueError, IndexError):
            console.print("[red]Invalid selection.[/red]")
            continue

        try:
            if label == "Add process":
                _menu_add_process(registry, console)
            elif policy is not None:
                quantum = None
                if policy is Policy.ROUND_ROBIN:
                    quantum = _prompt_int(f"Time quantum [{default_quantum}]: ", default_quantum)
                _print_result(run_policy(policy, registry, quantum=quantum), console)
            elif label == "Compare all policies":
                quantum = _prompt_int(f"Time quantum for RR [{default_quantum}]: ", default_quantum)
                _print_comparison(compare_policies(registry, quantum), console)
            elif label == "Load workload file":
                path = input("Workload path: ").strip()
                load_workload(path, registry)
                console.print(f"[green]{len(registry)} process(es) defined.[/green]")
            else:
                path = input("Save to path: ").strip()
                dump_workload(registry, path)
                console.print(f"[green]Saved {len(registry)} process(es) to {path}.[/green]")
        except (SchedulerError, ValueError, OSError) as exc:
            console.print(f"[red]Error: {escape(str(exc))}[/red]")


def main(argv: list[str] | None = None) -> int:
    parser = build_parser()
    args = parser.parse_args(argv)

    configure_logging(args.verbose)
    console = Console()

    try:
        registry = _new_registry(args)

        if args.command == "run":
            load_workload(Path(args.workload), registry)
            result = run_policy(args.policy, registry, quantum=args.quantum)
            if args.step:
                try:
                    _animate_result(result, delay=args.step_delay, console=console)
                except KeyboardInterrupt:
                    console.print("[yellow]Animation skipped.[/yellow]")
            _print_result(result, console, plain=args.plain)
            return 0

        if args.command == "compare":
            load_workload(Path(args.workload), registry)
            report = compare_policies(registry, args.quantum)
            _print_comparison(report, console, title=f"Policy comparison: {args.workload}")
            return 0

        if args.command == "menu":
            if args.workload:
                load_workload(Path(args.workload), registry)
            _interactive_menu(registry, args.quantum, console)
            return 0
    except (SchedulerError, ValueError, OSError) as exc:
        logger.debug("Command failed", exc_info=True)
        console.print(f"[red]Error: {escape(str(exc))}[/red]")
        return 1

    parser.error(f"Unknown command: {args.command}")
    return 1


if __name__ == "__main__":
    raise SystemExit(main())
