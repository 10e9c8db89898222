from __future__ import annotations

from typing import Dict, List, Sequence

from rich.panel import Panel
from rich.table import Table
from rich.text import Text

from .models import Interval


def coalesce(timeline: Sequence[Interval]) -> List[Interval]:
    """
    Merge back-to-back intervals of the same process for display. The
    scheduling result itself is never modified.
    """
    merged: List[Interval] = []
    for iv in sorted(timeline, key=lambda s: (s.start_time, s.end_time)):
        last = merged[-1] if merged else None
        if last is not None and last.pid == iv.pid and last.end_time == iv.start_time:
            last.end_time = iv.end_time
        else:
            merged.append(Interval(pid=iv.pid, start_time=iv.start_time, end_time=iv.end_time))
    return merged


def _label(pid: int) -> str:
    return f"P{pid}"


def _mark(value: int, width: int) -> str:
    # Always leave at least one space between consecutive marks.
    return f"{value:>{max(width, len(str(value)) + 1)}}"


def render_gantt(timeline: Sequence[Interval]) -> str:
    """
    Plain-text Gantt chart, two columns per time unit. Idle gaps are drawn
    with dots.
    """
    if not timeline:
        return "(no execution)"

    slices = coalesce(timeline)

    top = " "
    line = "|"
    time_marks = "0"
    last_time = 0

    for sl in slices:
        idle_gap = sl.start_time - last_time
        if idle_gap > 0:
            top += "-" * (idle_gap * 2) + " "
            line += "." * (idle_gap * 2) + "|"
            last_time = sl.start_time
            time_marks += _mark(last_time, idle_gap * 2 + 1)

        width = max(1, sl.duration) * 2
        top += "-" * width + " "
        line += _label(sl.pid)[:width].center(width) + "|"
        last_time = sl.end_time
        time_marks += _mark(last_time, width + 1)

    return "\n".join(
        [
            "Gantt Chart:",
            top,
            line,
            top,
            time_marks,
        ]
    )


def build_rich_gantt(timeline: Sequence[Interval]) -> tuple[Panel, str]:
    """
    Build a Rich Panel containing a colored Gantt chart and a string with time marks.
    """
    if not timeline:
        panel = Panel("No execution", title="Gantt Chart")
        return panel, ""

    slices = coalesce(timeline)

    colors = ["red", "green", "yellow", "blue", "magenta", "cyan"]
    pid_to_color: Dict[int, str] = {}

    def pid_color(pid: int) -> str:
        if pid not in pid_to_color:
            idx = len(pid_to_color) % len(colors)
            pid_to_color[pid] = colors[idx]
        return pid_to_color[pid]

    bars = Text()
    labels = Text()
    time_marks = "0"
    last_time = 0

    for sl in slices:
        idle_gap = sl.start_time - last_time
        if idle_gap > 0:
            bars.append(" " * idle_gap * 2)
            labels.append("." * idle_gap * 2, style="dim")
            last_time = sl.start_time
            time_marks += _mark(last_time, idle_gap * 2)

        width = max(1, sl.duration) * 2
        color = pid_color(sl.pid)

        bars.append(" " * width, style=f"on {color}")
        labels.append(_label(sl.pid)[:width].ljust(width), style="bold")

        last_time = sl.end_time
        time_marks += _mark(last_time, width)

    table = Table.grid(padding=(0, 0))
    table.add_row(bars)
    table.add_row(labels)

    panel = Panel.fit(table, title="Gantt Chart")
    return panel, time_marks
