from __future__ import annotations

import csv
import json
from pathlib import Path
from typing import Iterable, List, Mapping, Optional, Tuple

from .models import ProcessSpec
from .registry import ProcessRegistry

Row = Tuple[int, int, int]


def load_workload(path: str | Path, registry: Optional[ProcessRegistry] = None) -> ProcessRegistry:
    """
    Load a workload from a JSON or CSV file into a registry.

    Rows are added in file order, so the registry assigns pids 1..n in that
    order; a ``pid`` column, if present, is ignored. The load is all or
    nothing: if any row is rejected the registry is left unchanged.
    """
    path = Path(path)
    suffix = path.suffix.lower()

    if suffix == ".json":
        rows = _load_json(path)
    elif suffix == ".csv":
        rows = _load_csv(path)
    else:
        raise ValueError(f"Unsupported workload format: {suffix} (use .json or .csv)")

    registry = registry if registry is not None else ProcessRegistry()
    registry.add_processes(rows)
    return registry


def dump_workload(processes: Iterable[ProcessSpec], path: str | Path) -> Path:
    """Write process definitions to a JSON workload file."""
    path = Path(path)
    data = [
        {
            "pid": p.pid,
            "arrival_time": p.arrival_time,
            "burst_time": p.burst_time,
            "priority": p.priority,
        }
        for p in processes
    ]
    with path.open("w", encoding="utf-8") as f:
        json.dump(data, f, indent=2)
    return path


def _load_json(path: Path) -> List[Row]:
    with path.open("r", encoding="utf-8") as f:
        raw = json.load(f)

    if not isinstance(raw, list):
        raise ValueError("JSON workload must be a list of process objects")

    return [_row_from_mapping(entry) for entry in raw]


def _load_csv(path: Path) -> List[Row]:
    rows: List[Row] = []
    with path.open("r", encoding="utf-8", newline="") as f:
        reader = csv.DictReader(f)
        for row in reader:
            rows.append(_row_from_mapping(row))
    return rows


def _cell(value):
    # CSV cells arrive as text; JSON values keep their native type so that
    # floats and booleans reach registry validation instead of being truncated.
    if isinstance(value, str):
        return int(value.strip())
    return value


def _row_from_mapping(mapping) -> Row:
    if not isinstance(mapping, Mapping):
        raise ValueError(f"Invalid process entry: {mapping!r}")

    try:
        arrival_time = _cell(mapping["arrival_time"])
        burst_time = _cell(mapping["burst_time"])
    except (KeyError, ValueError) as exc:
        raise ValueError(f"Invalid process entry: {mapping!r}") from exc

    priority_val = mapping.get("priority")
    try:
        priority = _cell(priority_val) if priority_val not in (None, "") else 0
    except ValueError as exc:
        raise ValueError(f"Invalid priority in process entry: {mapping!r}") from exc

    return arrival_time, burst_time, priority
