from __future__ import annotations

import csv
import json
import logging
from pathlib import Path
from typing import Iterable, List, Mapping, Optional, Sequence

from .errors import WorkloadFormatError
from .models import Process

logger = logging.getLogger(__name__)

FIELDS = ("id", "burst_duration", "arrival_time", "priority")


def load_workload(path: str | Path) -> List[Process]:
    """
    Load a workload file into a list of Process objects.

    `.json` files hold a list of objects; anything else is read as headerless
    CSV with `id, burst_duration, arrival_time[, priority]` per line.
    Undecodable bytes raise WorkloadFormatError; OSError from opening or
    reading the file propagates unchanged.
    """
    path = Path(path)

    try:
        if path.suffix.lower() == ".json":
            processes = _load_json(path)
        else:
            with path.open("r", encoding="utf-8", newline="") as f:
                processes = parse_workload(f)
    except UnicodeDecodeError as exc:
        raise WorkloadFormatError(f"not valid UTF-8 text ({exc.reason} at byte {exc.start})") from exc

    logger.info("Loaded %d process(es) from %s", len(processes), path)
    return processes


def parse_workload(lines: Iterable[str]) -> List[Process]:
    """
    Parse headerless CSV records. Blank lines are skipped and whitespace
    around fields is ignored. The first bad record aborts the whole parse.
    """
    processes: List[Process] = []
    first_seen: dict[int, int] = {}
    reader = csv.reader(lines)
    for row in reader:
        line = reader.line_num
        if not row or all(not cell.strip() for cell in row):
            continue
        process = _process_from_row(row, line)
        if process.pid in first_seen:
            raise WorkloadFormatError(
                f"duplicate process id {process.pid} (first seen on line {first_seen[process.pid]})",
                line,
            )
        first_seen[process.pid] = line
        processes.append(process)

    return processes


def _process_from_row(row: Sequence[str], line: Optional[int]) -> Process:
    if len(row) not in (3, 4):
        raise WorkloadFormatError(f"expected 3 or 4 fields, got {len(row)}", line)

    values = [_parse_int(cell, name, line) for cell, name in zip(row, FIELDS)]
    return _build_process(*values, line=line)


def _parse_int(raw: str, name: str, line: Optional[int]) -> int:
    try:
        return int(raw.strip())
    except ValueError as exc:
        raise WorkloadFormatError(f"{name} {raw.strip()!r} is not an integer", line) from exc


def _build_process(pid: int, burst: int, arrival: int, priority: int = 0, line: Optional[int] = None) -> Process:
    if burst <= 0:
        raise WorkloadFormatError(f"burst_duration must be positive, got {burst}", line)
    if arrival < 0:
        raise WorkloadFormatError(f"arrival_time must not be negative, got {arrival}", line)
    return Process(pid=pid, burst_duration=burst, arrival_time=arrival, priority=priority)


def _load_json(path: Path) -> List[Process]:
    with path.open("r", encoding="utf-8") as f:
        try:
            raw = json.load(f)
        except json.JSONDecodeError as exc:
            raise WorkloadFormatError(f"invalid JSON: {exc.msg}", exc.lineno) from exc

    if not isinstance(raw, list):
        raise WorkloadFormatError("JSON workload must be a list of process objects")

    processes = [_process_from_mapping(entry) for entry in raw]
    check_workload(processes)
    return processes


def _process_from_mapping(mapping: Mapping) -> Process:
    if not isinstance(mapping, Mapping):
        raise WorkloadFormatError(f"Invalid process entry: {mapping!r}")

    try:
        values = [mapping[name] for name in FIELDS[:3]]
    except KeyError as exc:
        raise WorkloadFormatError(f"Invalid process entry {mapping!r}: missing {exc.args[0]}") from exc

    priority_val = mapping.get("priority")
    if priority_val is not None:
        values.append(priority_val)

    for value, name in zip(values, FIELDS):
        # bool is an int subclass but never a valid field.
        if isinstance(value, bool) or not isinstance(value, int):
            raise WorkloadFormatError(f"{name} {value!r} is not an integer")

    return _build_process(*values)


def check_workload(processes: Sequence[Process]) -> None:
    """
    Reject workloads whose process ids are not unique.
    """
    seen: set[int] = set()
    for p in processes:
        if p.pid in seen:
            raise WorkloadFormatError(f"duplicate process id {p.pid}")
        seen.add(p.pid)
