from __future__ import annotations

from typing import Dict, Iterator, List, Optional, Sequence, Tuple

from rich import box
from rich.panel import Panel
from rich.table import Table
from rich.text import Text

from .metrics import comparison_rows
from .models import ScheduleResult, TimelineSlice

UNDEFINED = "undefined"
COLORS = ["red", "green", "yellow", "blue", "magenta", "cyan"]


def _segments(slices: Sequence[TimelineSlice]) -> Iterator[Tuple[Optional[int], int]]:
    """
    Walk a timeline in start order as (pid, width) pairs. Idle stretches
    come out with pid None.
    """
    last_time = 0
    for sl in sorted(slices, key=lambda s: (s.start, s.stop)):
        if sl.start > last_time:
            yield None, sl.start - last_time
        yield sl.pid, sl.duration
        last_time = sl.stop


def _time_marks(slices: Sequence[TimelineSlice]) -> str:
    # Every mark after the first gets a leading space so wide times stay apart.
    marks = "0"
    time = 0
    for _, width in _segments(slices):
        time += width
        marks += f" {time:>2}"
    return marks


def _label(pid: int, width: int) -> str:
    return str(pid)[:width].ljust(width)


def render_gantt(slices: List[TimelineSlice]) -> str:
    """
    Plain-text Gantt chart, one character per time unit. Idle time is drawn
    with dots.
    """
    if not slices:
        return "(no execution)"

    line = "|"
    labels = " "
    for pid, width in _segments(slices):
        if pid is None:
            line += "." * width
            labels += " " * width
        else:
            line += "=" * width
            labels += _label(pid, width)
    line += "|"

    return "\n".join(["Gantt schedule", line, labels, _time_marks(slices)])


def build_rich_gantt(slices: List[TimelineSlice]) -> tuple[Panel, str]:
    """
    Colored Gantt panel plus the matching time-mark line.
    """
    if not slices:
        return Panel("No execution", title="Gantt schedule"), ""

    pid_to_color: Dict[int, str] = {}
    bars = Text()
    labels = Text()

    for pid, width in _segments(slices):
        if pid is None:
            bars.append(" " * width)
            labels.append(" " * width)
            continue
        color = pid_to_color.setdefault(pid, COLORS[len(pid_to_color) % len(COLORS)])
        bars.append(" " * width, style=f"on {color}")
        labels.append(_label(pid, width), style="bold")

    grid = Table.grid(padding=(0, 0))
    grid.add_row(bars)
    grid.add_row(labels)

    return Panel.fit(grid, title="Gantt schedule"), _time_marks(slices)


def _fmt(value: Optional[float], spec: str = ".2f", suffix: str = "") -> str:
    return UNDEFINED if value is None else f"{value:{spec}}{suffix}"


def build_schedule_table(result: ScheduleResult) -> Table:
    """
    One row per process in completion order, with averages and throughput in
    the footer.
    """
    agg = result.aggregate
    avg_wait = None if agg is None else agg.avg_wait
    avg_turnaround = None if agg is None else agg.avg_turnaround
    throughput = None if agg is None else agg.throughput

    table = Table(title="Schedule table", box=box.SIMPLE_HEAVY, show_footer=True)
    table.add_column("ID", justify="center")
    table.add_column("Priority", justify="center")
    table.add_column("Burst", justify="right")
    table.add_column("Arrival", justify="right")
    table.add_column("Wait", justify="right", footer=f"Average\n{_fmt(avg_wait)}")
    table.add_column("Turnaround", justify="right", footer=f"Average\n{_fmt(avg_turnaround)}")
    table.add_column("Exit", justify="right", footer=f"Throughput\n{_fmt(throughput, suffix='/t')}")

    for p in result.processes:
        table.add_row(
            str(p.pid),
            str(p.priority),
            str(p.burst_duration),
            str(p.arrival_time),
            str(p.wait_time),
            str(p.turnaround_time),
            str(p.completion_time),
        )

    return table


def build_comparison_table(results: Sequence[ScheduleResult]) -> Table:
    table = Table(title="Algorithm comparison", box=box.SIMPLE_HEAVY)
    table.add_column("Algorithm")
    table.add_column("Quantum", justify="right")
    table.add_column("Avg wait", justify="right")
    table.add_column("Avg turnaround", justify="right")
    table.add_column("Avg response", justify="right")
    table.add_column("Throughput", justify="right")
    table.add_column("CPU utilization", justify="right")

    for row in comparison_rows(results):
        utilization = row["cpu_utilization"]
        table.add_row(
            row["title"],
            "" if row["quantum"] is None else str(row["quantum"]),
            _fmt(row["avg_wait"]),
            _fmt(row["avg_turnaround"]),
            _fmt(row["avg_response"]),
            _fmt(row["throughput"], ".3f"),
            _fmt(None if utilization is None else utilization * 100, ".1f", "%"),
        )

    return table
