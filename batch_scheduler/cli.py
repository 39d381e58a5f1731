from __future__ import annotations

import argparse
import logging
from pathlib import Path
from typing import List, Optional

from rich.console import Console
from rich.logging import RichHandler

from .algorithms import ALGORITHMS, run_all
from .errors import SchedulerError
from .gantt import build_comparison_table, build_rich_gantt, build_schedule_table, render_gantt
from .models import ScheduleResult
from .workload_io import load_workload


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="batch-scheduler",
        description="Compare FCFS, SJF, priority and round-robin CPU scheduling on a fixed workload.",
    )
    parser.add_argument(
        "workload",
        help="Path to the workload file: CSV rows of id,burst,arrival[,priority] or a .json list.",
    )
    parser.add_argument(
        "--algorithm",
        "-a",
        action="append",
        choices=list(ALGORITHMS),
        dest="algorithms",
        help="Run only this algorithm (repeatable; default: all of them).",
    )
    parser.add_argument(
        "--plain",
        action="store_true",
        help="Draw the Gantt chart as plain text instead of colored bars.",
    )
    parser.add_argument(
        "--summary",
        action="store_true",
        help="Print a comparison table of all algorithms after the schedules.",
    )
    parser.add_argument(
        "--verbose",
        "-v",
        action="count",
        default=0,
        help="Increase log output (-v info, -vv debug).",
    )
    return parser


def configure_logging(verbosity: int) -> None:
    level = logging.WARNING
    if verbosity == 1:
        level = logging.INFO
    elif verbosity >= 2:
        level = logging.DEBUG

    logging.basicConfig(
        level=level,
        format="%(message)s",
        datefmt="[%X]",
        handlers=[RichHandler(console=Console(stderr=True), show_path=False)],
        force=True,
    )


def _print_result(result: ScheduleResult, console: Console, plain: bool = False) -> None:
    console.rule(f"[bold]{result.title}[/bold]")
    if result.quantum is not None:
        console.print(f"[bold]Quantum:[/bold] {result.quantum}")

    if plain:
        console.print(render_gantt(result.timeline), highlight=False)
    else:
        panel, time_marks = build_rich_gantt(result.timeline)
        console.print(panel)
        if time_marks:
            console.print(time_marks, highlight=False)

    console.print()
    console.print(build_schedule_table(result))


def main(argv: Optional[List[str]] = None) -> int:
    parser = build_parser()
    args = parser.parse_args(argv)

    configure_logging(args.verbose)
    console = Console()
    err_console = Console(stderr=True)

    workload_path = Path(args.workload)
    try:
        processes = load_workload(workload_path)
        # Every result is computed before anything is printed.
        results = run_all(processes, args.algorithms)
    except OSError as exc:
        err_console.print(f"[red]Error reading workload {workload_path}: {exc.strerror or exc}[/red]")
        return 1
    except SchedulerError as exc:
        err_console.print(f"[red]Invalid workload {workload_path}: {exc}[/red]")
        return 1

    for result in results:
        _print_result(result, console, plain=args.plain)
        console.print()

    if args.summary:
        console.print(build_comparison_table(results))

    return 0


if __name__ == "__main__":
    raise SystemExit(main())
