from __future__ import annotations

from typing import List, Sequence

from .errors import UndefinedMetricsError
from .models import AggregateMetrics, ProcessMetrics, TimelineSlice


def aggregate_metrics(
    processes: Sequence[ProcessMetrics],
    timeline: Sequence[TimelineSlice] = (),
) -> AggregateMetrics:
    """
    Reduce final per-process metrics to averages, throughput and CPU utilization.

    Throughput is measured against the last completion instant. Raises
    UndefinedMetricsError for an empty process list instead of dividing by zero.
    """
    if not processes:
        raise UndefinedMetricsError("aggregate metrics are undefined for an empty workload")

    n = len(processes)
    makespan = max(p.completion_time for p in processes)
    cpu_busy_time = sum(slice_.duration for slice_ in timeline)

    return AggregateMetrics(
        avg_wait=sum(p.wait_time for p in processes) / n,
        avg_turnaround=sum(p.turnaround_time for p in processes) / n,
        avg_response=sum(p.response_time for p in processes) / n,
        throughput=n / makespan,
        makespan=makespan,
        cpu_busy_time=cpu_busy_time,
        cpu_utilization=cpu_busy_time / makespan,
    )


def busy_time_by_pid(timeline: Sequence[TimelineSlice]) -> dict[int, int]:
    """
    Total CPU time granted to each process across all of its slices.
    """
    totals: dict[int, int] = {}
    for slice_ in timeline:
        totals[slice_.pid] = totals.get(slice_.pid, 0) + slice_.duration
    return totals


def comparison_rows(results) -> List[dict]:
    """
    Return one summary row per result for quick side-by-side comparison.
    """
    rows = []
    for result in results:
        agg = result.aggregate
        rows.append(
            {
                "title": result.title,
                "quantum": result.quantum,
                "avg_wait": None if agg is None else agg.avg_wait,
                "avg_turnaround": None if agg is None else agg.avg_turnaround,
                "avg_response": None if agg is None else agg.avg_response,
                "throughput": None if agg is None else agg.throughput,
                "cpu_utilization": None if agg is None else agg.cpu_utilization,
            }
        )
    return rows
