from __future__ import annotations

from dataclasses import dataclass, field
from typing import List, Optional


@dataclass(frozen=True)
class Process:
    pid: int
    burst_duration: int
    arrival_time: int
    priority: int = 0


@dataclass(frozen=True)
class TimelineSlice:
    """
    One contiguous slice of execution for a process in the Gantt chart.
    """

    pid: int
    start: int
    stop: int

    @property
    def duration(self) -> int:
        return self.stop - self.start


@dataclass
class ProcessMetrics:
    pid: int
    priority: int
    burst_duration: int
    arrival_time: int
    start_time: int
    completion_time: int
    wait_time: int
    turnaround_time: int
    response_time: int


@dataclass
class AggregateMetrics:
    avg_wait: float
    avg_turnaround: float
    avg_response: float
    throughput: float
    makespan: int
    cpu_busy_time: int
    cpu_utilization: float


@dataclass
class ScheduleResult:
    title: str
    algorithm: str
    quantum: Optional[int] = None
    processes: List[ProcessMetrics] = field(default_factory=list)
    timeline: List[TimelineSlice] = field(default_factory=list)
    # None when the workload was empty and the averages are undefined.
    aggregate: Optional[AggregateMetrics] = None

    @property
    def aggregate_defined(self) -> bool:
        return self.aggregate is not None
