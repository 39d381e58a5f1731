from __future__ import annotations

import logging
from collections import deque
from dataclasses import dataclass
from typing import Callable, Dict, Iterable, List, MutableSequence, Optional, Sequence

from .errors import UndefinedMetricsError, WorkloadFormatError
from .metrics import aggregate_metrics
from .models import Process, ProcessMetrics, ScheduleResult, TimelineSlice

logger = logging.getLogger(__name__)


@dataclass
class _ProcessState:
    """
    Private, mutable bookkeeping for one process during a single simulation.

    The input Process is never modified; every scheduler builds its own list of
    these and throws it away once the ScheduleResult exists.
    """

    process: Process
    remaining: int
    done: bool = False
    wait: int = 0
    ready_since: Optional[int] = None
    first_start: Optional[int] = None
    completion: Optional[int] = None


def _arrival_key(p: Process):
    return (p.arrival_time, p.pid)


def _working_states(processes: Sequence[Process], key: Callable = _arrival_key) -> List[_ProcessState]:
    seen: set[int] = set()
    for p in processes:
        if p.pid in seen:
            raise WorkloadFormatError(f"duplicate process id {p.pid}")
        if p.burst_duration <= 0:
            raise WorkloadFormatError(f"process {p.pid} has non-positive burst duration {p.burst_duration}")
        if p.arrival_time < 0:
            raise WorkloadFormatError(f"process {p.pid} has negative arrival time {p.arrival_time}")
        seen.add(p.pid)

    return [_ProcessState(process=p, remaining=p.burst_duration) for p in sorted(processes, key=key)]


def _admit(pending: deque, ready: MutableSequence[_ProcessState], time: int) -> None:
    # pending is in arrival order, so admission stops at the first future arrival.
    while pending and pending[0].process.arrival_time <= time:
        state = pending.popleft()
        state.ready_since = state.process.arrival_time
        ready.append(state)


def _idle_until(time: int, next_arrival: int) -> int:
    logger.debug("CPU idle from t=%d to t=%d", time, next_arrival)
    return next_arrival


def _dispatch(state: _ProcessState, time: int) -> None:
    state.wait += time - state.ready_since
    state.ready_since = None
    if state.first_start is None:
        state.first_start = time


def _complete(state: _ProcessState, time: int) -> ProcessMetrics:
    state.remaining = 0
    state.done = True
    state.completion = time

    p = state.process
    return ProcessMetrics(
        pid=p.pid,
        priority=p.priority,
        burst_duration=p.burst_duration,
        arrival_time=p.arrival_time,
        start_time=state.first_start,
        completion_time=time,
        wait_time=state.wait,
        turnaround_time=p.burst_duration + state.wait,
        response_time=state.first_start - p.arrival_time,
    )


def _build_result(
    title: str,
    algorithm: str,
    metrics: List[ProcessMetrics],
    timeline: List[TimelineSlice],
    quantum: Optional[int] = None,
) -> ScheduleResult:
    result = ScheduleResult(
        title=title,
        algorithm=algorithm,
        quantum=quantum,
        processes=metrics,
        timeline=timeline,
    )
    try:
        result.aggregate = aggregate_metrics(metrics, timeline)
    except UndefinedMetricsError as exc:
        logger.warning("%s: %s", title, exc)
    return result


def schedule_fcfs(processes: Sequence[Process]) -> ScheduleResult:
    """
    First-Come First-Serve (non-preemptive) scheduling.

    Processes run in arrival order; equal arrivals keep their input order.
    """
    states = _working_states(processes, key=lambda p: p.arrival_time)

    time = 0
    timeline: List[TimelineSlice] = []
    metrics: List[ProcessMetrics] = []

    for state in states:
        p = state.process
        if time < p.arrival_time:
            time = _idle_until(time, p.arrival_time)

        state.ready_since = p.arrival_time
        _dispatch(state, time)

        stop = time + p.burst_duration
        timeline.append(TimelineSlice(pid=p.pid, start=time, stop=stop))
        time = stop
        metrics.append(_complete(state, time))

    return _build_result("First-come, first-serve", "fcfs", metrics, timeline)


def schedule_sjf(processes: Sequence[Process]) -> ScheduleResult:
    """
    Shortest Job First (non-preemptive).

    At each decision point, among processes that have arrived and are not yet
    completed, choose the one with the smallest burst duration; ties go to the
    earlier arrival, then the lower id. The chosen process runs to completion.
    """
    pending = deque(_working_states(processes))
    ready: List[_ProcessState] = []

    time = 0
    timeline: List[TimelineSlice] = []
    metrics: List[ProcessMetrics] = []

    while pending or ready:
        _admit(pending, ready, time)

        if not ready:
            time = _idle_until(time, pending[0].process.arrival_time)
            continue

        state = min(
            ready,
            key=lambda s: (s.process.burst_duration, s.process.arrival_time, s.process.pid),
        )
        ready.remove(state)
        _dispatch(state, time)

        stop = time + state.remaining
        timeline.append(TimelineSlice(pid=state.process.pid, start=time, stop=stop))
        time = stop
        metrics.append(_complete(state, time))

    return _build_result("Shortest-job-first", "sjf", metrics, timeline)


def _priority_key(state: _ProcessState):
    p = state.process
    return (p.priority, state.remaining, p.arrival_time, p.pid)


def _next_preemption(pending: Iterable[_ProcessState], priority: int, finish: int) -> Optional[int]:
    """
    Return the first arrival before `finish` that is strictly more urgent than
    `priority`, or None if the running process can complete undisturbed.
    """
    for state in pending:
        arrival = state.process.arrival_time
        if arrival >= finish:
            break
        if state.process.priority < priority:
            return arrival
    return None


def schedule_priority(processes: Sequence[Process]) -> ScheduleResult:
    """
    Priority scheduling with shortest-job-first tie-break.

    Lower numeric priority value means higher priority. Among ready processes
    pick the smallest priority, then the smallest remaining burst, then the
    earlier arrival, then the lower id.

    Selection is non-preemptive except at arrival instants: when a process
    arrives with a strictly more urgent priority than the running one, the
    running process is cut at that instant and goes back to the ready set with
    its remaining burst.
    """
    pending = deque(_working_states(processes))
    ready: List[_ProcessState] = []

    time = 0
    timeline: List[TimelineSlice] = []
    metrics: List[ProcessMetrics] = []

    while pending or ready:
        _admit(pending, ready, time)

        if not ready:
            time = _idle_until(time, pending[0].process.arrival_time)
            continue

        state = min(ready, key=_priority_key)
        ready.remove(state)
        _dispatch(state, time)

        finish = time + state.remaining
        preempt_at = _next_preemption(pending, state.process.priority, finish)
        stop = finish if preempt_at is None else preempt_at

        timeline.append(TimelineSlice(pid=state.process.pid, start=time, stop=stop))
        state.remaining -= stop - time
        time = stop

        if state.remaining == 0:
            metrics.append(_complete(state, time))
        else:
            logger.debug(
                "process %d preempted at t=%d with %d remaining",
                state.process.pid,
                time,
                state.remaining,
            )
            state.ready_since = time
            ready.append(state)

    return _build_result("Priority", "priority", metrics, timeline)


def workload_quantum(processes: Sequence[Process]) -> Optional[int]:
    """
    Round-robin quantum for a workload: the shortest burst duration in it.

    Returns None for an empty workload.
    """
    if not processes:
        return None
    return min(p.burst_duration for p in processes)


def schedule_rr(processes: Sequence[Process]) -> ScheduleResult:
    """
    Round Robin scheduling with a quantum fixed to the shortest burst.

    The ready queue is FIFO. After each slice, processes that arrived while it
    ran are queued first and the interrupted process goes to the tail.
    """
    pending = deque(_working_states(processes))
    ready: deque = deque()

    quantum = workload_quantum(processes)
    if quantum is not None:
        logger.debug("round-robin quantum is %d", quantum)

    time = 0
    timeline: List[TimelineSlice] = []
    metrics: List[ProcessMetrics] = []

    _admit(pending, ready, time)

    while pending or ready:
        if not ready:
            time = _idle_until(time, pending[0].process.arrival_time)
            _admit(pending, ready, time)
            continue

        state = ready.popleft()
        _dispatch(state, time)

        run_time = min(quantum, state.remaining)
        timeline.append(TimelineSlice(pid=state.process.pid, start=time, stop=time + run_time))
        time += run_time
        state.remaining -= run_time

        # Arrivals during this slice queue ahead of the process just run.
        _admit(pending, ready, time)

        if state.remaining > 0:
            state.ready_since = time
            ready.append(state)
        else:
            metrics.append(_complete(state, time))

    return _build_result("Round-robin", "rr", metrics, timeline, quantum=quantum)


ALGORITHMS: Dict[str, Callable[[Sequence[Process]], ScheduleResult]] = {
    "fcfs": schedule_fcfs,
    "sjf": schedule_sjf,
    "priority": schedule_priority,
    "rr": schedule_rr,
}


def run_algorithm(name: str, processes: Sequence[Process]) -> ScheduleResult:
    """
    Dispatch to the requested algorithm.
    """
    name = name.lower()
    if name not in ALGORITHMS:
        raise ValueError(f"Unknown algorithm '{name}'")

    func = ALGORITHMS[name]
    return func(processes)


def run_all(processes: Sequence[Process], names: Optional[Iterable[str]] = None) -> List[ScheduleResult]:
    """
    Run every requested algorithm (all of them by default) on the same workload.

    Results come back in registry order regardless of the order of `names`.
    Unknown names are rejected before anything is computed.
    """
    if names is None:
        selected = list(ALGORITHMS)
    else:
        wanted = {n.lower() for n in names}
        unknown = sorted(wanted - set(ALGORITHMS))
        if unknown:
            raise ValueError(f"Unknown algorithm(s): {', '.join(unknown)}")
        selected = [n for n in ALGORITHMS if n in wanted]

    workload = tuple(processes)
    return [run_algorithm(name, workload) for name in selected]
