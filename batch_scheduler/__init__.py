"""
Batch scheduler package.

Simulates FCFS, SJF, priority (SJF tie-break) and round-robin CPU scheduling
over a fixed workload and reports per-process and aggregate timing metrics.
"""

from .algorithms import ALGORITHMS, run_algorithm, run_all
from .models import Process, ScheduleResult

__all__ = ["ALGORITHMS", "Process", "ScheduleResult", "cli", "run_algorithm", "run_all"]
