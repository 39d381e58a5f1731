from __future__ import annotations

from typing import Optional


class SchedulerError(Exception):
    """Base class for every error raised by the batch scheduler."""


class WorkloadFormatError(SchedulerError, ValueError):
    """
    A workload record could not be turned into a valid Process.
    """

    def __init__(self, message: str, line: Optional[int] = None) -> None:
        self.line = line
        if line is not None:
            message = f"line {line}: {message}"
        super().__init__(message)


class UndefinedMetricsError(SchedulerError, ArithmeticError):
    """Aggregate metrics were requested for an empty set of processes."""
