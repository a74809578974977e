"""Scheduled overdue-loan notification sweep."""

from .job import OVERDUE_NOTICE, OverdueSweep, SweepResult, build_overdue_sweep
from .scheduler import SweepScheduler

__all__ = [
    "OVERDUE_NOTICE",
    "OverdueSweep",
    "SweepResult",
    "SweepScheduler",
    "build_overdue_sweep",
]
