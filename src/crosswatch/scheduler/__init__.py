"""Crossover check job and its daily trigger loop."""

from crosswatch.scheduler.job import CrossoverCheckJob, CycleSummary, JobState
from crosswatch.scheduler.runner import CrossoverCheckScheduler, next_run_time

__all__ = [
    "CrossoverCheckJob",
    "CrossoverCheckScheduler",
    "CycleSummary",
    "JobState",
    "next_run_time",
]
