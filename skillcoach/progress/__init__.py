"""Progress reporting: daily summaries and multi-day rollups."""

from skillcoach.progress.aggregator import (
    RangeSummary,
    reduce_latest,
    summarize_day,
    summarize_range,
)
from skillcoach.progress.service import ProgressService, date_window

__all__ = [
    "ProgressService",
    "RangeSummary",
    "date_window",
    "reduce_latest",
    "summarize_day",
    "summarize_range",
]
