"""Session timing: schedule building, scheduler state, and the reference driver."""

from skillcoach.session.runner import SessionReport, SessionRunner
from skillcoach.session.schedule import build_schedule, wait_ms
from skillcoach.session.scheduler import SessionScheduler, SessionStatus

__all__ = [
    "SessionReport",
    "SessionRunner",
    "SessionScheduler",
    "SessionStatus",
    "build_schedule",
    "wait_ms",
]
