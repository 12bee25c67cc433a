"""Core data model shared by the session, storage, and progress layers."""

from skillcoach.core.models import (
    DailyProgress,
    ResponseRecord,
    ResponseValue,
    SelectedSkill,
    SessionEvent,
    normalize_date,
    now_ms,
    parse_minutes,
    session_date_for,
    utc_today,
)

__all__ = [
    "DailyProgress",
    "ResponseRecord",
    "ResponseValue",
    "SelectedSkill",
    "SessionEvent",
    "normalize_date",
    "now_ms",
    "parse_minutes",
    "session_date_for",
    "utc_today",
]
