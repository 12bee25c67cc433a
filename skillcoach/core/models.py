"""
Core data model for skill sessions.

- SelectedSkill: one roster entry (skill + wait before it)
- SessionEvent: one scheduled presentation inside a running session
- ResponseRecord: one persisted yes/no/no-response outcome
- DailyProgress: per-day summary derived from response records

Persisted records use the camelCase field names of the storage format
(userId, sessionDate, skillId, skillName, response, timestamp).
"""

from __future__ import annotations

import math
import time
from dataclasses import dataclass, field
from datetime import date, datetime, timezone
from enum import Enum
from typing import Any


def now_ms() -> int:
    """Current wall-clock time as integer epoch milliseconds."""
    return int(time.time() * 1000)


def session_date_for(timestamp_ms: int) -> str:
    """UTC calendar date (YYYY-MM-DD) of an epoch-ms timestamp."""
    return datetime.fromtimestamp(timestamp_ms / 1000, tz=timezone.utc).date().isoformat()


def parse_minutes(value: object, default: float = 0.0) -> float:
    """
    Read a wait in minutes from persisted or user-supplied data.

    Missing, non-numeric, NaN, infinite and negative values give `default`.
    """
    if isinstance(value, bool):
        return default
    try:
        minutes = float(value)  # type: ignore[arg-type]
    except (TypeError, ValueError):
        return default
    if not math.isfinite(minutes) or minutes < 0:
        return default
    return minutes


def utc_today() -> date:
    """Today's UTC calendar date, the date key new records are filed under."""
    return datetime.now(timezone.utc).date()


def normalize_date(value: date | str) -> str:
    """
    Coerce a date or ISO date string to the YYYY-MM-DD storage key.

    Raises:
        ValueError: If the string is not an ISO calendar date
    """
    if isinstance(value, datetime):
        return value.date().isoformat()
    if isinstance(value, date):
        return value.isoformat()
    return date.fromisoformat(str(value)).isoformat()


class ResponseValue(str, Enum):
    """Outcome recorded for a presented skill."""

    YES = "yes"
    NO = "no"
    NO_RESPONSE = "no-response"

    @classmethod
    def parse(cls, value: ResponseValue | str) -> ResponseValue:
        """
        Parse a wire value or a legacy upper-case name.

        Accepts "yes", "no", "no-response" as well as "YES", "NO", "NO_RESPONSE".

        Raises:
            ValueError: For any other value
        """
        if isinstance(value, cls):
            return value
        text = str(value).strip()
        try:
            return cls(text)
        except ValueError:
            pass
        legacy = text.upper().replace("-", "_")
        if legacy in cls.__members__:
            return cls[legacy]
        raise ValueError(f"Unknown response value: {value!r}")


@dataclass(frozen=True)
class SelectedSkill:
    """
    A skill on the session roster.

    `duration_minutes` is the wait BEFORE this skill is presented.
    `order` is display metadata; schedule order is list order.
    """

    skill_id: str
    order: int = 1
    duration_minutes: float = 5
    skill_name: str = ""
    image_uri: str | None = None

    @property
    def display_name(self) -> str:
        return self.skill_name or self.skill_id

    def to_dict(self) -> dict[str, Any]:
        data: dict[str, Any] = {
            "skillId": self.skill_id,
            "order": self.order,
            "duration": self.duration_minutes,
            "skillName": self.skill_name,
        }
        if self.image_uri:
            data["imageUri"] = self.image_uri
        return data

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> SelectedSkill:
        return cls(
            skill_id=str(data["skillId"]),
            order=int(data.get("order", 1)),
            duration_minutes=parse_minutes(data.get("duration", 5)),
            skill_name=str(data.get("skillName") or ""),
            image_uri=data.get("imageUri"),
        )


@dataclass
class SessionEvent:
    """A scheduled presentation within a session (not persisted)."""

    skill_id: str
    skill_name: str
    scheduled_offset_ms: int  # cumulative wait from session start
    interval_to_next_ms: int  # next event's wait, 0 for the last event
    presented_at_ms: int | None = None
    response: ResponseValue | None = None
    responded_at_ms: int | None = None

    @property
    def is_presented(self) -> bool:
        return self.presented_at_ms is not None

    @property
    def has_response(self) -> bool:
        return self.response is not None


@dataclass(frozen=True)
class ResponseRecord:
    """One immutable skill-response event, keyed by user/date/skill."""

    user_id: str
    session_date: str  # YYYY-MM-DD
    skill_id: str
    skill_name: str
    response: ResponseValue
    timestamp_ms: int

    @classmethod
    def create(
        cls,
        user_id: str,
        skill_id: str,
        skill_name: str,
        response: ResponseValue | str,
        timestamp_ms: int | None = None,
    ) -> ResponseRecord:
        """Build a record whose session date is derived from its timestamp."""
        ts = now_ms() if timestamp_ms is None else int(timestamp_ms)
        return cls(
            user_id=user_id,
            session_date=session_date_for(ts),
            skill_id=skill_id,
            skill_name=skill_name,
            response=ResponseValue.parse(response),
            timestamp_ms=ts,
        )

    def to_dict(self) -> dict[str, Any]:
        """Serialize to the persisted record shape."""
        return {
            "userId": self.user_id,
            "sessionDate": self.session_date,
            "skillId": self.skill_id,
            "skillName": self.skill_name,
            "response": self.response.value,
            "timestamp": self.timestamp_ms,
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> ResponseRecord:
        """
        Parse the persisted record shape.

        Raises:
            KeyError: If a required field is missing
            ValueError: If the date or response value is malformed
        """
        return cls(
            user_id=str(data["userId"]),
            session_date=normalize_date(data["sessionDate"]),
            skill_id=str(data["skillId"]),
            skill_name=str(data.get("skillName") or ""),
            response=ResponseValue.parse(data["response"]),
            timestamp_ms=int(data["timestamp"]),
        )


@dataclass
class DailyProgress:
    """Per-day progress summary. Derived on demand, never stored."""

    date: str
    total_skills: int = 0
    completed_skills: int = 0
    yes_responses: int = 0
    no_responses: int = 0
    no_response_count: int = 0
    success_rate: int = 0  # 0-100
    skill_status: dict[str, ResponseValue] = field(default_factory=dict)

    def to_dict(self) -> dict[str, Any]:
        return {
            "date": self.date,
            "totalSkills": self.total_skills,
            "completedSkills": self.completed_skills,
            "yesResponses": self.yes_responses,
            "noResponses": self.no_responses,
            "noResponseCount": self.no_response_count,
            "successRate": self.success_rate,
        }
