"""
Session Scheduler: wall-clock tracking for a built schedule.

States: NOT_STARTED -> RUNNING -> COMPLETE. Completion is derived (every event
presented), never stored. The scheduler owns no timer; a single driver polls
`due_event` / `time_until_next` and reports presentations and responses.

Unknown skill ids and repeated calls are logged and ignored so a late or
duplicate driver call cannot abort a session in progress.
"""

from __future__ import annotations

from collections.abc import Callable, Sequence
from dataclasses import replace
from enum import Enum

from loguru import logger

from skillcoach.core.models import ResponseValue, SelectedSkill, SessionEvent, now_ms
from skillcoach.session.schedule import build_schedule

Clock = Callable[[], int]


class SessionStatus(str, Enum):
    """Lifecycle state of a session."""

    NOT_STARTED = "not_started"
    RUNNING = "running"
    COMPLETE = "complete"


class SessionScheduler:
    """
    Tracks real-time progress against a presentation schedule.

    Not thread-safe: expects one driver calling from one task.
    """

    def __init__(self, events: Sequence[SessionEvent], clock: Clock | None = None):
        """
        Initialize the scheduler.

        Args:
            events: Schedule from build_schedule (mutated in place as the session runs)
            clock: Epoch-ms clock (defaults to system time)
        """
        self._events: list[SessionEvent] = list(events)
        self._clock: Clock = clock or now_ms
        self._anchor_ms: int | None = None

    @classmethod
    def from_roster(
        cls, skills: Sequence[SelectedSkill], clock: Clock | None = None
    ) -> SessionScheduler:
        """Build the schedule for a roster snapshot and wrap it."""
        return cls(build_schedule(skills), clock=clock)

    # =========================================================================
    # State
    # =========================================================================

    @property
    def anchor_ms(self) -> int | None:
        """Session start time (epoch ms), None until started."""
        return self._anchor_ms

    @property
    def events(self) -> list[SessionEvent]:
        return self._events

    @property
    def status(self) -> SessionStatus:
        if self._anchor_ms is None:
            return SessionStatus.NOT_STARTED
        if self.is_complete():
            return SessionStatus.COMPLETE
        return SessionStatus.RUNNING

    def is_complete(self) -> bool:
        """True when every event has been presented (responses not required)."""
        return all(e.is_presented for e in self._events)

    def _now(self, now_ms: int | None) -> int:
        return self._clock() if now_ms is None else int(now_ms)

    def _elapsed(self, now_ms: int | None) -> int | None:
        if self._anchor_ms is None:
            return None
        return self._now(now_ms) - self._anchor_ms

    # =========================================================================
    # Driver Operations
    # =========================================================================

    def start(self) -> int:
        """
        Start the session clock.

        Idempotent: a second call keeps the original anchor and logs a warning.

        Returns:
            The session anchor (epoch ms)
        """
        if self._anchor_ms is not None:
            logger.warning(
                f"Session already started at {self._anchor_ms}; ignoring duplicate start"
            )
            return self._anchor_ms

        self._anchor_ms = self._clock()
        logger.info(f"Session started at {self._anchor_ms} with {len(self._events)} skills")
        return self._anchor_ms

    def due_event(self, now_ms: int | None = None) -> SessionEvent | None:
        """
        Get the first unpresented event whose offset has elapsed.

        Only one event is returned per call even if several are due; the driver
        calls again after marking it presented.
        """
        elapsed = self._elapsed(now_ms)
        if elapsed is None:
            return None

        for event in self._events:
            if not event.is_presented and event.scheduled_offset_ms <= elapsed:
                return event
        return None

    def time_until_next(self, now_ms: int | None = None) -> int | None:
        """
        Milliseconds until the next unpresented event is due.

        Returns:
            None if the session has not started or nothing remains, else >= 0
        """
        elapsed = self._elapsed(now_ms)
        if elapsed is None:
            return None

        upcoming = next((e for e in self._events if not e.is_presented), None)
        if upcoming is None:
            return None
        return max(0, upcoming.scheduled_offset_ms - elapsed)

    def mark_presented(self, skill_id: str) -> SessionEvent | None:
        """
        Record the actual presentation time for a skill.

        Returns:
            The updated event, or None if the id is unknown or already presented
        """
        matches = [e for e in self._events if e.skill_id == skill_id]
        if not matches:
            logger.warning(f"mark_presented: unknown skill id {skill_id!r}")
            return None

        event = next((e for e in matches if not e.is_presented), None)
        if event is None:
            logger.warning(f"mark_presented: skill {skill_id!r} already presented")
            return None

        event.presented_at_ms = self._clock()
        logger.debug(f"Skill presented: {skill_id} at {event.presented_at_ms}")
        return event

    def record_response(
        self, skill_id: str, value: ResponseValue | str
    ) -> SessionEvent | None:
        """
        Attach a response to a skill's event.

        Works whether or not the skill was marked presented. When the id occurs
        more than once, the earliest presented-but-unanswered event wins.

        Returns:
            The updated event, or None if the id is unknown
        """
        response = ResponseValue.parse(value)
        matches = [e for e in self._events if e.skill_id == skill_id]
        if not matches:
            logger.warning(f"record_response: unknown skill id {skill_id!r}")
            return None

        event = next(
            (e for e in matches if e.is_presented and not e.has_response),
            matches[0],
        )
        event.response = response
        event.responded_at_ms = self._clock()
        logger.debug(f"Response recorded: {skill_id} {response.value} at {event.responded_at_ms}")
        return event

    def summary(self) -> list[SessionEvent]:
        """Snapshot copies of all events (for logging/reporting)."""
        return [replace(e) for e in self._events]
