"""
Session Runner: reference single-task driver for a SessionScheduler.

Session Flow:
1. Start the scheduler clock
2. Sleep until the next skill is due (bounded by the poll interval)
3. Present the skill; no answer within the response window -> no-response
4. Record the response on the scheduler and append it to the store
5. Repeat until every skill has been presented

Storage failures are reported to the presenter and counted; the session keeps
running on its in-memory state.
"""

from __future__ import annotations

import asyncio
from collections.abc import Awaitable, Callable
from dataclasses import dataclass, field
from typing import Protocol

from loguru import logger

from skillcoach.core.models import ResponseRecord, ResponseValue, SessionEvent, now_ms
from skillcoach.session.scheduler import Clock, SessionScheduler
from skillcoach.storage.base import ResponseStore, StorageError


class Presenter(Protocol):
    """UI hooks used by the runner."""

    async def present(self, event: SessionEvent) -> ResponseValue | str:
        """Show a skill and return the student's answer."""
        ...

    def waiting(self, ms_until_next: int) -> None:
        """Called before each sleep with the time left until the next skill."""
        ...

    def storage_failed(self, error: StorageError) -> None:
        """Called when a response could not be saved."""
        ...


@dataclass
class SessionReport:
    """Outcome of a driven session."""

    user_id: str
    events: list[SessionEvent] = field(default_factory=list)
    saved: int = 0
    failed_saves: int = 0
    completed: bool = False

    @property
    def responses(self) -> dict[str, ResponseValue]:
        return {e.skill_id: e.response for e in self.events if e.response is not None}


class SessionRunner:
    """Drives one session from start to completion."""

    def __init__(
        self,
        scheduler: SessionScheduler,
        store: ResponseStore,
        presenter: Presenter,
        user_id: str,
        response_timeout_s: float = 30,
        poll_interval_s: float = 1.0,
        clock: Clock | None = None,
        sleep: Callable[[float], Awaitable[None]] | None = None,
    ):
        self.scheduler = scheduler
        self.store = store
        self.presenter = presenter
        self.user_id = user_id
        self.response_timeout_s = response_timeout_s
        self.poll_interval_s = poll_interval_s
        self._clock = clock or now_ms
        self._sleep = sleep or asyncio.sleep

    async def run(self) -> SessionReport:
        """Run until every skill has been presented."""
        report = SessionReport(user_id=self.user_id)
        self.scheduler.start()

        while not self.scheduler.is_complete():
            event = self.scheduler.due_event(self._clock())
            if event is None:
                wait = self.scheduler.time_until_next(self._clock())
                if wait is None:
                    break
                self.presenter.waiting(wait)
                await self._sleep(min(wait / 1000, self.poll_interval_s))
                continue

            await self._present(event, report)

        report.events = self.scheduler.summary()
        report.completed = self.scheduler.is_complete()
        logger.info(
            f"Session finished for {self.user_id}: {len(report.responses)} responses, "
            f"{report.saved} saved, {report.failed_saves} failed"
        )
        return report

    async def _present(self, event: SessionEvent, report: SessionReport) -> None:
        self.scheduler.mark_presented(event.skill_id)

        try:
            answer = await asyncio.wait_for(
                self.presenter.present(event), timeout=self.response_timeout_s
            )
            value = ResponseValue.parse(answer)
        except asyncio.TimeoutError:
            logger.info(f"No response for {event.skill_id} within {self.response_timeout_s}s")
            value = ResponseValue.NO_RESPONSE

        updated = self.scheduler.record_response(event.skill_id, value)
        timestamp = updated.responded_at_ms if updated and updated.responded_at_ms else self._clock()
        record = ResponseRecord.create(
            user_id=self.user_id,
            skill_id=event.skill_id,
            skill_name=event.skill_name,
            response=value,
            timestamp_ms=timestamp,
        )

        try:
            await self.store.save(record)
            report.saved += 1
        except StorageError as e:
            logger.warning(f"Response for {event.skill_id} not durably recorded: {e}")
            report.failed_saves += 1
            self.presenter.storage_failed(e)
