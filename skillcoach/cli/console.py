"""
Terminal rendering and the interactive session presenter.

Extracted from the command module so commands stay thin.
"""

from __future__ import annotations

import asyncio
import sys
from collections.abc import Sequence

from rich.console import Console
from rich.panel import Panel
from rich.table import Table

from skillcoach.core.models import DailyProgress, ResponseValue, SelectedSkill, SessionEvent, parse_minutes
from skillcoach.progress.aggregator import RangeSummary
from skillcoach.storage.base import StorageError

console = Console()

ANSWER_KEYS = {
    "y": ResponseValue.YES,
    "yes": ResponseValue.YES,
    "n": ResponseValue.NO,
    "no": ResponseValue.NO,
}


def format_ms(ms: int) -> str:
    """Format milliseconds as M:SS."""
    total_seconds = max(0, (ms + 999) // 1000)
    mins, secs = divmod(total_seconds, 60)
    return f"{mins}:{secs:02d}"


def rate_style(rate: int) -> str:
    if rate >= 80:
        return "green"
    if rate >= 50:
        return "yellow"
    return "red"


# =============================================================================
# Tables
# =============================================================================


def render_roster(skills: Sequence[SelectedSkill], wait_minutes: float) -> Table:
    table = Table(title=f"Skill Roster (default wait {parse_minutes(wait_minutes):g} min)")
    table.add_column("#", style="dim", justify="right")
    table.add_column("Skill ID", style="cyan")
    table.add_column("Name")
    table.add_column("Wait (min)", justify="right")
    for skill in skills:
        table.add_row(
            str(skill.order), skill.skill_id, skill.display_name, f"{parse_minutes(skill.duration_minutes):g}"
        )
    return table


def render_schedule(events: Sequence[SessionEvent]) -> Table:
    table = Table(title="Session Schedule")
    table.add_column("#", style="dim", justify="right")
    table.add_column("Skill", style="cyan")
    table.add_column("Due At", justify="right")
    table.add_column("Next In", justify="right")
    for idx, event in enumerate(events, start=1):
        table.add_row(
            str(idx),
            event.skill_name,
            format_ms(event.scheduled_offset_ms),
            format_ms(event.interval_to_next_ms) if event.interval_to_next_ms else "-",
        )
    return table


def render_day(day: DailyProgress) -> Table:
    table = Table(title=f"Progress for {day.date}")
    table.add_column("Metric", style="cyan")
    table.add_column("Value", justify="right")
    table.add_row("Skills", str(day.total_skills))
    table.add_row("Completed", str(day.completed_skills))
    table.add_row("Yes", str(day.yes_responses))
    table.add_row("No", str(day.no_responses))
    table.add_row("No Response", str(day.no_response_count))
    style = rate_style(day.success_rate)
    table.add_row("Success Rate", f"[{style}]{day.success_rate}%[/]")
    return table


def render_range(title: str, daily: Sequence[DailyProgress], summary: RangeSummary) -> Table:
    table = Table(title=title)
    table.add_column("Date", style="cyan")
    table.add_column("Yes", justify="right")
    table.add_column("No", justify="right")
    table.add_column("No Resp.", justify="right")
    table.add_column("Success", justify="right")
    for day in daily:
        style = rate_style(day.success_rate)
        table.add_row(
            day.date,
            str(day.yes_responses),
            str(day.no_responses),
            str(day.no_response_count),
            f"[{style}]{day.success_rate}%[/]",
        )
    sign = "+" if summary.improvement > 0 else ""
    table.caption = (
        f"Average {summary.avg_success_rate}% | Improvement {sign}{summary.improvement}% "
        f"| {summary.days} days"
    )
    return table


# =============================================================================
# Interactive Presenter
# =============================================================================


class ConsolePresenter:
    """
    Presents skills in the terminal and reads y/n answers from stdin.

    Uses the event loop's stdin reader so an unanswered prompt can be
    cancelled by the response timeout.
    """

    def __init__(self, out: Console | None = None):
        self.console = out or console
        self._last_wait_shown: int | None = None
        self._pending_read: asyncio.Future[str] | None = None

    async def present(self, event: SessionEvent) -> ResponseValue:
        self._last_wait_shown = None
        self.console.print(
            Panel(f"[bold]{event.skill_name}[/]\n\nAnswer [green]y[/]es or [red]n[/]o", border_style="cyan")
        )
        while True:
            raw = await self._read_line()
            if raw == "":
                # stdin closed
                return ResponseValue.NO_RESPONSE
            line = raw.strip().lower()
            if line in ANSWER_KEYS:
                return ANSWER_KEYS[line]
            self.console.print("[yellow]Please answer y or n[/]")

    def waiting(self, ms_until_next: int) -> None:
        seconds = (ms_until_next + 999) // 1000
        # One line per 10 seconds is enough in a scrolling terminal
        bucket = seconds // 10
        if bucket != self._last_wait_shown:
            self._last_wait_shown = bucket
            self.console.print(f"[dim]Next skill in {format_ms(ms_until_next)}[/]")

    def storage_failed(self, error: StorageError) -> None:
        self.console.print(f"[yellow]⚠ Response not saved ({error}); the session continues.[/]")

    async def _read_line(self) -> str:
        loop = asyncio.get_running_loop()
        future: asyncio.Future[str] = loop.create_future()

        def on_readable() -> None:
            if not future.done():
                future.set_result(sys.stdin.readline())

        try:
            loop.add_reader(sys.stdin, on_readable)
        except (NotImplementedError, ValueError, OSError):
            # No selector support for stdin (e.g. Windows): block in a worker thread.
            # A read still pending after a timed-out prompt answers the next one.
            if self._pending_read is None:
                self._pending_read = asyncio.ensure_future(asyncio.to_thread(sys.stdin.readline))
            line = await asyncio.shield(self._pending_read)
            self._pending_read = None
            return line

        try:
            return await future
        finally:
            loop.remove_reader(sys.stdin)
