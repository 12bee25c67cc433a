"""
skillcoach CLI - timed skill sessions and progress reports.

Usage:
    skillcoach roster add hands "Raise hand before speaking" --wait 2
    skillcoach roster list
    skillcoach session plan        # Show when each skill becomes due
    skillcoach session run         # Drive a live session in the terminal
    skillcoach progress day        # Today's summary
    skillcoach progress range week # Last 7 days with average and improvement
    skillcoach purge --user alice  # Delete all responses for a user
"""

from __future__ import annotations

import asyncio
import sys
from datetime import date
from pathlib import Path
from typing import Annotated

import typer
from loguru import logger
from rich.panel import Panel

sys.path.insert(0, str(Path(__file__).parent.parent.parent))
from config import Settings, get_settings
from skillcoach.cli.console import (
    ConsolePresenter,
    console,
    render_day,
    render_range,
    render_roster,
    render_schedule,
)
from skillcoach.core.models import utc_today
from skillcoach.progress.service import ProgressService
from skillcoach.roster.roster import Roster, RosterStore
from skillcoach.session.runner import SessionRunner
from skillcoach.session.scheduler import SessionScheduler
from skillcoach.storage import ResponseStore, StorageError, StorageUnavailable, create_response_store

# =============================================================================
# CLI Setup
# =============================================================================

app = typer.Typer(
    name="skillcoach",
    help="Timed behavioral-skill sessions with progress reports",
    add_completion=False,
    rich_markup_mode="rich",
)
roster_app = typer.Typer(help="Manage the skill roster")
session_app = typer.Typer(help="Plan and run sessions")
progress_app = typer.Typer(help="Progress reports")
app.add_typer(roster_app, name="roster")
app.add_typer(session_app, name="session")
app.add_typer(progress_app, name="progress")

UserOption = Annotated[str | None, typer.Option("--user", "-u", help="User id (defaults to settings)")]


def configure_logging(settings: Settings) -> None:
    """Route loguru output to stderr and an optional log file."""
    logger.remove()
    logger.add(
        sys.stderr,
        level=settings.log_level,
        format="<level>{message}</level>",
    )
    if settings.log_file:
        logger.add(
            settings.log_file,
            level=settings.log_level,
            rotation="10 MB",
            retention=5,
            format="{time:YYYY-MM-DD HH:mm:ss} | {level: <8} | {name}:{function} - {message}",
        )


def _roster_store() -> RosterStore:
    settings = get_settings()
    return RosterStore(settings.roster_file, default_wait_minutes=settings.default_wait_minutes)


def _load_roster() -> Roster:
    return _roster_store().load()


def _user(user: str | None) -> str:
    return user or get_settings().default_user_id


# =============================================================================
# Roster Commands
# =============================================================================


@roster_app.command("list")
def roster_list() -> None:
    """Show the current roster."""
    roster = _load_roster()
    if not len(roster):
        console.print("[yellow]Roster is empty. Add skills with 'skillcoach roster add'.[/]")
        return
    console.print(render_roster(roster.skills, roster.wait_minutes))


@roster_app.command("add")
def roster_add(
    skill_id: Annotated[str, typer.Argument(help="Unique skill id")],
    name: Annotated[str, typer.Argument(help="Text shown to the student")] = "",
    wait: Annotated[
        float | None, typer.Option("--wait", "-w", help="Minutes to wait before this skill")
    ] = None,
) -> None:
    """Add a skill (or replace one with the same id)."""
    store = _roster_store()
    roster = store.load()
    skill = roster.add(skill_id, skill_name=name, duration_minutes=wait)
    store.save(roster)
    console.print(f"[green]✓ {skill.display_name} at position {skill.order}[/]")


@roster_app.command("remove")
def roster_remove(skill_id: Annotated[str, typer.Argument(help="Skill id to remove")]) -> None:
    """Remove a skill from the roster."""
    store = _roster_store()
    roster = store.load()
    if not roster.remove(skill_id):
        console.print(f"[red]No skill {skill_id!r} on the roster[/]")
        raise typer.Exit(1)
    store.save(roster)
    console.print(f"[green]✓ Removed {skill_id}[/]")


@roster_app.command("move")
def roster_move(
    from_position: Annotated[int, typer.Argument(help="Current position (1-based)")],
    to_position: Annotated[int, typer.Argument(help="New position (1-based)")],
) -> None:
    """Reorder the roster."""
    store = _roster_store()
    roster = store.load()
    try:
        roster.move(from_position - 1, to_position - 1)
    except IndexError as e:
        console.print(f"[red]{e}[/]")
        raise typer.Exit(1)
    store.save(roster)
    console.print(render_roster(roster.skills, roster.wait_minutes))


@roster_app.command("wait")
def roster_wait(minutes: Annotated[float, typer.Argument(help="Default wait in minutes")]) -> None:
    """Set the default wait for newly added skills."""
    store = _roster_store()
    roster = store.load()
    roster.set_wait_minutes(minutes)
    store.save(roster)
    console.print(f"[green]✓ Default wait set to {minutes:g} min[/]")


@roster_app.command("clear")
def roster_clear(
    yes: Annotated[bool, typer.Option("--yes", "-y", help="Skip confirmation")] = False,
) -> None:
    """Remove every skill and reset the default wait."""
    if not yes and not typer.confirm("Clear the whole roster?"):
        raise typer.Abort()
    store = _roster_store()
    roster = store.load()
    roster.clear()
    store.save(roster)
    console.print("[green]✓ Roster cleared[/]")


# =============================================================================
# Session Commands
# =============================================================================


@session_app.command("plan")
def session_plan() -> None:
    """Show when each skill will become due."""
    roster = _load_roster()
    scheduler = SessionScheduler.from_roster(roster.snapshot())
    if not scheduler.events:
        console.print("[yellow]Roster is empty; a session would end immediately.[/]")
        return
    console.print(render_schedule(scheduler.events))


@session_app.command("run")
def session_run(user: UserOption = None) -> None:
    """Run a live session: wait, present each skill, record y/n answers."""
    settings = get_settings()
    roster = _load_roster()
    if not len(roster):
        console.print("[yellow]Roster is empty. Nothing to run.[/]")
        return

    console.print(
        Panel(
            f"[bold cyan]SKILL SESSION[/]\nUser: {_user(user)}\nSkills: {len(roster)}",
            border_style="cyan",
        )
    )
    report = asyncio.run(_run_session(settings, roster, _user(user)))

    console.print(render_schedule(report.events))
    console.print(f"[green]Session complete.[/] Saved {report.saved} responses.")
    if report.failed_saves:
        console.print(
            f"[yellow]⚠ {report.failed_saves} responses were not saved; history for this session is incomplete.[/]"
        )


async def _open_store(settings: Settings) -> ResponseStore:
    """Create and initialize the configured store, degrading to an unopened one."""
    store = create_response_store(settings)
    try:
        await store.init()
    except StorageUnavailable as e:
        console.print(f"[yellow]⚠ Storage unavailable ({e}); history will not be retained.[/]")
    return store


async def _run_session(settings: Settings, roster: Roster, user_id: str):
    store = await _open_store(settings)
    try:
        runner = SessionRunner(
            scheduler=SessionScheduler.from_roster(roster.snapshot()),
            store=store,
            presenter=ConsolePresenter(),
            user_id=user_id,
            response_timeout_s=settings.response_timeout_seconds,
            poll_interval_s=settings.poll_interval_seconds,
        )
        return await runner.run()
    finally:
        await store.close()


# =============================================================================
# Progress Commands
# =============================================================================


@progress_app.command("day")
def progress_day(
    day: Annotated[str | None, typer.Option("--date", "-d", help="YYYY-MM-DD (default today, UTC)")] = None,
    user: UserOption = None,
) -> None:
    """Show one day's summary."""
    try:
        target = date.fromisoformat(day) if day else utc_today()
    except ValueError:
        console.print(f"[red]Invalid date: {day}[/]")
        raise typer.Exit(1)

    summary = asyncio.run(_load_day(get_settings(), _user(user), target))
    console.print(render_day(summary))


async def _load_day(settings: Settings, user_id: str, target: date):
    store = await _open_store(settings)
    try:
        return await ProgressService(store, _load_roster().snapshot()).load_day(user_id, target)
    finally:
        await store.close()


@progress_app.command("range")
def progress_range(
    window: Annotated[str, typer.Argument(help="week or month")] = "week",
    user: UserOption = None,
) -> None:
    """Show daily success rates with average and improvement."""
    settings = get_settings()
    try:
        days = settings.get_window_days(window)
    except ValueError as e:
        console.print(f"[red]{e}[/]")
        raise typer.Exit(1)

    daily, summary = asyncio.run(_load_window(settings, _user(user), days))
    if not daily:
        console.print(f"[yellow]No responses in the last {days} days.[/]")
        return
    console.print(render_range(f"Progress: last {days} days", daily, summary))


async def _load_window(settings: Settings, user_id: str, days: int):
    store = await _open_store(settings)
    try:
        return await ProgressService(store, _load_roster().snapshot()).load_window(user_id, days)
    finally:
        await store.close()


# =============================================================================
# Data Deletion
# =============================================================================


@app.command()
def purge(
    user: Annotated[str, typer.Option("--user", "-u", help="User whose responses are deleted")],
    yes: Annotated[bool, typer.Option("--yes", "-y", help="Skip confirmation")] = False,
) -> None:
    """Irreversibly delete every recorded response for a user."""
    if not yes and not typer.confirm(f"Delete ALL responses for {user}? This cannot be undone"):
        raise typer.Abort()
    try:
        removed = asyncio.run(_purge(get_settings(), user))
    except StorageError as e:
        console.print(f"[red]Purge failed: {e}[/]")
        raise typer.Exit(1)
    console.print(f"[green]✓ Deleted {removed} responses for {user}[/]")


async def _purge(settings: Settings, user_id: str) -> int:
    async with create_response_store(settings) as store:
        return await store.purge_user(user_id)


# =============================================================================
# Entry Point
# =============================================================================


def main() -> None:
    """CLI entry point."""
    configure_logging(get_settings())
    app()


if __name__ == "__main__":
    main()
