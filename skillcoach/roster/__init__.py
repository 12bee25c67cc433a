"""Skill roster editing and persistence."""

from skillcoach.roster.roster import DEFAULT_WAIT_MINUTES, Roster, RosterStore

__all__ = ["DEFAULT_WAIT_MINUTES", "Roster", "RosterStore"]
