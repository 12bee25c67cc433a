"""
Roster management and persistence.

A roster is the ordered list of skills for the next session plus the default
wait used for skills added without one. Reordering renumbers `order` to 1..n;
the list position is what the schedule uses.

Rosters are stored as a JSON document:
    {"waitMinutes": 5, "skills": [{"skillId": ..., "order": 1, "duration": 5, ...}]}
"""

from __future__ import annotations

import json
from dataclasses import replace
from pathlib import Path
from typing import Any

from loguru import logger

from skillcoach.core.models import SelectedSkill, parse_minutes

DEFAULT_WAIT_MINUTES = 5


class Roster:
    """Ordered, editable list of selected skills."""

    def __init__(
        self,
        skills: list[SelectedSkill] | None = None,
        wait_minutes: float = DEFAULT_WAIT_MINUTES,
    ):
        self._skills: list[SelectedSkill] = list(skills or [])
        self.wait_minutes = wait_minutes

    def __len__(self) -> int:
        return len(self._skills)

    def __iter__(self):
        return iter(self._skills)

    @property
    def skills(self) -> list[SelectedSkill]:
        return list(self._skills)

    def index_of(self, skill_id: str) -> int | None:
        for idx, skill in enumerate(self._skills):
            if skill.skill_id == skill_id:
                return idx
        return None

    def add(
        self,
        skill_id: str,
        skill_name: str = "",
        duration_minutes: float | None = None,
        image_uri: str | None = None,
    ) -> SelectedSkill:
        """
        Append a skill, or replace the existing entry with the same id in place.

        A skill added without a duration uses the roster's wait_minutes.
        """
        duration = self.wait_minutes if duration_minutes is None else duration_minutes
        idx = self.index_of(skill_id)
        order = len(self._skills) + 1 if idx is None else idx + 1
        skill = SelectedSkill(
            skill_id=skill_id,
            order=order,
            duration_minutes=duration,
            skill_name=skill_name,
            image_uri=image_uri,
        )
        if idx is None:
            self._skills.append(skill)
        else:
            self._skills[idx] = skill
        return skill

    def remove(self, skill_id: str) -> bool:
        """Remove a skill. Returns False if it was not on the roster."""
        idx = self.index_of(skill_id)
        if idx is None:
            return False
        del self._skills[idx]
        self._renumber()
        return True

    def move(self, from_index: int, to_index: int) -> None:
        """
        Move the skill at from_index to to_index and renumber orders.

        Raises:
            IndexError: If from_index is out of range
        """
        if not 0 <= from_index < len(self._skills):
            raise IndexError(f"No skill at position {from_index}")
        skill = self._skills.pop(from_index)
        self._skills.insert(max(0, to_index), skill)
        self._renumber()

    def update(self, skill_id: str, /, **changes: Any) -> SelectedSkill | None:
        """Replace fields on one entry (skill_name, duration_minutes, image_uri)."""
        idx = self.index_of(skill_id)
        if idx is None:
            return None
        changes.pop("skill_id", None)
        self._skills[idx] = replace(self._skills[idx], **changes)
        return self._skills[idx]

    def set_wait_minutes(self, minutes: float) -> None:
        self.wait_minutes = minutes

    def clear(self) -> None:
        """Empty the roster and restore the default wait."""
        self._skills = []
        self.wait_minutes = DEFAULT_WAIT_MINUTES

    def snapshot(self) -> tuple[SelectedSkill, ...]:
        """Immutable copy used to start a session."""
        return tuple(self._skills)

    def _renumber(self) -> None:
        self._skills = [replace(s, order=i + 1) for i, s in enumerate(self._skills)]

    def to_dict(self) -> dict[str, Any]:
        return {
            "waitMinutes": self.wait_minutes,
            "skills": [s.to_dict() for s in self._skills],
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> Roster:
        return cls(
            skills=[SelectedSkill.from_dict(s) for s in data.get("skills", [])],
            wait_minutes=parse_minutes(data.get("waitMinutes"), default=DEFAULT_WAIT_MINUTES),
        )


class RosterStore:
    """
    Persists a single roster as JSON.

    A missing or unreadable file loads as an empty roster.
    """

    def __init__(self, path: Path, default_wait_minutes: float = DEFAULT_WAIT_MINUTES):
        self.path = Path(path).expanduser()
        self.default_wait_minutes = default_wait_minutes

    def load(self) -> Roster:
        if not self.path.exists():
            return Roster(wait_minutes=self.default_wait_minutes)
        try:
            with open(self.path, "r", encoding="utf-8") as f:
                data = json.load(f)
            return Roster.from_dict(data)
        except (json.JSONDecodeError, KeyError, TypeError, ValueError, AttributeError) as e:
            logger.warning(f"Roster file {self.path} is unreadable, starting empty: {e}")
            return Roster(wait_minutes=self.default_wait_minutes)

    def save(self, roster: Roster) -> Path:
        self.path.parent.mkdir(parents=True, exist_ok=True)
        with open(self.path, "w", encoding="utf-8") as f:
            json.dump(roster.to_dict(), f, indent=2, ensure_ascii=False)
        logger.debug(f"Roster saved to {self.path} ({len(roster)} skills)")
        return self.path
