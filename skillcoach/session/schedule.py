"""
Schedule builder: roster -> absolute presentation offsets.

Each skill's duration is the wait BEFORE that skill. With durations [1, 2, 3]
minutes the skills become due at 1, 3 and 6 minutes after session start.
`interval_to_next_ms` mirrors the next skill's wait (0 for the last skill).
"""

from __future__ import annotations

from collections.abc import Sequence

from loguru import logger

from skillcoach.core.models import SelectedSkill, SessionEvent, parse_minutes

MS_PER_MINUTE = 60_000


def wait_ms(duration_minutes: object) -> int:
    """
    Convert a per-skill wait in minutes to milliseconds.

    Missing, non-numeric, NaN, infinite and negative values count as zero wait.
    """
    return int(round(parse_minutes(duration_minutes) * MS_PER_MINUTE))


def build_schedule(skills: Sequence[SelectedSkill]) -> list[SessionEvent]:
    """
    Build the ordered presentation schedule for a roster.

    Args:
        skills: Roster in presentation order (the `order` field is not consulted)

    Returns:
        One SessionEvent per skill with non-decreasing scheduled offsets.
        An empty roster yields an empty schedule.
    """
    events: list[SessionEvent] = []
    accumulated = 0

    for idx, skill in enumerate(skills):
        accumulated += wait_ms(skill.duration_minutes)
        next_wait = wait_ms(skills[idx + 1].duration_minutes) if idx + 1 < len(skills) else 0
        events.append(
            SessionEvent(
                skill_id=skill.skill_id,
                skill_name=skill.display_name,
                scheduled_offset_ms=accumulated,
                interval_to_next_ms=next_wait,
            )
        )

    logger.debug(
        f"Built schedule: {len(events)} skills over {accumulated / MS_PER_MINUTE:.1f} min"
    )
    return events
