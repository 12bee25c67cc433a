"""
Progress Aggregator: response records -> daily and multi-day summaries.

Daily success rate rules:
1. Reduce records to the latest response per skill (by timestamp).
2. With a roster:
   - every roster skill's latest response is "yes" -> 100
   - otherwise 100 * (roster skills answered yes) / (roster size)
3. Without a roster: 100 * yes / (yes + no + no-response), or 0 with no data.
4. Round half up to an integer and clamp to [0, 100].

A roster skill with no response that day is NOT "yes": the 100 shortcut
needs an explicit yes for every roster skill.
"""

from __future__ import annotations

import math
from collections import Counter
from collections.abc import Iterable, Sequence
from dataclasses import dataclass

from skillcoach.core.models import DailyProgress, ResponseRecord, ResponseValue, SelectedSkill


def round_half_up(value: float) -> int:
    """Round to the nearest integer with .5 going up (not banker's rounding)."""
    return int(math.floor(value + 0.5))


def clamp_rate(value: float) -> int:
    return max(0, min(100, round_half_up(value)))


def reduce_latest(records: Iterable[ResponseRecord]) -> dict[str, ResponseValue]:
    """
    Collapse records to the latest response per skill id.

    Ordering is by timestamp only; equal timestamps keep input order, so the
    later-listed record wins.
    """
    latest: dict[str, ResponseValue] = {}
    for record in sorted(records, key=lambda r: r.timestamp_ms):
        latest[record.skill_id] = record.response
    return latest


def summarize_day(
    records: Sequence[ResponseRecord],
    roster: Sequence[SelectedSkill],
    session_date: str | None = None,
) -> DailyProgress:
    """
    Summarize one day of responses against the current roster.

    Args:
        records: That day's response records (any order)
        roster: Current selected skills; may be empty
        session_date: Date label (defaults to the first record's date)

    Returns:
        DailyProgress with counts taken from the reduced (latest) responses
    """
    day = session_date or (records[0].session_date if records else "")
    latest = reduce_latest(records)
    counts = Counter(latest.values())
    yes = counts[ResponseValue.YES]
    no = counts[ResponseValue.NO]
    no_resp = counts[ResponseValue.NO_RESPONSE]

    if roster:
        statuses = [latest.get(skill.skill_id) for skill in roster]
        if all(status == ResponseValue.YES for status in statuses):
            rate = 100.0
        else:
            roster_yes = sum(1 for status in statuses if status == ResponseValue.YES)
            rate = 100 * roster_yes / len(roster)
        total_skills = len(roster)
        completed = sum(1 for status in statuses if status is not None)
    else:
        answered = yes + no + no_resp
        rate = 100 * yes / answered if answered else 0.0
        total_skills = len(latest)
        completed = len(latest)

    return DailyProgress(
        date=day,
        total_skills=total_skills,
        completed_skills=completed,
        yes_responses=yes,
        no_responses=no,
        no_response_count=no_resp,
        success_rate=clamp_rate(rate),
        skill_status=latest,
    )


@dataclass
class RangeSummary:
    """Multi-day rollup of daily summaries."""

    avg_success_rate: int = 0
    improvement: int = 0
    days: int = 0
    total_skills: int = 0

    def to_dict(self) -> dict[str, int]:
        return {
            "avgSuccessRate": self.avg_success_rate,
            "improvement": self.improvement,
            "days": self.days,
            "totalSkills": self.total_skills,
        }


def summarize_range(daily: Sequence[DailyProgress]) -> RangeSummary:
    """
    Roll up chronologically ordered daily summaries.

    avg_success_rate is the rounded mean; improvement is last minus first
    (0 with fewer than two days).
    """
    if not daily:
        return RangeSummary()

    mean = sum(day.success_rate for day in daily) / len(daily)
    improvement = daily[-1].success_rate - daily[0].success_rate if len(daily) > 1 else 0
    return RangeSummary(
        avg_success_rate=round_half_up(mean),
        improvement=improvement,
        days=len(daily),
        total_skills=sum(day.total_skills for day in daily),
    )
