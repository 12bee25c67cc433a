"""
Unit tests for the SessionScheduler state machine.

Uses a fake clock so due/wait computations are exact.
"""

import pytest

from skillcoach.core.models import ResponseValue, SelectedSkill
from skillcoach.session.scheduler import SessionScheduler, SessionStatus


@pytest.fixture
def scheduler(sample_roster, clock):
    return SessionScheduler.from_roster(sample_roster, clock=clock)


class TestLifecycle:
    """Test start and status transitions."""

    def test_not_started_by_default(self, scheduler):
        assert scheduler.status == SessionStatus.NOT_STARTED
        assert scheduler.anchor_ms is None

    def test_start_captures_anchor(self, scheduler, clock):
        anchor = scheduler.start()

        assert anchor == clock.now
        assert scheduler.status == SessionStatus.RUNNING

    def test_double_start_keeps_original_anchor(self, scheduler, clock):
        """A second start() is ignored and returns the first anchor."""
        first = scheduler.start()
        clock.advance(5_000)
        second = scheduler.start()

        assert second == first
        assert scheduler.anchor_ms == first

    def test_complete_after_all_presented(self, scheduler, clock):
        scheduler.start()
        clock.advance(180_000)
        scheduler.mark_presented("s1")
        scheduler.mark_presented("s2")

        assert scheduler.is_complete() is True
        assert scheduler.status == SessionStatus.COMPLETE

    def test_response_not_required_for_completion(self, scheduler):
        """Presented-but-unanswered skills still count toward completion."""
        scheduler.start()
        scheduler.mark_presented("s1")
        scheduler.mark_presented("s2")

        assert all(e.response is None for e in scheduler.events)
        assert scheduler.is_complete() is True

    def test_empty_schedule_completes_on_start(self, clock):
        scheduler = SessionScheduler.from_roster([], clock=clock)

        assert scheduler.status == SessionStatus.NOT_STARTED
        scheduler.start()
        assert scheduler.status == SessionStatus.COMPLETE
        assert scheduler.due_event() is None
        assert scheduler.time_until_next() is None


class TestDueEvent:
    """Test which event is due at a given time."""

    def test_nothing_due_before_start(self, scheduler, clock):
        assert scheduler.due_event(clock.now + 999_999) is None

    def test_first_skill_due_after_its_wait(self, scheduler):
        anchor = scheduler.start()

        assert scheduler.due_event(anchor + 59_999) is None
        event = scheduler.due_event(anchor + 70_000)
        assert event is not None
        assert event.skill_id == "s1"

    def test_due_event_uses_clock_by_default(self, scheduler, clock):
        scheduler.start()
        clock.advance(60_000)

        assert scheduler.due_event().skill_id == "s1"

    def test_simultaneously_due_returned_one_at_a_time(self, scheduler):
        """Both skills due: s1 first, then s2 once s1 is presented."""
        anchor = scheduler.start()
        late = anchor + 500_000

        assert scheduler.due_event(late).skill_id == "s1"
        assert scheduler.due_event(late).skill_id == "s1"
        scheduler.mark_presented("s1")
        assert scheduler.due_event(late).skill_id == "s2"
        scheduler.mark_presented("s2")
        assert scheduler.due_event(late) is None

    def test_delay_does_not_shift_schedule(self, scheduler, clock):
        """Presenting late records the late time but keeps the scheduled offset."""
        anchor = scheduler.start()
        clock.advance(90_000)
        event = scheduler.mark_presented("s1")

        assert event.presented_at_ms == anchor + 90_000
        assert event.scheduled_offset_ms == 60_000
        assert scheduler.time_until_next(anchor + 90_000) == 90_000


class TestTimeUntilNext:
    """Test countdown computation."""

    def test_none_before_start(self, scheduler):
        assert scheduler.time_until_next() is None

    def test_countdown_to_second_skill(self, scheduler):
        anchor = scheduler.start()
        scheduler.mark_presented("s1")

        assert scheduler.time_until_next(anchor + 170_000) == 10_000

    def test_countdown_uses_first_unpresented(self, scheduler):
        anchor = scheduler.start()

        assert scheduler.time_until_next(anchor) == 60_000

    def test_never_negative(self, scheduler):
        anchor = scheduler.start()

        assert scheduler.time_until_next(anchor + 1_000_000) == 0

    def test_none_when_everything_presented(self, scheduler):
        scheduler.start()
        scheduler.mark_presented("s1")
        scheduler.mark_presented("s2")

        assert scheduler.time_until_next() is None


class TestMarkAndRecord:
    """Test presentation and response bookkeeping."""

    def test_mark_presented_unknown_id_is_ignored(self, scheduler):
        scheduler.start()

        assert scheduler.mark_presented("nope") is None
        assert not any(e.is_presented for e in scheduler.events)

    def test_mark_presented_twice_keeps_first_time(self, scheduler, clock):
        scheduler.start()
        first = scheduler.mark_presented("s1").presented_at_ms
        clock.advance(1_000)

        assert scheduler.mark_presented("s1") is None
        assert scheduler.events[0].presented_at_ms == first

    def test_record_response_sets_value_and_time(self, scheduler, clock):
        scheduler.start()
        scheduler.mark_presented("s1")
        clock.advance(4_000)
        event = scheduler.record_response("s1", "yes")

        assert event.response == ResponseValue.YES
        assert event.responded_at_ms == clock.now

    def test_record_response_without_presentation(self, scheduler):
        """Out-of-order drivers may answer before marking presented."""
        scheduler.start()
        event = scheduler.record_response("s2", ResponseValue.NO)

        assert event.response == ResponseValue.NO
        assert event.presented_at_ms is None
        assert scheduler.is_complete() is False

    def test_record_response_unknown_id_is_ignored(self, scheduler):
        scheduler.start()

        assert scheduler.record_response("ghost", "yes") is None
        assert all(e.response is None for e in scheduler.events)

    def test_record_response_accepts_legacy_names(self, scheduler):
        scheduler.start()

        assert scheduler.record_response("s1", "NO_RESPONSE").response == ResponseValue.NO_RESPONSE

    def test_record_response_rejects_unknown_values(self, scheduler):
        scheduler.start()

        with pytest.raises(ValueError):
            scheduler.record_response("s1", "maybe")

    def test_duplicate_ids_presented_in_order(self, clock):
        """Repeated roster ids are presented and answered slot by slot."""
        scheduler = SessionScheduler.from_roster(
            [
                SelectedSkill(skill_id="a", duration_minutes=1),
                SelectedSkill(skill_id="a", duration_minutes=1),
            ],
            clock=clock,
        )
        scheduler.start()
        scheduler.mark_presented("a")
        scheduler.record_response("a", "yes")
        scheduler.mark_presented("a")
        scheduler.record_response("a", "no")

        assert [e.response for e in scheduler.events] == [ResponseValue.YES, ResponseValue.NO]
        assert scheduler.is_complete() is True

    def test_summary_returns_copies(self, scheduler):
        scheduler.start()
        snapshot = scheduler.summary()
        snapshot[0].response = ResponseValue.YES

        assert scheduler.events[0].response is None
