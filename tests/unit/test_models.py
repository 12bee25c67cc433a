"""
Unit tests for core record types.
"""

from datetime import date

import pytest

from skillcoach.core.models import (
    ResponseRecord,
    ResponseValue,
    SelectedSkill,
    normalize_date,
    session_date_for,
)


class TestResponseValue:
    """Test response value parsing."""

    @pytest.mark.parametrize(
        "raw,expected",
        [
            ("yes", ResponseValue.YES),
            ("no", ResponseValue.NO),
            ("no-response", ResponseValue.NO_RESPONSE),
            ("YES", ResponseValue.YES),
            ("NO_RESPONSE", ResponseValue.NO_RESPONSE),
            (ResponseValue.NO, ResponseValue.NO),
        ],
    )
    def test_parse(self, raw, expected):
        assert ResponseValue.parse(raw) == expected

    def test_parse_rejects_unknown(self):
        with pytest.raises(ValueError):
            ResponseValue.parse("maybe")


class TestDates:
    """Test session date derivation."""

    def test_session_date_is_utc(self):
        # 2024-01-15T23:30:00Z
        assert session_date_for(1_705_361_400_000) == "2024-01-15"

    def test_normalize_date(self):
        assert normalize_date(date(2024, 3, 9)) == "2024-03-09"
        assert normalize_date("2024-03-09") == "2024-03-09"

    def test_normalize_date_rejects_garbage(self):
        with pytest.raises(ValueError):
            normalize_date("03/09/2024")


class TestResponseRecord:
    """Test record creation and the persisted shape."""

    def test_create_derives_session_date(self):
        record = ResponseRecord.create("u1", "s1", "Raise hand", "yes", timestamp_ms=1_705_361_400_000)

        assert record.session_date == "2024-01-15"
        assert record.response == ResponseValue.YES

    def test_to_dict_shape(self):
        record = ResponseRecord.create("u1", "s1", "Raise hand", "no-response", timestamp_ms=0)

        assert record.to_dict() == {
            "userId": "u1",
            "sessionDate": "1970-01-01",
            "skillId": "s1",
            "skillName": "Raise hand",
            "response": "no-response",
            "timestamp": 0,
        }

    def test_from_dict_accepts_legacy_values(self):
        record = ResponseRecord.from_dict(
            {
                "userId": "u1",
                "sessionDate": "2024-01-15",
                "skillId": "s1",
                "response": "NO",
                "timestamp": "42",
            }
        )

        assert record.response == ResponseValue.NO
        assert record.timestamp_ms == 42
        assert record.skill_name == ""

    def test_from_dict_missing_field(self):
        with pytest.raises(KeyError):
            ResponseRecord.from_dict({"userId": "u1"})


class TestSelectedSkill:
    """Test roster entry helpers."""

    def test_display_name_falls_back_to_id(self):
        assert SelectedSkill(skill_id="s1").display_name == "s1"
        assert SelectedSkill(skill_id="s1", skill_name="Wave").display_name == "Wave"

    def test_from_dict_defaults(self):
        skill = SelectedSkill.from_dict({"skillId": "s1"})

        assert skill.order == 1
        assert skill.duration_minutes == 5
        assert skill.image_uri is None
