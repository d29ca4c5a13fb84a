# tests/test_plan_service.py
"""Unit tests for study plan booking."""

import sys
import os
sys.path.insert(0, os.path.join(os.path.dirname(__file__), ".."))

import pytest
from unittest.mock import MagicMock
from datetime import datetime, timedelta, timezone
from app.services.plan_service import (
    as_utc, create_plan, evaluate_booking, update_plan, validate_time_range,
)
from app.utils.exceptions import InvalidTimeRange

NOW = datetime(2026, 3, 10, 9, 0, tzinfo=timezone.utc)


def make_location(id=1, noise=None, occupancy=None, capacity=50, lat=51.05):
    location = MagicMock()
    location.id = id
    location.name = f"Location {id}"
    location.address = f"Street {id}, 9000 Gent"
    location.latitude = lat
    location.longitude = 3.72
    location.capacity = capacity
    if noise is None:
        location.sensor = None
    else:
        location.sensor.current_noise_level = noise
        location.sensor.current_occupancy = occupancy
    return location


class TestAsUtc:
    def test_naive_is_utc(self):
        assert as_utc(datetime(2026, 1, 1, 12)) == datetime(2026, 1, 1, 12, tzinfo=timezone.utc)

    def test_aware_is_converted(self):
        cet = timezone(timedelta(hours=1))
        assert as_utc(datetime(2026, 1, 1, 13, tzinfo=cet)).hour == 12


class TestValidateTimeRange:
    def test_end_before_start(self):
        with pytest.raises(InvalidTimeRange, match="End time must be after start time"):
            validate_time_range(NOW + timedelta(hours=3), NOW + timedelta(hours=1), NOW)

    def test_end_equal_to_start(self):
        with pytest.raises(InvalidTimeRange, match="End time must be after start time"):
            validate_time_range(NOW + timedelta(hours=1), NOW + timedelta(hours=1), NOW)

    def test_start_in_past(self):
        with pytest.raises(InvalidTimeRange, match="Cannot create plan in the past"):
            validate_time_range(NOW - timedelta(minutes=1), NOW + timedelta(hours=1), NOW)

    def test_past_allowed_when_start_unchanged(self):
        validate_time_range(NOW - timedelta(days=1), NOW + timedelta(hours=1), NOW, allow_past=True)

    def test_valid_future_range(self):
        validate_time_range(NOW + timedelta(hours=1), NOW + timedelta(hours=3), NOW)


class TestEvaluateBooking:
    def test_quiet_location_skips_alternative_search(self):
        db = MagicMock()
        result = evaluate_booking(db, make_location(noise=20, occupancy=5))
        assert result.warnings == []
        assert result.alternatives == []
        db.query.assert_not_called()

    def test_location_without_sensor_has_no_warnings(self):
        db = MagicMock()
        result = evaluate_booking(db, make_location())
        assert result.warnings == []
        db.query.assert_not_called()

    def test_loud_location_gets_alternatives(self):
        db = MagicMock()
        others = [make_location(2, noise=10, occupancy=0, lat=51.051),
                  make_location(3, noise=85, occupancy=0, lat=51.0501)]
        db.query.return_value.options.return_value.filter.return_value.all.return_value = others

        result = evaluate_booking(db, make_location(noise=85, occupancy=10))

        assert len(result.warnings) == 1
        assert "loud" in result.warnings[0]
        assert [a.id for a in result.alternatives] == [2]

    def test_out_of_range_reading_is_clamped(self):
        db = MagicMock()
        db.query.return_value.options.return_value.filter.return_value.all.return_value = []
        result = evaluate_booking(db, make_location(noise=140, occupancy=80, capacity=50))
        assert len(result.warnings) == 2


class TestCreatePlan:
    def test_persists_plan_with_recommendation(self):
        db = MagicMock()
        db.query.return_value.options.return_value.filter.return_value.all.return_value = []
        location = make_location(noise=90, occupancy=50, capacity=50)

        booking = create_plan(db, 7, location, NOW + timedelta(hours=1),
                              NOW + timedelta(hours=2), "exam prep", now=NOW)

        db.add.assert_called_once()
        db.commit.assert_called_once()
        assert booking.plan.user_id == 7
        assert booking.plan.location_id == 1
        assert booking.plan.notes == "exam prep"
        assert len(booking.recommendation.warnings) == 2

    def test_invalid_range_writes_nothing(self):
        db = MagicMock()
        with pytest.raises(InvalidTimeRange):
            create_plan(db, 7, make_location(), NOW + timedelta(hours=2),
                        NOW + timedelta(hours=1), now=NOW)
        db.add.assert_not_called()


class TestUpdatePlan:
    def test_moving_end_before_start_is_rejected(self):
        db = MagicMock()
        plan = MagicMock()
        plan.start_time = NOW + timedelta(hours=2)
        plan.end_time = NOW + timedelta(hours=4)
        with pytest.raises(InvalidTimeRange):
            update_plan(db, plan, {"end_time": NOW + timedelta(hours=1)}, now=NOW)
        db.commit.assert_not_called()

    def test_notes_only_on_started_plan(self):
        db = MagicMock()
        plan = MagicMock()
        plan.start_time = NOW - timedelta(hours=1)
        plan.end_time = NOW + timedelta(hours=1)
        update_plan(db, plan, {"notes": "room 2"}, now=NOW)
        assert plan.notes == "room 2"
        db.commit.assert_called_once()
