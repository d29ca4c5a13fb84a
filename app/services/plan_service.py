# app/services/plan_service.py
"""
Study plan booking.

Create flow:
  1. validate the time range (end after start, start not in the past)
  2. load the target location (404 handled by the router)
  3. run the recommendation engine against every other location
  4. persist the plan; warnings + alternatives go back to the caller verbatim
"""

from dataclasses import dataclass
from datetime import datetime, timezone
from typing import Optional

from sqlalchemy.orm import Session, joinedload

from app.models.location import Location
from app.models.study_plan import StudyPlan
from app.services.recommendation_engine import (
    LocationSnapshot, Recommendation, build_warnings, evaluate,
)
from app.services.status_classifier import NOISE_MAX, NOISE_MIN, clamp
from app.utils.exceptions import InvalidTimeRange
from app.utils.logger import get_logger

logger = get_logger(__name__)


@dataclass
class BookingResult:
    plan: StudyPlan
    recommendation: Recommendation


def as_utc(value: datetime) -> datetime:
    """Naive datetimes are taken to be UTC."""
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value.astimezone(timezone.utc)


def validate_time_range(start: datetime, end: datetime, now: Optional[datetime] = None,
                        allow_past: bool = False):
    start, end = as_utc(start), as_utc(end)
    if start >= end:
        raise InvalidTimeRange("End time must be after start time")
    if not allow_past and start < as_utc(now or datetime.now(timezone.utc)):
        raise InvalidTimeRange("Cannot create plan in the past")


def snapshot_from_location(location: Location) -> LocationSnapshot:
    sensor = location.sensor
    noise = occupancy = None
    if sensor is not None:
        noise = clamp(sensor.current_noise_level, NOISE_MIN, NOISE_MAX)
        occupancy = clamp(sensor.current_occupancy, 0, location.capacity)
    return LocationSnapshot(
        id=location.id,
        name=location.name,
        address=location.address,
        latitude=location.latitude,
        longitude=location.longitude,
        capacity=location.capacity,
        noise=noise,
        occupancy=occupancy,
    )


def evaluate_booking(db: Session, location: Location) -> Recommendation:
    target = snapshot_from_location(location)
    # No sensor → status unknown → no warnings
    if not build_warnings(target.status):
        return Recommendation()

    others = (
        db.query(Location)
        .options(joinedload(Location.sensor))
        .filter(Location.id != location.id)
        .all()
    )
    return evaluate(target, target.status, [snapshot_from_location(loc) for loc in others])


def create_plan(db: Session, user_id: int, location: Location, start_time: datetime,
                end_time: datetime, notes: Optional[str] = None,
                now: Optional[datetime] = None) -> BookingResult:
    validate_time_range(start_time, end_time, now)
    recommendation = evaluate_booking(db, location)

    plan = StudyPlan(
        user_id=user_id,
        location_id=location.id,
        start_time=as_utc(start_time),
        end_time=as_utc(end_time),
        notes=notes,
    )
    db.add(plan)
    db.commit()
    db.refresh(plan)

    if recommendation.warnings:
        logger.info(
            f"[PLAN] {plan.id} at {location.name} booked with {len(recommendation.warnings)} "
            f"warning(s), {len(recommendation.alternatives)} alternative(s)"
        )
    return BookingResult(plan=plan, recommendation=recommendation)


def update_plan(db: Session, plan: StudyPlan, changes: dict,
                now: Optional[datetime] = None) -> StudyPlan:
    """Apply a partial update. The resulting range must still be valid; a moved start must not be in the past."""
    start = changes.get("start_time", plan.start_time)
    end = changes.get("end_time", plan.end_time)
    validate_time_range(start, end, now, allow_past="start_time" not in changes)

    for key, value in changes.items():
        if key in ("start_time", "end_time"):
            value = as_utc(value)
        setattr(plan, key, value)
    db.commit()
    db.refresh(plan)
    return plan
