# app/services/location_service.py
"""
Location CRUD helpers and read-side decoration.

Status is never stored: annotate_location() attaches a freshly classified
status (plus favorite/plan counts) to the ORM object before it is serialised.
"""

from typing import Optional

from sqlalchemy.orm import Session, joinedload

from app.models.location import Location
from app.models.sensor import Sensor
from app.services.sensor_service import DEFAULT_NOISE_LEVEL, clamp_occupancy_to_capacity
from app.services.status_classifier import status_for_location
from app.utils.exceptions import InvalidCapacity
from app.utils.logger import get_logger

logger = get_logger(__name__)

_SENSOR_CREDENTIAL_FIELDS = ("device_id", "port", "password")


def validate_capacity(capacity):
    if capacity is None or capacity <= 0:
        raise InvalidCapacity(f"Capacity must be a positive seat count, got {capacity}")


def annotate_location(location: Location, with_counts: bool = False) -> Location:
    location.status = status_for_location(location)
    if with_counts:
        location.favorites_count = len(location.favorites)
        location.study_plans_count = len(location.study_plans)
    return location


def list_locations(db: Session, noise_level: Optional[str] = None,
                   occupancy_level: Optional[str] = None) -> list[Location]:
    locations = (
        db.query(Location)
        .options(joinedload(Location.sensor))
        .order_by(Location.name.asc())
        .all()
    )
    result = []
    for loc in locations:
        annotate_location(loc, with_counts=True)
        if noise_level and (loc.status is None or loc.status.noise_level != noise_level):
            continue
        if occupancy_level and (loc.status is None or loc.status.occupancy_level != occupancy_level):
            continue
        result.append(loc)
    return result


def get_location(db: Session, location_id: int) -> Optional[Location]:
    return (
        db.query(Location)
        .options(joinedload(Location.sensor))
        .filter(Location.id == location_id)
        .first()
    )


def create_location(db: Session, fields: dict, sensor_credentials: Optional[dict] = None) -> Location:
    """Create a location together with its sensor (noise 30, occupancy 0)."""
    validate_capacity(fields.get("capacity"))
    location = Location(**fields)
    creds = sensor_credentials or {}
    location.sensor = Sensor(
        current_noise_level=DEFAULT_NOISE_LEVEL,
        current_occupancy=0,
        **{k: creds.get(k) for k in _SENSOR_CREDENTIAL_FIELDS},
    )
    db.add(location)
    db.commit()
    db.refresh(location)
    logger.info(f"[LOCATION] Created {location.name} (capacity {location.capacity})")
    return location


def update_location(db: Session, location: Location, fields: dict,
                    sensor_credentials: Optional[dict] = None) -> Location:
    if "capacity" in fields:
        validate_capacity(fields["capacity"])
    for key, value in fields.items():
        setattr(location, key, value)
    clamp_occupancy_to_capacity(location)
    if sensor_credentials and location.sensor is not None:
        for key, value in sensor_credentials.items():
            setattr(location.sensor, key, value)
    db.commit()
    db.refresh(location)
    return location


def delete_location(db: Session, location: Location):
    name = location.name
    db.delete(location)
    db.commit()
    logger.info(f"[LOCATION] Deleted {name}")
