# app/services/sensor_service.py
"""
Admin-side sensor writes.

The override flag is the only coordination point between admin edits and
the simulation tick, so values and flag are written together in one
transaction while the row is locked.
"""

from datetime import datetime, timezone
from typing import Optional

from sqlalchemy.orm import Session

from app.models.location import Location
from app.models.sensor import Sensor
from app.services.status_classifier import ensure_reading_in_range
from app.utils.logger import get_logger

logger = get_logger(__name__)

DEFAULT_NOISE_LEVEL = 30


def create_sensor(db: Session, location: Location, noise: int = DEFAULT_NOISE_LEVEL,
                  occupancy: int = 0, device_id: Optional[str] = None,
                  port: Optional[int] = None, password: Optional[str] = None) -> Sensor:
    ensure_reading_in_range(noise, occupancy)
    sensor = Sensor(
        location_id=location.id,
        current_noise_level=noise,
        current_occupancy=min(occupancy, location.capacity),
        last_updated=datetime.now(timezone.utc),
        device_id=device_id,
        port=port,
        password=password,
    )
    db.add(sensor)
    db.commit()
    db.refresh(sensor)
    logger.info(f"[SENSOR] Created sensor {sensor.id} for location {location.id}")
    return sensor


def update_sensor_values(db: Session, sensor: Sensor, noise: Optional[int] = None,
                         occupancy: Optional[int] = None,
                         manual_override: Optional[bool] = None) -> Sensor:
    """Set noise / occupancy / override atomically. Occupancy is clamped to capacity."""
    ensure_reading_in_range(noise, occupancy)
    db.refresh(sensor, with_for_update=True)

    if noise is not None:
        sensor.current_noise_level = noise
    if occupancy is not None:
        sensor.current_occupancy = min(occupancy, sensor.location.capacity)
    if manual_override is not None:
        sensor.is_manual_override = manual_override
    sensor.last_updated = datetime.now(timezone.utc)
    db.commit()
    db.refresh(sensor)

    logger.info(
        f"[SENSOR] {sensor.id} set by admin: noise={sensor.current_noise_level} "
        f"occupancy={sensor.current_occupancy} override={sensor.is_manual_override}"
    )
    return sensor


def clamp_occupancy_to_capacity(location: Location):
    """Keep the sensor within bounds after a capacity change."""
    sensor = location.sensor
    if sensor is not None and sensor.current_occupancy > location.capacity:
        sensor.current_occupancy = location.capacity
