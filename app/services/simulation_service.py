# app/services/simulation_service.py
"""
Simulation batch: one tick across every non-overridden sensor.

Single implementation behind all three triggers:
  - sensor_scheduler (periodic asyncio task)
  - POST /sensors/simulate and GET /cron/simulate-sensors
  - scripts/simulate_sensors.py

Each sensor row is re-read under SELECT ... FOR UPDATE and committed on its
own, so a tick never overwrites an admin edit that set the override flag
after the batch query ran.
"""

from dataclasses import dataclass
from datetime import datetime
from typing import Optional
from zoneinfo import ZoneInfo

from sqlalchemy.orm import Session

from app.config import settings
from app.models.sensor import Sensor
from app.services.sensor_simulator import RandomSource, SensorState, SimulatedLocation, tick
from app.utils.exceptions import InvalidCapacity
from app.utils.logger import get_logger

logger = get_logger(__name__)


@dataclass
class SimulationResult:
    updated: int
    skipped: int
    timestamp: datetime


def local_now() -> datetime:
    """Current time in the configured timezone (working hours follow local time)."""
    return datetime.now(ZoneInfo(settings.TIMEZONE))


def simulate_sensor(db: Session, sensor: Sensor, now: datetime,
                    rng: Optional[RandomSource] = None) -> bool:
    """Lock, re-check and tick one sensor. Returns True if it was written."""
    db.refresh(sensor, with_for_update=True)
    if sensor.is_manual_override:
        db.rollback()   # release the row lock
        logger.debug(f"[SIM] sensor {sensor.id} switched to manual override: skipped")
        return False

    location = sensor.location
    state = SensorState(
        noise=sensor.current_noise_level,
        occupancy=sensor.current_occupancy,
        overridden=sensor.is_manual_override,
        last_updated=sensor.last_updated,
    )
    new_state = tick(state, SimulatedLocation(location.capacity), now, rng)

    sensor.current_noise_level = new_state.noise
    sensor.current_occupancy = new_state.occupancy
    sensor.last_updated = new_state.last_updated
    db.commit()

    logger.debug(
        f"[SIM] {location.name}: noise={new_state.noise}% "
        f"occupancy={new_state.occupancy}/{location.capacity}"
    )
    return True


def run_simulation(db: Session, now: Optional[datetime] = None,
                   rng: Optional[RandomSource] = None) -> SimulationResult:
    """Run one tick over all sensors that are not in manual override."""
    now = now or local_now()
    sensors = db.query(Sensor).filter(Sensor.is_manual_override.is_(False)).all()

    updated = skipped = 0
    for sensor in sensors:
        try:
            if simulate_sensor(db, sensor, now, rng):
                updated += 1
            else:
                skipped += 1
        except InvalidCapacity as e:
            db.rollback()
            skipped += 1
            logger.error(f"[SIM] sensor {sensor.id} has an invalid location: {e}")

    logger.info(f"[SIM] Tick at {now.isoformat()}: updated {updated}, skipped {skipped}")
    return SimulationResult(updated=updated, skipped=skipped, timestamp=now)
