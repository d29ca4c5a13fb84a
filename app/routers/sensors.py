# app/routers/sensors.py
"""Sensors: reads, admin edits (with manual override) and simulation triggers."""

from fastapi import APIRouter, Depends, HTTPException, status
from sqlalchemy.orm import Session, joinedload
from app.database import get_db
from app.models.location import Location
from app.models.sensor import Sensor
from app.schemas.sensor import SensorCreate, SensorOut, SensorUpdate, SimulationOut
from app.services import sensor_service
from app.services.simulation_service import run_simulation
from app.services.status_classifier import status_for_sensor
from app.utils.auth import require_admin, verify_cron_secret

router = APIRouter()


def _with_status(sensor: Sensor) -> Sensor:
    sensor.status = status_for_sensor(sensor, sensor.location.capacity)
    return sensor


def _get_sensor_or_404(db: Session, sensor_id: int) -> Sensor:
    sensor = (
        db.query(Sensor)
        .options(joinedload(Sensor.location))
        .filter(Sensor.id == sensor_id)
        .first()
    )
    if not sensor:
        raise HTTPException(status_code=404, detail="Sensor not found")
    return sensor


@router.get("/sensors", response_model=list[SensorOut], summary="All sensors, most recently updated first")
def list_sensors(db: Session = Depends(get_db)):
    sensors = (
        db.query(Sensor)
        .options(joinedload(Sensor.location))
        .order_by(Sensor.last_updated.desc())
        .all()
    )
    return [_with_status(s) for s in sensors]


@router.get("/sensors/{sensor_id}", response_model=SensorOut)
def get_sensor(sensor_id: int, db: Session = Depends(get_db)):
    return _with_status(_get_sensor_or_404(db, sensor_id))


@router.post("/sensors", response_model=SensorOut, status_code=status.HTTP_201_CREATED,
             dependencies=[Depends(require_admin)])
def create_sensor(body: SensorCreate, db: Session = Depends(get_db)):
    location = db.query(Location).filter(Location.id == body.location_id).first()
    if not location:
        raise HTTPException(status_code=404, detail="Location not found")
    if location.sensor:
        raise HTTPException(status_code=400, detail="Location already has a sensor")
    sensor = sensor_service.create_sensor(db, location, body.current_noise_level, body.current_occupancy)
    return _with_status(sensor)


@router.put("/sensors/{sensor_id}", response_model=SensorOut, dependencies=[Depends(require_admin)])
def update_sensor(sensor_id: int, body: SensorUpdate, db: Session = Depends(get_db)):
    """
    Set live values by hand. Pass is_manual_override=true to freeze them
    against the simulator, false to hand the sensor back to it.
    """
    sensor = _get_sensor_or_404(db, sensor_id)
    sensor = sensor_service.update_sensor_values(
        db, sensor,
        noise=body.current_noise_level,
        occupancy=body.current_occupancy,
        manual_override=body.is_manual_override,
    )
    return _with_status(sensor)


@router.delete("/sensors/{sensor_id}", dependencies=[Depends(require_admin)])
def delete_sensor(sensor_id: int, db: Session = Depends(get_db)):
    sensor = _get_sensor_or_404(db, sensor_id)
    db.delete(sensor)
    db.commit()
    return {"success": True}


@router.post("/sensors/simulate", response_model=SimulationOut, summary="Run one simulation tick now",
             dependencies=[Depends(require_admin)])
def simulate_now(db: Session = Depends(get_db)):
    result = run_simulation(db)
    return SimulationOut(updated=result.updated, skipped=result.skipped, timestamp=result.timestamp)


@router.get("/cron/simulate-sensors", response_model=SimulationOut, summary="Scheduled simulation tick",
            dependencies=[Depends(verify_cron_secret)])
def cron_simulate(db: Session = Depends(get_db)):
    result = run_simulation(db)
    return SimulationOut(updated=result.updated, skipped=result.skipped, timestamp=result.timestamp)
