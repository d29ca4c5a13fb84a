# app/routers/locations.py
"""Study locations: public reads with live status, admin-only writes."""

from typing import Optional
from fastapi import APIRouter, Depends, HTTPException, status
from sqlalchemy.orm import Session
from app.database import get_db
from app.schemas.location import LocationCreate, LocationOut, LocationUpdate
from app.services import location_service
from app.utils.auth import require_admin

router = APIRouter()


@router.get("/locations", response_model=list[LocationOut], summary="All locations with live status")
def list_locations(noise_level: Optional[str] = None, occupancy_level: Optional[str] = None,
                   db: Session = Depends(get_db)):
    """
    Every location ordered by name, with its sensor and derived status.
    Filter with noise_level=quiet|moderate|loud and occupancy_level=available|busy|full.
    """
    return location_service.list_locations(db, noise_level, occupancy_level)


@router.get("/locations/{location_id}", response_model=LocationOut)
def get_location(location_id: int, db: Session = Depends(get_db)):
    location = location_service.get_location(db, location_id)
    if not location:
        raise HTTPException(status_code=404, detail="Location not found")
    return location_service.annotate_location(location, with_counts=True)


@router.post("/locations", response_model=LocationOut, status_code=status.HTTP_201_CREATED,
             summary="Create a location and its sensor", dependencies=[Depends(require_admin)])
def create_location(body: LocationCreate, db: Session = Depends(get_db)):
    fields = body.model_dump(exclude={"sensor"})
    creds = body.sensor.model_dump() if body.sensor else None
    location = location_service.create_location(db, fields, creds)
    return location_service.annotate_location(location)


@router.put("/locations/{location_id}", response_model=LocationOut, dependencies=[Depends(require_admin)])
def update_location(location_id: int, body: LocationUpdate, db: Session = Depends(get_db)):
    location = location_service.get_location(db, location_id)
    if not location:
        raise HTTPException(status_code=404, detail="Location not found")
    fields = body.model_dump(exclude={"sensor"}, exclude_unset=True)
    creds = body.sensor.model_dump(exclude_unset=True) if body.sensor else None
    location = location_service.update_location(db, location, fields, creds)
    return location_service.annotate_location(location)


@router.delete("/locations/{location_id}", dependencies=[Depends(require_admin)])
def delete_location(location_id: int, db: Session = Depends(get_db)):
    """Deletes the location together with its sensor, favorites and study plans."""
    location = location_service.get_location(db, location_id)
    if not location:
        raise HTTPException(status_code=404, detail="Location not found")
    location_service.delete_location(db, location)
    return {"success": True}
