# app/schemas/sensor.py
from pydantic import BaseModel, Field
from datetime import datetime
from typing import Optional
from app.schemas.location import LocationStatusOut, LocationSummary


class SensorCreate(BaseModel):
    location_id: int
    current_noise_level: int = Field(30, ge=0, le=100)
    current_occupancy: int = Field(0, ge=0)


class SensorUpdate(BaseModel):
    current_noise_level: Optional[int] = Field(None, ge=0, le=100)
    current_occupancy: Optional[int] = Field(None, ge=0)
    is_manual_override: Optional[bool] = None


class SensorOut(BaseModel):
    id: int
    location_id: int
    current_noise_level: int
    current_occupancy: int
    last_updated: Optional[datetime]
    is_manual_override: bool
    device_id: Optional[str] = None
    port: Optional[int] = None
    location: Optional[LocationSummary] = None
    status: Optional[LocationStatusOut] = None

    class Config:
        from_attributes = True


class SimulationOut(BaseModel):
    success: bool = True
    updated: int
    skipped: int
    timestamp: datetime
