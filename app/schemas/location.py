# app/schemas/location.py
from pydantic import BaseModel, Field, field_validator
from datetime import datetime
from typing import Optional


class SensorCredentials(BaseModel):
    device_id: Optional[str] = None
    port: Optional[int] = None
    password: Optional[str] = None


class LocationStatusOut(BaseModel):
    noise_level: str            # quiet | moderate | loud
    occupancy_level: str        # available | busy | full
    noise_percentage: int
    occupancy_percentage: int
    available_seats: int
    color: str                  # green | yellow | red

    class Config:
        from_attributes = True


class LocationSensorOut(BaseModel):
    id: int
    current_noise_level: int
    current_occupancy: int
    last_updated: Optional[datetime]
    is_manual_override: bool
    device_id: Optional[str] = None
    port: Optional[int] = None

    class Config:
        from_attributes = True


class LocationCreate(BaseModel):
    name: str = Field(..., min_length=2)
    address: str = Field(..., min_length=5)
    latitude: float = Field(..., ge=-90, le=90)
    longitude: float = Field(..., ge=-180, le=180)
    capacity: int = Field(50, ge=1)
    description: Optional[str] = None
    type: Optional[str] = None
    website: Optional[str] = None
    opening_hours: Optional[str] = None
    sensor: Optional[SensorCredentials] = None


class LocationUpdate(BaseModel):
    name: Optional[str] = Field(None, min_length=2)
    address: Optional[str] = Field(None, min_length=5)
    latitude: Optional[float] = Field(None, ge=-90, le=90)
    longitude: Optional[float] = Field(None, ge=-180, le=180)
    capacity: Optional[int] = Field(None, ge=1)
    description: Optional[str] = None
    type: Optional[str] = None
    website: Optional[str] = None
    opening_hours: Optional[str] = None
    sensor: Optional[SensorCredentials] = None

    @field_validator("name", "address", "latitude", "longitude", "capacity")
    @classmethod
    def not_null(cls, value, info):
        # may be omitted, but not cleared
        if value is None:
            raise ValueError(f"{info.field_name} cannot be null")
        return value


class LocationOut(BaseModel):
    id: int
    external_id: Optional[str]
    name: str
    address: str
    latitude: float
    longitude: float
    capacity: int
    type: Optional[str]
    website: Optional[str]
    opening_hours: Optional[str]
    description: Optional[str]
    image_url: Optional[str] = None
    sensor: Optional[LocationSensorOut] = None
    status: Optional[LocationStatusOut] = None
    favorites_count: Optional[int] = None
    study_plans_count: Optional[int] = None

    class Config:
        from_attributes = True


class LocationSummary(BaseModel):
    id: int
    name: str
    address: str
    capacity: int

    class Config:
        from_attributes = True
