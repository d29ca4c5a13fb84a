# app/schemas/study_plan.py
from pydantic import BaseModel
from datetime import datetime
from typing import Optional
from app.schemas.location import LocationOut


class StudyPlanCreate(BaseModel):
    location_id: int
    start_time: datetime
    end_time: datetime
    notes: Optional[str] = None


class StudyPlanUpdate(BaseModel):
    location_id: Optional[int] = None
    start_time: Optional[datetime] = None
    end_time: Optional[datetime] = None
    notes: Optional[str] = None


class StudyPlanOut(BaseModel):
    id: int
    user_id: int
    location_id: int
    start_time: datetime
    end_time: datetime
    notes: Optional[str]
    created_at: Optional[datetime]
    location: Optional[LocationOut] = None

    class Config:
        from_attributes = True


class AlternativeOut(BaseModel):
    id: int
    name: str
    address: str
    distance: int           # metres
    noise_level: str
    available_seats: int

    class Config:
        from_attributes = True


class StudyPlanBookingOut(BaseModel):
    plan: StudyPlanOut
    warnings: list[str]
    alternatives: Optional[list[AlternativeOut]] = None   # only present when warnings fired
