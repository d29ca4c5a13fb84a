# app/schemas/favorite.py
from pydantic import BaseModel
from datetime import datetime
from typing import Optional
from app.schemas.location import LocationOut


class FavoriteCreate(BaseModel):
    location_id: int


class FavoriteOut(BaseModel):
    id: int
    user_id: int
    location_id: int
    created_at: Optional[datetime]
    location: Optional[LocationOut] = None

    class Config:
        from_attributes = True
