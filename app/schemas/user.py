# app/schemas/user.py
from pydantic import BaseModel
from datetime import datetime
from typing import Optional


class UserOut(BaseModel):
    id: int
    name: Optional[str]
    email: str
    role: str
    created_at: Optional[datetime]

    class Config:
        from_attributes = True
