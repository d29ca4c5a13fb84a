# app/schemas/sync_log.py
from pydantic import BaseModel
from datetime import datetime
from typing import Optional


class SyncLogOut(BaseModel):
    id: int
    sync_type: str
    status: str
    record_count: Optional[int]
    message: Optional[str]
    created_at: datetime

    class Config:
        from_attributes = True


class SyncResultOut(BaseModel):
    success: bool = True
    total: int
    created: int
    updated: int
    skipped: int
