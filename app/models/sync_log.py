# app/models/sync_log.py
"""
Append-only audit log of external data synchronisation runs.
Rows are never updated or deleted.
"""

from datetime import datetime, timezone
from sqlalchemy import Column, Integer, String, DateTime, Text
from app.database import Base

SYNC_SUCCESS = "success"
SYNC_ERROR = "error"


class SyncLog(Base):
    __tablename__ = "sync_logs"

    id = Column(Integer, primary_key=True, autoincrement=True)
    sync_type = Column(String(50), nullable=False, index=True)   # e.g. "locations"
    status = Column(String(20), nullable=False)                  # success | error
    record_count = Column(Integer)
    message = Column(Text)
    created_at = Column(DateTime(timezone=True), default=lambda: datetime.now(timezone.utc),
                        nullable=False, index=True)

    def __repr__(self):
        return f"<SyncLog {self.id} type={self.sync_type} status={self.status}>"
