# app/models/sensor.py
"""
Sensor state table: exactly one row per location (may be absent).
Noise and occupancy are rewritten every simulation tick unless
is_manual_override is set by an admin.
device_id / port / password are administrative metadata only.
"""

from datetime import datetime, timezone
from sqlalchemy import Column, Integer, String, DateTime, Boolean, ForeignKey
from sqlalchemy.orm import relationship
from app.database import Base


class Sensor(Base):
    __tablename__ = "sensors"

    id = Column(Integer, primary_key=True, autoincrement=True)
    location_id = Column(Integer, ForeignKey("locations.id", ondelete="CASCADE"),
                         unique=True, nullable=False, index=True)
    current_noise_level = Column(Integer, default=30, nullable=False)   # 0-100
    current_occupancy = Column(Integer, default=0, nullable=False)      # 0-capacity
    last_updated = Column(DateTime(timezone=True), default=lambda: datetime.now(timezone.utc),
                          index=True)
    is_manual_override = Column(Boolean, default=False, nullable=False, index=True)
    device_id = Column(String(100))
    port = Column(Integer)
    password = Column(String(255))

    location = relationship("Location", back_populates="sensor")

    def __repr__(self):
        return (f"<Sensor {self.id} loc={self.location_id} noise={self.current_noise_level} "
                f"occ={self.current_occupancy} override={self.is_manual_override}>")
