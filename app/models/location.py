# app/models/location.py
"""
Study locations table.
Created by admins or by the Ghent open-data sync (external_id = "ghent-<recordid>").
Deleting a location removes its sensor, favorites and study plans.
"""

from datetime import datetime, timezone
from sqlalchemy import Column, Integer, String, Float, DateTime, Text, CheckConstraint
from sqlalchemy.orm import relationship
from app.database import Base


def _utcnow():
    return datetime.now(timezone.utc)


class Location(Base):
    __tablename__ = "locations"
    __table_args__ = (CheckConstraint("capacity > 0", name="ck_locations_capacity_positive"),)

    id = Column(Integer, primary_key=True, autoincrement=True)
    external_id = Column(String(100), unique=True, nullable=True, index=True)
    name = Column(String(255), nullable=False, index=True)
    address = Column(String(500), nullable=False)
    latitude = Column(Float, nullable=False)
    longitude = Column(Float, nullable=False)
    capacity = Column(Integer, default=50, nullable=False)   # seat count
    type = Column(String(100))
    website = Column(String(500))
    opening_hours = Column(Text)
    description = Column(Text)
    image_url = Column(String(500))
    created_at = Column(DateTime(timezone=True), default=_utcnow)
    updated_at = Column(DateTime(timezone=True), default=_utcnow, onupdate=_utcnow)

    sensor = relationship("Sensor", back_populates="location", uselist=False,
                          cascade="all, delete-orphan")
    favorites = relationship("Favorite", back_populates="location",
                             cascade="all, delete-orphan")
    study_plans = relationship("StudyPlan", back_populates="location",
                               cascade="all, delete-orphan")

    def __repr__(self):
        return f"<Location {self.id} name={self.name!r} capacity={self.capacity}>"
