# app/models/user.py
"""
Users table.
Identity only: password login and sessions are handled outside this service.
Role "admin" unlocks location/sensor management and sync endpoints.
"""

from datetime import datetime, timezone
from sqlalchemy import Column, Integer, String, DateTime
from sqlalchemy.orm import relationship
from app.database import Base

ROLE_USER = "user"
ROLE_ADMIN = "admin"


class User(Base):
    __tablename__ = "users"

    id = Column(Integer, primary_key=True, autoincrement=True)
    name = Column(String(200))
    email = Column(String(255), unique=True, nullable=False, index=True)
    role = Column(String(20), default=ROLE_USER, nullable=False)   # user | admin
    created_at = Column(DateTime(timezone=True), default=lambda: datetime.now(timezone.utc))

    favorites = relationship("Favorite", back_populates="user", cascade="all, delete-orphan")
    study_plans = relationship("StudyPlan", back_populates="user", cascade="all, delete-orphan")

    @property
    def is_admin(self) -> bool:
        return self.role == ROLE_ADMIN

    def __repr__(self):
        return f"<User {self.id} email={self.email} role={self.role}>"
