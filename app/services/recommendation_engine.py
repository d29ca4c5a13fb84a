# app/services/recommendation_engine.py
"""
Recommendation Engine: runs once per new study plan request.

Flags the target location when it is loud, busy or full, and only then
proposes up to three nearby alternatives that are neither loud nor full,
ranked by great-circle (Haversine) distance from the target.
"""

import math
from dataclasses import dataclass, field
from typing import Iterable, Optional

from app.services.status_classifier import (
    BUSY, FULL, LOUD, LocationStatus, classify, round_half_up,
)
from app.services.sensor_simulator import SimulatedLocation

EARTH_RADIUS_KM = 6371.0
MAX_ALTERNATIVES = 3

WARNING_LOUD = "⚠️ This location is currently loud"
WARNING_FULL = "⚠️ This location is currently full (no seats available)"
WARNING_BUSY = "ℹ️ This location is busy ({seats} seats remaining)"


@dataclass(frozen=True)
class LocationSnapshot:
    """Immutable view of a location plus its sensor reading (None when it has no sensor)."""
    id: int
    name: str
    address: str
    latitude: float
    longitude: float
    capacity: int
    noise: Optional[int] = None
    occupancy: Optional[int] = None

    def __post_init__(self):
        SimulatedLocation(self.capacity)   # raises InvalidCapacity

    @property
    def has_sensor(self) -> bool:
        return self.noise is not None and self.occupancy is not None

    @property
    def status(self) -> Optional[LocationStatus]:
        if not self.has_sensor:
            return None
        return classify(self.noise, self.occupancy, self.capacity)


@dataclass(frozen=True)
class Alternative:
    id: int
    name: str
    address: str
    distance: int          # metres
    noise_level: str
    available_seats: int


@dataclass
class Recommendation:
    warnings: list[str] = field(default_factory=list)
    alternatives: list[Alternative] = field(default_factory=list)


def haversine_m(lat1: float, lon1: float, lat2: float, lon2: float) -> float:
    """Great-circle distance in metres between two WGS84 points given in degrees."""
    d_lat = math.radians(lat2 - lat1)
    d_lon = math.radians(lon2 - lon1)
    a = (math.sin(d_lat / 2) ** 2
         + math.cos(math.radians(lat1)) * math.cos(math.radians(lat2)) * math.sin(d_lon / 2) ** 2)
    c = 2 * math.atan2(math.sqrt(a), math.sqrt(1 - a))
    return EARTH_RADIUS_KM * c * 1000


def build_warnings(status: Optional[LocationStatus]) -> list[str]:
    if status is None:
        return []
    warnings = []
    if status.noise_level == LOUD:
        warnings.append(WARNING_LOUD)
    if status.occupancy_level == FULL:
        warnings.append(WARNING_FULL)
    elif status.occupancy_level == BUSY:
        warnings.append(WARNING_BUSY.format(seats=status.available_seats))
    return warnings


def find_alternatives(target: LocationSnapshot, candidates: Iterable[LocationSnapshot],
                      limit: int = MAX_ALTERNATIVES) -> list[Alternative]:
    ranked = []
    for loc in candidates:
        if loc.id == target.id or not loc.has_sensor:
            continue
        status = loc.status
        if status.noise_level == LOUD or status.occupancy_level == FULL:
            continue
        distance = haversine_m(target.latitude, target.longitude, loc.latitude, loc.longitude)
        ranked.append((distance, loc, status))

    ranked.sort(key=lambda item: item[0])
    return [
        Alternative(
            id=loc.id,
            name=loc.name,
            address=loc.address,
            distance=round_half_up(distance),
            noise_level=status.noise_level,
            available_seats=status.available_seats,
        )
        for distance, loc, status in ranked[:limit]
    ]


def evaluate(target: LocationSnapshot, target_status: Optional[LocationStatus],
             candidates: Iterable[LocationSnapshot]) -> Recommendation:
    """
    Warnings for the target plus alternatives when at least one warning fired.
    A target without a sensor (status None) is unknown, not unsafe: nothing is flagged.
    """
    warnings = build_warnings(target_status)
    if not warnings:
        return Recommendation()
    return Recommendation(warnings=warnings, alternatives=find_alternatives(target, candidates))
