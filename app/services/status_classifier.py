# app/services/status_classifier.py
"""
Status Classifier: maps a raw (noise, occupancy, capacity) reading to
UI-facing levels. Pure functions, no DB access.

Status is re-derived from the stored sensor values on every read and never persisted.

  noise:      quiet <= 40 < moderate <= 70 < loud
  occupancy:  available <= 60% < busy <= 90% < full
"""

import math
from dataclasses import dataclass
from typing import Optional

from app.utils.exceptions import InvalidRange

QUIET = "quiet"
MODERATE = "moderate"
LOUD = "loud"

AVAILABLE = "available"
BUSY = "busy"
FULL = "full"

QUIET_MAX_NOISE = 40
MODERATE_MAX_NOISE = 70
AVAILABLE_MAX_PERCENT = 60
BUSY_MAX_PERCENT = 90

NOISE_MIN, NOISE_MAX = 0, 100


@dataclass(frozen=True)
class LocationStatus:
    noise_level: str
    occupancy_level: str
    noise_percentage: int
    occupancy_percentage: int
    available_seats: int

    @property
    def color(self) -> str:
        return status_color(self.noise_level, self.occupancy_level)


def round_half_up(value: float) -> int:
    """Round .5 away from zero for positive values (Python's round() is banker's rounding)."""
    return int(math.floor(value + 0.5))


def clamp(value: int, low: int, high: int) -> int:
    return max(low, min(high, value))


def noise_level(noise: int) -> str:
    if noise <= QUIET_MAX_NOISE:
        return QUIET
    if noise <= MODERATE_MAX_NOISE:
        return MODERATE
    return LOUD


def occupancy_percentage(occupancy: int, capacity: int) -> int:
    # integer form of round_half_up(100 * occupancy / capacity), exact at .5
    return (200 * occupancy + capacity) // (2 * capacity)


def occupancy_level(occupancy: int, capacity: int) -> str:
    percent = occupancy_percentage(occupancy, capacity)
    if percent <= AVAILABLE_MAX_PERCENT:
        return AVAILABLE
    if percent <= BUSY_MAX_PERCENT:
        return BUSY
    return FULL


def classify(noise: int, occupancy: int, capacity: int) -> LocationStatus:
    """
    Classify one reading. Callers guarantee 0 <= noise <= 100,
    0 <= occupancy <= capacity and capacity > 0.
    """
    return LocationStatus(
        noise_level=noise_level(noise),
        occupancy_level=occupancy_level(occupancy, capacity),
        noise_percentage=noise,
        occupancy_percentage=occupancy_percentage(occupancy, capacity),
        available_seats=max(0, capacity - occupancy),
    )


def status_color(noise: str, occupancy: str) -> str:
    """Composite alert colour. Red wins over yellow, yellow over green."""
    if noise == LOUD or occupancy == FULL:
        return "red"
    if noise == MODERATE or occupancy == BUSY:
        return "yellow"
    return "green"


def ensure_reading_in_range(noise: Optional[int], occupancy: Optional[int],
                            capacity: Optional[int] = None):
    """Reject raw input values that must not be silently clamped."""
    if noise is not None and not NOISE_MIN <= noise <= NOISE_MAX:
        raise InvalidRange(f"Noise level must be between {NOISE_MIN} and {NOISE_MAX}, got {noise}")
    if occupancy is not None and occupancy < 0:
        raise InvalidRange(f"Occupancy cannot be negative, got {occupancy}")
    if occupancy is not None and capacity is not None and occupancy > capacity:
        raise InvalidRange(f"Occupancy {occupancy} exceeds capacity {capacity}")


def status_for_sensor(sensor, capacity: int) -> Optional[LocationStatus]:
    """
    Classify a stored sensor row. Stored values can drift out of range
    (e.g. capacity lowered after the last tick), so they are clamped first.
    Returns None when the location has no sensor.
    """
    if sensor is None or not capacity or capacity <= 0:
        return None
    noise = clamp(sensor.current_noise_level, NOISE_MIN, NOISE_MAX)
    occupancy = clamp(sensor.current_occupancy, 0, capacity)
    return classify(noise, occupancy, capacity)


def status_for_location(location) -> Optional[LocationStatus]:
    return status_for_sensor(location.sensor, location.capacity)
