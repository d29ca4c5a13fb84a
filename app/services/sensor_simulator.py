# app/services/sensor_simulator.py
"""
Sensor Simulator: advances one sensor's (noise, occupancy) state by one tick.
Pure: no DB access, randomness comes from an injected source.

Time-of-day model (local wall-clock hour of `now`):
  working hours   8 <= hour <= 22
  peak            10-12 and 14-17 (inclusive)

  base noise      25 off hours | 45 peak | 35 working non-peak
  fluctuation     floor(r*25) - 10            → [-10, +14]
  correlation     + round(occupancy/capacity * 20), applied after the first clamp
  occupancy delta -floor(r*5)                  → [-4, 0]   off hours
                  floor(r*10) - 3              → [-3, +6]  peak
                  floor(r*6) - 3               → [-3, +2]  working non-peak

Overridden sensors are frozen: tick() hands the input state straight back.
"""

import math
import random
from dataclasses import dataclass, replace
from datetime import datetime
from typing import Optional, Protocol

from app.services.status_classifier import NOISE_MAX, NOISE_MIN, clamp, round_half_up
from app.utils.exceptions import InvalidCapacity

WORK_START_HOUR = 8
WORK_END_HOUR = 22
PEAK_WINDOWS = ((10, 12), (14, 17))

BASE_NOISE_OFF_HOURS = 25
BASE_NOISE_PEAK = 45
BASE_NOISE_WORKING = 35

NOISE_OCCUPANCY_WEIGHT = 20


class RandomSource(Protocol):
    def random(self) -> float: ...


_default_rng = random.Random()


@dataclass(frozen=True)
class SensorState:
    noise: int
    occupancy: int
    overridden: bool = False
    last_updated: Optional[datetime] = None


@dataclass(frozen=True)
class SimulatedLocation:
    capacity: int

    def __post_init__(self):
        if self.capacity is None or self.capacity <= 0:
            raise InvalidCapacity(f"Location capacity must be positive, got {self.capacity}")


def is_working_hours(hour: int) -> bool:
    return WORK_START_HOUR <= hour <= WORK_END_HOUR


def is_peak_time(hour: int) -> bool:
    return any(start <= hour <= end for start, end in PEAK_WINDOWS)


def base_noise(hour: int) -> int:
    if not is_working_hours(hour):
        return BASE_NOISE_OFF_HOURS
    return BASE_NOISE_PEAK if is_peak_time(hour) else BASE_NOISE_WORKING


def _draw(rng: RandomSource, span: int) -> int:
    return math.floor(rng.random() * span)


def next_noise(current_occupancy: int, capacity: int, hour: int, rng: RandomSource) -> int:
    fluctuation = _draw(rng, 25) - 10
    noise = clamp(base_noise(hour) + fluctuation, NOISE_MIN, NOISE_MAX)
    ratio = current_occupancy / capacity
    return clamp(noise + round_half_up(ratio * NOISE_OCCUPANCY_WEIGHT), NOISE_MIN, NOISE_MAX)


def occupancy_delta(hour: int, rng: RandomSource) -> int:
    if not is_working_hours(hour):
        return -_draw(rng, 5)
    if is_peak_time(hour):
        return _draw(rng, 10) - 3
    return _draw(rng, 6) - 3


def tick(state: SensorState, location: SimulatedLocation, now: datetime,
         rng: Optional[RandomSource] = None) -> SensorState:
    """Return the sensor state one tick after `now`."""
    if state.overridden:
        return state

    rng = rng or _default_rng
    hour = now.hour

    # Noise first: it correlates with the occupancy *before* this tick's delta
    noise = next_noise(state.occupancy, location.capacity, hour, rng)
    occupancy = clamp(state.occupancy + occupancy_delta(hour, rng), 0, location.capacity)

    return replace(state, noise=noise, occupancy=occupancy, last_updated=now)
