# app/utils/exceptions.py
"""
Domain error taxonomy.
Raised by services before the pure core runs; mapped to HTTP 400 in app/main.py.
"""


class StudySpotError(Exception):
    """Base class for all domain validation errors."""


class InvalidRange(StudySpotError):
    """Noise outside [0, 100] or occupancy outside [0, capacity]."""


class InvalidCapacity(StudySpotError):
    """Location capacity must be a positive seat count."""


class InvalidTimeRange(StudySpotError):
    """Study plan end <= start, or start in the past."""
