# app/services/sync_service.py
"""
Ghent Open Data sync: block/study locations ("bloklocaties-gent").

Endpoint: GET {GHENT_API_URL}?limit={SYNC_RECORD_LIMIT} → {"total_count": n, "results": [...]}
Upsert key: external_id = "ghent-<record id>", so re-running a sync is idempotent.
New locations get a sensor with a random starting reading.
Every run appends one SyncLog row (success or error).
"""

import math
import random
from dataclasses import dataclass
from typing import Optional

import httpx
from sqlalchemy.orm import Session

from app.config import settings
from app.models.location import Location
from app.models.sensor import Sensor
from app.models.sync_log import SyncLog, SYNC_ERROR, SYNC_SUCCESS
from app.services.sensor_service import clamp_occupancy_to_capacity
from app.services.sensor_simulator import RandomSource
from app.utils.logger import get_logger

logger = get_logger(__name__)

SYNC_TYPE_LOCATIONS = "locations"
EXTERNAL_ID_PREFIX = "ghent-"

_default_rng = random.Random()


@dataclass
class SyncResult:
    total: int
    created: int
    updated: int
    skipped: int

    @property
    def summary(self) -> str:
        return f"Created {self.created}, Updated {self.updated}, Skipped {self.skipped}"


async def fetch_block_locations(url: Optional[str] = None, limit: Optional[int] = None,
                                transport: Optional[httpx.AsyncBaseTransport] = None) -> list[dict]:
    """Fetch raw records from the open-data API. Raises on HTTP errors."""
    url = url or settings.GHENT_API_URL
    limit = limit or settings.SYNC_RECORD_LIMIT
    async with httpx.AsyncClient(timeout=settings.SYNC_TIMEOUT_SECONDS, transport=transport) as client:
        response = await client.get(url, params={"limit": limit})
        response.raise_for_status()
        data = response.json()
    records = data.get("results") or []
    logger.info(f"[SYNC] Fetched {len(records)} records from open data API")
    return records


def record_to_location_fields(record: dict) -> Optional[dict]:
    """Map one API record to Location columns. None when it has no coordinates."""
    geo = record.get("geo_punt") or {}
    if geo.get("lat") is None or geo.get("lon") is None:
        return None
    capacity = record.get("totale_capaciteit")
    if not capacity or capacity <= 0:
        capacity = settings.DEFAULT_LOCATION_CAPACITY
    return {
        "name": record.get("titel") or "Unknown Location",
        "address": record.get("adres") or "Ghent",
        "latitude": geo["lat"],
        "longitude": geo["lon"],
        "capacity": capacity,
        "type": record.get("label_1"),
        "website": record.get("lees_meer"),
        "opening_hours": record.get("openingsuren"),
        "description": record.get("teaser_text"),
        "image_url": record.get("teaser_img_url"),
    }


def initial_sensor(location: Location, rng: RandomSource) -> Sensor:
    """Starting reading for a freshly synced location: noise 20-59, occupancy below half."""
    return Sensor(
        location=location,
        current_noise_level=math.floor(rng.random() * 40) + 20,
        current_occupancy=math.floor(rng.random() * (location.capacity * 0.5)),
    )


def upsert_locations(db: Session, records: list[dict],
                     rng: Optional[RandomSource] = None) -> SyncResult:
    rng = rng or _default_rng
    result = SyncResult(total=len(records), created=0, updated=0, skipped=0)

    for record in records:
        fields = record_to_location_fields(record)
        if fields is None:
            logger.warning(f"[SYNC] Skipping {record.get('titel')!r}: no coordinates")
            result.skipped += 1
            continue

        external_id = f"{EXTERNAL_ID_PREFIX}{record.get('id')}"
        location = db.query(Location).filter(Location.external_id == external_id).first()
        if location:
            for key, value in fields.items():
                setattr(location, key, value)
            clamp_occupancy_to_capacity(location)
            result.updated += 1
            logger.debug(f"[SYNC] Updated: {fields['name']}")
        else:
            location = Location(external_id=external_id, **fields)
            db.add(location)
            db.add(initial_sensor(location, rng))
            result.created += 1
            logger.debug(f"[SYNC] Created: {fields['name']}")

    db.commit()
    return result


def _log_sync(db: Session, status: str, message: str, record_count: Optional[int] = None):
    db.add(SyncLog(sync_type=SYNC_TYPE_LOCATIONS, status=status,
                   record_count=record_count, message=message))
    db.commit()


async def sync_locations(db: Session, records: Optional[list[dict]] = None,
                         rng: Optional[RandomSource] = None, source: str = "") -> SyncResult:
    """
    Fetch (unless records are given) and upsert. The outcome is always recorded
    in sync_logs; on failure the error is re-raised after logging.
    """
    prefix = f"{source} sync: " if source else ""
    try:
        if records is None:
            records = await fetch_block_locations()
        result = upsert_locations(db, records, rng)
    except Exception as e:
        db.rollback()
        logger.error(f"[SYNC] ❌ Location sync failed: {e}")
        _log_sync(db, SYNC_ERROR, f"{prefix}{e}")
        raise

    _log_sync(db, SYNC_SUCCESS, f"{prefix}{result.summary}", record_count=result.total)
    logger.info(f"[SYNC] ✅ {result.total} records: {result.summary}")
    return result
