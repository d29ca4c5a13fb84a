# app/routers/health.py
"""
System health check endpoint.
Returns status of backend + DB + Ghent open-data API reachability.
"""

import requests
from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session
from sqlalchemy import text
from app.database import get_db
from app.config import settings
from datetime import datetime, timezone

router = APIRouter()


@router.get("/health", summary="System health check")
def health_check(db: Session = Depends(get_db)):
    """
    Returns:
    - Backend status
    - Database connectivity
    - Open data API reachability (used by the location sync)
    - Whether the in-process sensor simulation is enabled
    """
    result = {
        "status": "ok",
        "timestamp": datetime.now(timezone.utc).isoformat(),
        "backend": "ok",
        "database": "unknown",
        "open_data_api": "unknown",
        "simulation": "enabled" if settings.SIMULATION_ENABLED else "disabled",
    }

    try:
        db.execute(text("SELECT 1"))
        result["database"] = "ok"
    except Exception as e:
        result["database"] = f"error: {str(e)}"
        result["status"] = "degraded"

    # The sync is optional, so an unreachable API does not degrade the service
    try:
        resp = requests.get(settings.GHENT_API_URL, params={"limit": 1}, timeout=3)
        result["open_data_api"] = "ok" if resp.status_code == 200 else f"http_{resp.status_code}"
    except requests.exceptions.ConnectionError:
        result["open_data_api"] = "unreachable"
    except requests.exceptions.RequestException as e:
        result["open_data_api"] = f"error: {str(e)}"

    return result
