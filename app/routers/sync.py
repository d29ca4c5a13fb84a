# app/routers/sync.py
"""Ghent open-data location sync: manual (admin) and scheduled (cron) triggers + audit log."""

import httpx
from fastapi import APIRouter, Depends, HTTPException
from sqlalchemy.orm import Session
from app.database import get_db
from app.models.sync_log import SyncLog
from app.schemas.sync_log import SyncLogOut, SyncResultOut
from app.services.sync_service import sync_locations
from app.utils.auth import require_admin, verify_cron_secret
from app.utils.logger import get_logger

router = APIRouter()
logger = get_logger(__name__)


async def _run_sync(db: Session, source: str) -> SyncResultOut:
    try:
        result = await sync_locations(db, source=source)
    except httpx.HTTPError as e:
        # Already recorded in sync_logs by the service
        raise HTTPException(status_code=502, detail=f"Failed to sync locations: {e}")
    return SyncResultOut(total=result.total, created=result.created,
                         updated=result.updated, skipped=result.skipped)


@router.post("/admin/sync-locations", response_model=SyncResultOut, summary="Sync locations now",
             dependencies=[Depends(require_admin)])
async def manual_sync(db: Session = Depends(get_db)):
    return await _run_sync(db, source="Manual")


@router.get("/cron/sync-locations", response_model=SyncResultOut, summary="Scheduled location sync",
            dependencies=[Depends(verify_cron_secret)])
async def cron_sync(db: Session = Depends(get_db)):
    return await _run_sync(db, source="Cron")


@router.get("/admin/sync-logs", response_model=list[SyncLogOut], summary="Recent sync runs",
            dependencies=[Depends(require_admin)])
def list_sync_logs(limit: int = 20, sync_type: str = None, db: Session = Depends(get_db)):
    q = db.query(SyncLog)
    if sync_type:
        q = q.filter(SyncLog.sync_type == sync_type)
    return q.order_by(SyncLog.created_at.desc(), SyncLog.id.desc()).limit(limit).all()
