# app/services/sensor_scheduler.py
"""
Periodic sensor simulation: the in-process scheduled job.

Started once at backend startup (app/main.py). Every SIMULATION_INTERVAL_SECONDS
it runs one simulation batch in a worker thread with a fresh DB session, so the
event loop keeps serving requests while the batch holds row locks.
"""

import asyncio
from app.database import session_scope
from app.services.simulation_service import SimulationResult, run_simulation
from app.utils.logger import get_logger

logger = get_logger(__name__)

# Backoff after a failed batch (doubles on each failure, capped)
_MIN_BACKOFF = 5
_MAX_BACKOFF = 300


def _run_batch() -> SimulationResult:
    with session_scope() as db:
        return run_simulation(db)


async def start_simulation_loop(interval_seconds: int):
    """Loop forever: one batch, then sleep. Cancel the task to stop."""
    logger.info(f"📡 Sensor simulation started (every {interval_seconds}s)")
    backoff = _MIN_BACKOFF

    while True:
        try:
            await asyncio.to_thread(_run_batch)
            backoff = _MIN_BACKOFF
            await asyncio.sleep(interval_seconds)
        except asyncio.CancelledError:
            logger.info("🛑 Sensor simulation stopped")
            raise
        except Exception as e:
            logger.error(f"❌ Simulation batch failed: {e}. Retry in {backoff}s", exc_info=True)
            await asyncio.sleep(backoff)
            backoff = min(backoff * 2, _MAX_BACKOFF)
