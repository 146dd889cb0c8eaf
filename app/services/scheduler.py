import asyncio
import logging
from datetime import date
from typing import List, Optional

import httpx
from starlette.concurrency import run_in_threadpool

from app.core.config import settings
from app.database import SessionLocal
from app.services.barber_service import BarberService
from app.services.daily_summary_service import DailySummaryService
from app.utils.timeutils import local_now

logger = logging.getLogger(__name__)


def sweep_expired_blocks() -> List[str]:
    """Run one expiry sweep in its own session and return the unblocked names."""
    db = SessionLocal()
    try:
        return [barber.name for barber in BarberService.unblock_expired(db)]
    finally:
        db.close()


async def block_expiry_loop(interval_minutes: int = None):
    """Sweep once at startup, then every ``interval_minutes``."""
    interval = (interval_minutes or settings.BLOCK_SWEEP_INTERVAL_MINUTES) * 60
    while True:
        try:
            unblocked = await run_in_threadpool(sweep_expired_blocks)
            if unblocked:
                logger.info("Block sweep lifted %d block(s)", len(unblocked))
        except Exception:
            # the next tick retries; a failed sweep must not stop the loop
            logger.exception("Block expiry sweep failed")
        await asyncio.sleep(interval)


def send_daily_summaries(day: Optional[date] = None) -> List[str]:
    db = SessionLocal()
    try:
        return DailySummaryService.send_all(db, day)
    finally:
        db.close()


async def daily_summary_loop():
    """Send yesterday's summaries once a day, during ``DAILY_SUMMARY_HOUR``."""
    last_run = None
    while True:
        now = local_now()
        if now.hour == settings.DAILY_SUMMARY_HOUR and last_run != now.date():
            try:
                await run_in_threadpool(send_daily_summaries)
                last_run = now.date()
            except Exception:
                logger.exception("Daily summary run failed")
        await asyncio.sleep(900)


async def keep_alive():
    """Ping our own health endpoint so the Render instance does not idle out."""
    if not settings.IS_PRODUCTION:
        return

    await asyncio.sleep(30)
    while True:
        try:
            async with httpx.AsyncClient(timeout=30.0) as client:
                response = await client.get(f"{settings.RENDER_EXTERNAL_URL.rstrip('/')}/health")
                logger.debug("Keep-alive ping status %s", response.status_code)
        except Exception as e:
            logger.warning("Keep-alive ping failed: %s", e)
        await asyncio.sleep(600)
