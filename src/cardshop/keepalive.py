"""Periodic trivial read that keeps idle store connections from being reclaimed."""
import asyncio
import logging

from sqlalchemy import text

from . import database
from .errors import LedgerError

logger = logging.getLogger(__name__)


def ping(engine) -> bool:
    try:
        with database.session_scope(bind=engine) as db:
            db.execute(text("SELECT 1"))
    except LedgerError as exc:
        logger.warning("Keep-alive ping failed: %s", exc.__cause__ or exc)
        return False
    logger.debug("Keep-alive ping ok")
    return True


async def run_keepalive(engine, interval: float):
    """Ping every ``interval`` seconds until cancelled. Failures are only logged."""
    while True:
        await asyncio.sleep(interval)
        await asyncio.to_thread(ping, engine)
