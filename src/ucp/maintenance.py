"""Periodic purge of characters the game server marked as expired."""

from __future__ import annotations

import asyncio
from typing import TYPE_CHECKING

import structlog

from ucp.db.repository import StorageError, UcpRepository

if TYPE_CHECKING:
    from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

logger = structlog.get_logger()


async def purge_expired_characters(session_factory: async_sessionmaker[AsyncSession]) -> int:
    """Run one purge in its own session. Returns the number of rows deleted."""
    async with session_factory() as session:
        removed = await UcpRepository(session).purge_expired_characters()
    logger.info("expired_characters_purged", removed=removed)
    return removed


async def run_purge_loop(session_factory: async_sessionmaker[AsyncSession], interval_seconds: float) -> None:
    """Purge, then sleep ``interval_seconds``, until cancelled. Failures are retried next round."""
    while True:
        try:
            await purge_expired_characters(session_factory)
        except StorageError:
            logger.exception("expired_characters_purge_failed")
        await asyncio.sleep(interval_seconds)
