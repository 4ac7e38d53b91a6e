"""Tests for the expired character purge."""

import asyncio
from unittest.mock import AsyncMock, MagicMock

import pytest
from sqlalchemy import func, select

from ucp import maintenance
from ucp.db.models import Character, CharacterStatus
from ucp.db.repository import StorageError
from ucp.maintenance import purge_expired_characters, run_purge_loop


def _character(name: str, created: int) -> Character:
    return Character(username="alice", name=name, created=created, age=30, gender=1, origin="Romania", skin=98)


class TestPurge:
    async def test_purge_removes_expired_rows(self, session_factory):
        async with session_factory() as session:
            session.add_all(
                [
                    _character("Old_Timer", CharacterStatus.EXPIRED),
                    _character("Ana_Popescu", CharacterStatus.ACCEPTED),
                    _character("Ion_Popescu", CharacterStatus.PROPOSED),
                ]
            )
            await session.commit()

        assert await purge_expired_characters(session_factory) == 1

        async with session_factory() as session:
            names = (await session.execute(select(Character.name).order_by(Character.name))).scalars().all()
        assert names == ["Ana_Popescu", "Ion_Popescu"]

    async def test_purge_with_nothing_expired(self, session_factory):
        assert await purge_expired_characters(session_factory) == 0

    async def test_loop_purges_before_sleeping(self, session_factory, monkeypatch):
        async with session_factory() as session:
            session.add(_character("Old_Timer", CharacterStatus.EXPIRED))
            await session.commit()
        sleep = AsyncMock(side_effect=asyncio.CancelledError)
        monkeypatch.setattr(maintenance.asyncio, "sleep", sleep)

        with pytest.raises(asyncio.CancelledError):
            await run_purge_loop(session_factory, interval_seconds=3600)

        sleep.assert_awaited_once_with(3600)
        async with session_factory() as session:
            remaining = (await session.execute(select(func.count()).select_from(Character))).scalar()
        assert remaining == 0

    async def test_loop_survives_storage_failure(self, monkeypatch):
        purge = AsyncMock(side_effect=[StorageError("purge_expired_characters"), 0])
        sleep = AsyncMock(side_effect=[None, asyncio.CancelledError])
        monkeypatch.setattr(maintenance, "purge_expired_characters", purge)
        monkeypatch.setattr(maintenance.asyncio, "sleep", sleep)

        with pytest.raises(asyncio.CancelledError):
            await run_purge_loop(MagicMock(), interval_seconds=60)

        assert purge.await_count == 2
