import asyncio
from datetime import timedelta

import pytest

from scribo.features.notes.domain import NoteCreate
from scribo.features.notes.service import NoteService
from scribo.features.recycle_bin.sweeper import RecycleBinSweeper, retention_cutoff, sweep_expired
from scribo.utils.datetime_helper import utcnow
from tests.conftest import ALICE, BOB


async def _binned_note(session_factory, owner_id, title):
    async with session_factory() as session:
        service = NoteService(session)
        note = await service.create_note(owner_id, NoteCreate(title=title))
        return await service.soft_delete(note.id, owner_id)


async def _exists(session_factory, note_id) -> bool:
    async with session_factory() as session:
        return await NoteService(session).repository.get(note_id) is not None


def test_retention_cutoff():
    now = utcnow()
    assert retention_cutoff(now, 30) == now - timedelta(days=30)


async def test_sweep_purges_only_expired_notes(session_factory, users):
    note = await _binned_note(session_factory, ALICE, "old")

    # 29 days after deletion: kept
    async with session_factory() as session:
        purged = await sweep_expired(session, 30, now=note.deleted_at + timedelta(days=29))
    assert purged == 0
    assert await _exists(session_factory, note.id)

    # 31 days after deletion: purged
    async with session_factory() as session:
        purged = await sweep_expired(session, 30, now=note.deleted_at + timedelta(days=31))
    assert purged == 1
    assert not await _exists(session_factory, note.id)


async def test_sweep_spans_all_owners_and_skips_live_notes(session_factory, users):
    alice_note = await _binned_note(session_factory, ALICE, "alice")
    bob_note = await _binned_note(session_factory, BOB, "bob")
    async with session_factory() as session:
        live = await NoteService(session).create_note(ALICE, NoteCreate(title="live"))

    async with session_factory() as session:
        purged = await sweep_expired(session, 30, now=utcnow() + timedelta(days=31))

    assert purged == 2
    assert not await _exists(session_factory, alice_note.id)
    assert not await _exists(session_factory, bob_note.id)
    assert await _exists(session_factory, live.id)


async def test_sweeper_run_once_uses_clock(session_factory, users):
    note = await _binned_note(session_factory, ALICE, "old")
    sweeper = RecycleBinSweeper(
        session_factory,
        retention_days=30,
        clock=lambda: note.deleted_at + timedelta(days=31),
    )

    assert await sweeper.run_once() == 1
    assert not await _exists(session_factory, note.id)


async def test_sweeper_run_once_swallows_errors():
    def broken_factory():
        raise RuntimeError("database unavailable")

    sweeper = RecycleBinSweeper(broken_factory)

    assert await sweeper.run_once() is None


async def test_sweeper_keeps_running_after_failure():
    runs = []
    sleeps = []

    class FlakySweeper(RecycleBinSweeper):
        async def run_once(self):
            runs.append(len(runs))
            if len(runs) == 1:
                return await super().run_once()
            return 0

    def broken_factory():
        raise RuntimeError("database unavailable")

    async def fake_sleep(seconds):
        sleeps.append(seconds)
        if len(sleeps) == 3:
            raise asyncio.CancelledError()

    sweeper = FlakySweeper(broken_factory, interval_seconds=60, sleep=fake_sleep)

    with pytest.raises(asyncio.CancelledError):
        await sweeper.run_forever()

    assert len(runs) == 3
    assert sleeps == [60, 60, 60]


async def test_sweeper_start_and_stop(session_factory, users):
    first_run_done = asyncio.Event()

    async def sleep_until_cancelled(seconds):
        first_run_done.set()
        await asyncio.Event().wait()

    sweeper = RecycleBinSweeper(session_factory, interval_seconds=3600, sleep=sleep_until_cancelled)

    task = sweeper.start()
    assert sweeper.start() is task
    await asyncio.wait_for(first_run_done.wait(), timeout=5)
    assert sweeper.running

    await sweeper.stop()

    assert not sweeper.running
    assert task.done()
