"""Server-side session store: expiry, renewal and destruction."""

import asyncio

import pytest

from portal.core.errors import SessionDestroyError
from portal.crud.sessions import SessionStore
from portal.db.migrate import run_migrations
from portal.db.session import build_engine, build_sessionmaker


class FakeClock:
    def __init__(self, start: float = 1_700_000_000.0) -> None:
        self.now = start

    def __call__(self) -> float:
        return self.now


def run_with_store(tmp_path, fn, *, max_age=600, clock=None):
    async def runner():
        engine = build_engine(f"sqlite+aiosqlite:///{tmp_path / 'sessions.db'}")
        await run_migrations(engine)
        store = SessionStore(build_sessionmaker(engine), max_age=max_age, clock=clock or FakeClock())
        try:
            return await fn(store)
        finally:
            await engine.dispose()

    return asyncio.run(runner())


def test_new_tokens_are_unique_and_opaque():
    tokens = {SessionStore.new_token() for _ in range(50)}
    assert len(tokens) == 50
    assert all(len(token) >= 40 for token in tokens)


def test_save_and_load_round_trip(tmp_path):
    async def scenario(store):
        await store.save("tok-1", {"user_id": 7, "username": "moviefan"})
        return await store.load("tok-1")

    assert run_with_store(tmp_path, scenario) == {"user_id": 7, "username": "moviefan"}


def test_unknown_or_empty_token_loads_nothing(tmp_path):
    async def scenario(store):
        return await store.load("never-issued"), await store.load(None), await store.load("")

    assert run_with_store(tmp_path, scenario) == (None, None, None)


def test_session_expires_after_idle_ttl(tmp_path):
    clock = FakeClock()

    async def scenario(store):
        await store.save("tok-1", {"user_id": 1})
        clock.now += 599
        alive = await store.load("tok-1")
        clock.now += 1
        expired = await store.load("tok-1")
        # expired rows are removed, not resurrected
        clock.now -= 100
        still_gone = await store.load("tok-1")
        return alive, expired, still_gone

    alive, expired, still_gone = run_with_store(tmp_path, scenario, max_age=600, clock=clock)
    assert alive == {"user_id": 1}
    assert expired is None
    assert still_gone is None


def test_saving_renews_the_idle_ttl(tmp_path):
    clock = FakeClock()

    async def scenario(store):
        await store.save("tok-1", {"user_id": 1})
        clock.now += 500
        await store.save("tok-1", {"user_id": 1, "flash_success": "hi"})
        clock.now += 500
        return await store.load("tok-1")

    assert run_with_store(tmp_path, scenario, max_age=600, clock=clock) == {"user_id": 1, "flash_success": "hi"}


def test_destroy_removes_the_row(tmp_path):
    async def scenario(store):
        await store.save("tok-1", {"user_id": 1})
        await store.destroy("tok-1")
        # destroying twice is harmless
        await store.destroy("tok-1")
        return await store.load("tok-1")

    assert run_with_store(tmp_path, scenario) is None


def test_purge_expired_only_removes_stale_rows(tmp_path):
    clock = FakeClock()

    async def scenario(store):
        await store.save("old", {"user_id": 1})
        clock.now += 300
        await store.save("fresh", {"user_id": 2})
        clock.now += 400
        purged = await store.purge_expired()
        return purged, await store.load("fresh")

    purged, fresh = run_with_store(tmp_path, scenario, max_age=600, clock=clock)
    assert purged == 1
    assert fresh == {"user_id": 2}


def test_destroy_failure_raises_session_destroy_error(tmp_path):
    async def scenario(store):
        # without the table the DELETE cannot run
        engine = build_engine(f"sqlite+aiosqlite:///{tmp_path / 'empty.db'}")
        broken = SessionStore(build_sessionmaker(engine), max_age=600)
        try:
            await broken.destroy("tok-1")
        finally:
            await engine.dispose()

    with pytest.raises(SessionDestroyError):
        run_with_store(tmp_path, scenario)
