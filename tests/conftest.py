"""Shared pytest fixtures."""
from __future__ import annotations

import asyncio

import pytest

from services.local_storage import MemoryStorage
from services.sync_offline import OfflineSyncManager


class FakeClock:
    def __init__(self, start: int = 1_700_000_000_000):
        self.now = start

    def __call__(self) -> int:
        return self.now

    def advance(self, ms: int):
        self.now += ms


class ScriptedRemote:
    """
    Remote store whose answers are scripted per payload["n"].
    Unscripted payloads get ``default``; Exception outcomes are raised.
    """

    available = True

    def __init__(self, outcomes: dict | None = None, default=True, delay: float = 0):
        self.outcomes = {k: list(v) for k, v in (outcomes or {}).items()}
        self.default = default
        self.delay = delay
        self.calls: list[dict] = []

    async def write(self, payload):
        self.calls.append(payload)
        if self.delay:
            await asyncio.sleep(self.delay)
        key = payload.get("n") if isinstance(payload, dict) else None
        script = self.outcomes.get(key)
        result = script.pop(0) if script else self.default
        if isinstance(result, Exception):
            raise result
        return result


@pytest.fixture
def clock() -> FakeClock:
    return FakeClock()


@pytest.fixture
def storage() -> MemoryStorage:
    return MemoryStorage()


@pytest.fixture
def remote_factory():
    return ScriptedRemote


@pytest.fixture
def make_manager(storage, clock):
    """Build a manager (offline by default) on the shared storage and clock."""
    def _make(remote=None, store=None, **kwargs) -> OfflineSyncManager:
        return OfflineSyncManager(
            store if store is not None else storage,
            remote if remote is not None else ScriptedRemote(),
            clock=clock,
            **kwargs,
        )
    return _make
