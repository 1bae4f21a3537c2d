"""Shared fakes for store, biometric and notification collaborators."""

import asyncio

import pytest

from moola.errors import PersistenceError


class MemoryStore:
    """In-memory KeyValueStore."""

    def __init__(self, data: dict[str, str] | None = None) -> None:
        self.data: dict[str, str] = dict(data or {})
        self.writes = 0

    async def get(self, key: str) -> str | None:
        return self.data.get(key)

    async def set(self, key: str, value: str) -> None:
        self.writes += 1
        self.data[key] = value

    async def remove(self, keys: list[str]) -> None:
        self.writes += 1
        for key in keys:
            self.data.pop(key, None)


class FailingStore(MemoryStore):
    """Store whose reads and/or writes raise PersistenceError."""

    def __init__(self, data: dict[str, str] | None = None, fail_reads: bool = True, fail_writes: bool = True) -> None:
        super().__init__(data)
        self.fail_reads = fail_reads
        self.fail_writes = fail_writes

    async def get(self, key: str) -> str | None:
        if self.fail_reads:
            raise PersistenceError("disk on fire")
        return await super().get(key)

    async def set(self, key: str, value: str) -> None:
        if self.fail_writes:
            raise PersistenceError("disk on fire")
        await super().set(key, value)

    async def remove(self, keys: list[str]) -> None:
        if self.fail_writes:
            raise PersistenceError("disk on fire")
        await super().remove(keys)


class HangingStore(MemoryStore):
    """Store whose reads never finish."""

    async def get(self, key: str) -> str | None:
        await asyncio.sleep(3600)
        return None


class FakeBiometrics:
    """Biometric gateway with a scripted answer."""

    def __init__(self, available: bool = True, succeed: bool = True) -> None:
        self.available = available
        self.succeed = succeed
        self.prompts: list[str] = []

    async def is_available(self) -> bool:
        return self.available

    async def authenticate(self, prompt: str) -> bool:
        self.prompts.append(prompt)
        return self.succeed

    def label(self) -> str:
        return "Face ID"


class FakeNotifications:
    """Notification gateway that records calls."""

    def __init__(self, granted: bool = True) -> None:
        self.granted = granted
        self.calls: list[tuple] = []

    async def request_permission(self) -> bool:
        self.calls.append(("request_permission",))
        return self.granted

    async def schedule_daily(self, hour: int, minute: int) -> None:
        self.calls.append(("schedule_daily", hour, minute))

    async def cancel_all(self) -> None:
        self.calls.append(("cancel_all",))


@pytest.fixture
def store() -> MemoryStore:
    return MemoryStore()


@pytest.fixture
def secure_store() -> MemoryStore:
    return MemoryStore()
