from datetime import datetime

import pytest

from farmlog.farm_store import FarmStore
from farmlog.storage import MemoryBackend, StorageError

NOW = datetime(2026, 10, 19, 12, 0)


class CountingBackend(MemoryBackend):
    """Memory backend that remembers which keys were written, in order."""

    def __init__(self, initial=None):
        super().__init__(initial)
        self.writes = []

    def set(self, key, value):
        self.writes.append(key)
        super().set(key, value)


class FailingBackend(MemoryBackend):
    """Reads work, every write fails."""

    def set(self, key, value):
        raise StorageError(f"disk full while writing {key}")


@pytest.fixture
def now():
    return NOW


@pytest.fixture
def backend():
    return CountingBackend()


@pytest.fixture
def store(backend):
    return FarmStore(backend, clock=lambda: NOW)


@pytest.fixture
def changes(store):
    received = []
    store.subscribe(received.append)
    return received
