"""Pytest configuration and shared fixtures."""

from pathlib import Path
from typing import AsyncGenerator

import pytest
import pytest_asyncio
from fastapi.testclient import TestClient

from sheetsync.api import create_app
from sheetsync.config import Settings
from sheetsync.store import MemoryStore, SQLiteStore


class RecordingStore(MemoryStore):
    """Memory store that records every call made to it."""

    def __init__(self, fail_on: tuple = ()):
        super().__init__()
        self.calls: list[tuple] = []
        self.fail_on = fail_on

    async def read_formulas(self, name):
        self.calls.append(("read_formulas", name))
        return await super().read_formulas(name)

    async def update_cell(self, name, cell_id, formula):
        self.calls.append(("update_cell", name, cell_id, formula))
        if ("update_cell", cell_id) in self.fail_on:
            raise RuntimeError(f"store failure writing {cell_id}")
        await super().update_cell(name, cell_id, formula)

    async def clear(self, name):
        self.calls.append(("clear", name))
        await super().clear(name)

    async def delete(self, name, cell_id):
        self.calls.append(("delete", name, cell_id))
        await super().delete(name, cell_id)

    @property
    def mutations(self) -> list[tuple]:
        return [c for c in self.calls if c[0] != "read_formulas"]


@pytest.fixture
def mock_settings(tmp_path: Path) -> Settings:
    """Create settings with test values."""
    return Settings(
        store_backend="memory",
        database_path=tmp_path / "test.db",
        store_url="http://testserver",
        host="127.0.0.1",
        port=8000,
        debug=False,
        cors_allow_origins=["*"],
    )


@pytest.fixture
def make_store():
    """Factory for recording stores, optionally failing on given writes."""
    return RecordingStore


@pytest.fixture
def store() -> RecordingStore:
    return RecordingStore()


@pytest.fixture
def app(store):
    return create_app(store=store)


@pytest.fixture
def client(app) -> TestClient:
    """Test client that reports server errors as responses."""
    return TestClient(app, raise_server_exceptions=False)


@pytest_asyncio.fixture
async def sqlite_store(tmp_path: Path) -> AsyncGenerator[SQLiteStore, None]:
    """Create a sqlite store in a temporary directory."""
    store = SQLiteStore(tmp_path / "cells.db")
    await store.initialize()
    yield store
    await store.close()


# Configure pytest-asyncio
def pytest_configure(config):
    """Configure pytest with asyncio settings."""
    config.addinivalue_line("markers", "asyncio: mark test as async")
