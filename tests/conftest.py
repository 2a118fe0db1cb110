"""Shared fixtures for AdBoard tests."""

import tempfile
from pathlib import Path

import pytest_asyncio

from storage import SQLiteStore


@pytest_asyncio.fixture
async def temp_store():
    """Create a temporary SQLite store for testing."""
    with tempfile.TemporaryDirectory() as tmpdir:
        db_path = Path(tmpdir) / "test.db"
        store = SQLiteStore(db_path=str(db_path))
        await store.initialize()
        yield store
