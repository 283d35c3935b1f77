"""Pytest configuration and fixtures for unit tests."""

import pytest

from tests.unit.mocks import InMemoryTaskStore


@pytest.fixture
def in_memory_store():
    """Provides a fresh InMemoryTaskStore for each test."""
    return InMemoryTaskStore()


@pytest.fixture
def patched_db(monkeypatch, in_memory_store):
    """Patches src.core.db_client task persistence to use InMemoryTaskStore."""
    monkeypatch.setattr("src.core.db_client.load_tasks", in_memory_store.load_tasks)
    monkeypatch.setattr("src.core.db_client.save_tasks", in_memory_store.save_tasks)
    return in_memory_store
