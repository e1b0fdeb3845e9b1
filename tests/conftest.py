"""Root conftest — shared test configuration."""

import os

import pytest

from learnloop.infrastructure.memory_store import InMemoryKeyValueStore

# Ensure tests never write to the default on-disk database
os.environ.setdefault(
    "LEARNLOOP_DATABASE_URL",
    "sqlite+aiosqlite:///:memory:",
)
os.environ.setdefault("LEARNLOOP_LOG_FORMAT", "text")


@pytest.fixture
def kv():
    """Fresh in-memory key-value store per test."""
    return InMemoryKeyValueStore()
