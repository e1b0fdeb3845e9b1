"""Service test fixtures — hydrated stores over a fresh in-memory key-value store.

Invariants:
    - Every test gets its own InMemoryKeyValueStore (root conftest `kv`)
    - Stores are hydrated before the test runs, like open_* does in production
"""

import pytest

from learnloop.services.event_log import EventLog
from learnloop.services.lesson_store import ContentVersioningStore
from tests.services.mock_compiler import ScriptedContentCompiler


@pytest.fixture
async def event_log(kv):
    log = EventLog(kv)
    await log.hydrate()
    return log


@pytest.fixture
async def lesson_store(kv):
    store = ContentVersioningStore(kv)
    await store.hydrate()
    return store


@pytest.fixture
def scripted_compiler():
    return ScriptedContentCompiler()
