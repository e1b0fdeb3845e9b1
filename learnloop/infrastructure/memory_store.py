"""In-Memory Key-Value Store — dict-backed KeyValueStore for tests and ephemeral runs.

Invariants:
    - Read-your-writes within the process
    - Values are deep-copied on set and get: callers never share mutable state with the store
"""

import copy
from typing import Any


class InMemoryKeyValueStore:
    def __init__(self, initial: dict[str, Any] | None = None):
        self._data: dict[str, Any] = copy.deepcopy(initial) if initial else {}

    async def get(self, key: str) -> Any | None:
        return copy.deepcopy(self._data.get(key))

    async def set(self, key: str, value: Any) -> None:
        self._data[key] = copy.deepcopy(value)

    async def remove(self, key: str) -> None:
        self._data.pop(key, None)

    def keys(self) -> list[str]:
        return list(self._data)
