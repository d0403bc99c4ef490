"""In-memory key-value store."""

import copy
from typing import Any, Dict, List, Optional

from .base import KeyValueStore


class MemoryKeyValueStore(KeyValueStore):
    """
    Dict-backed store. Keys are kept in insertion order.

    Values are deep-copied on the way in and out so callers never hold a
    reference into the store.
    """

    def __init__(self, name: str = "memory"):
        self.name = name
        self._data: Dict[str, Dict[str, Any]] = {}

    def get(self, key: str) -> Optional[Dict[str, Any]]:
        value = self._data.get(key)
        return copy.deepcopy(value) if value is not None else None

    def set(self, key: str, value: Dict[str, Any]) -> None:
        self._data[key] = copy.deepcopy(value)

    def delete(self, key: str) -> None:
        self._data.pop(key, None)

    def keys(self) -> List[str]:
        return list(self._data.keys())

    def clear(self) -> None:
        self._data.clear()

    def __len__(self) -> int:
        return len(self._data)
