"""Key-value store interface consumed by the netspace registries."""

from abc import ABC, abstractmethod
from typing import Any, Dict, List, Optional


class KeyValueStore(ABC):
    """
    Abstract synchronous key-value store keyed by string.

    get() returns None when the key is absent. No atomicity is promised
    across calls.
    """

    @abstractmethod
    def get(self, key: str) -> Optional[Dict[str, Any]]:
        """Get the value stored under key, or None."""
        ...

    @abstractmethod
    def set(self, key: str, value: Dict[str, Any]) -> None:
        """Insert or replace the value stored under key."""
        ...

    @abstractmethod
    def delete(self, key: str) -> None:
        """Remove key. Does nothing if it is absent."""
        ...

    @abstractmethod
    def keys(self) -> List[str]:
        """All stored keys in store order."""
        ...

    def all(self) -> Dict[str, Dict[str, Any]]:
        """Mapping of every key to its value, in store order."""
        result = {}
        for key in self.keys():
            value = self.get(key)
            if value is not None:
                result[key] = value
        return result

    def clear(self) -> None:
        """Remove every entry."""
        for key in self.keys():
            self.delete(key)
