"""
Key-value stores backing the netspace registries.

Components:
- base: KeyValueStore interface
- memory_store: dict-backed store (tests, --memory)
- file_store: fsspec flat-file store
"""

from .base import KeyValueStore
from .file_store import FileKeyValueStore
from .memory_store import MemoryKeyValueStore

__all__ = [
    "KeyValueStore",
    "FileKeyValueStore",
    "MemoryKeyValueStore",
]
