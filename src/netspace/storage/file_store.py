"""
FileKeyValueStore: flat-file key-value store on top of fsspec.

Layout:
    <directory>/
    └── <name>.dat    # one JSON object per line: {"key": ..., "value": ...}

Every call reads the file again; nothing is cached between calls. Writes
go to <name>.dat.tmp first and then replace the data file.
"""

import json
import logging
from pathlib import Path
from typing import Any, Dict, List, Optional

import fsspec

from ..errors import StoreError
from .base import KeyValueStore

logger = logging.getLogger(__name__)


class FileKeyValueStore(KeyValueStore):
    """
    Key-value store persisted in a single flat file.

    MVP: Local filesystem
    """

    def __init__(self, name: str, directory: str):
        """
        Initialize FileKeyValueStore.

        Args:
            name: Store name (file is <name>.dat)
            directory: Directory holding the data file
        """
        self.name = name
        self.directory = Path(directory).resolve()
        self.path = self.directory / f"{name}.dat"
        self._tmp_path = self.directory / f"{name}.dat.tmp"

        self.fs = fsspec.filesystem("file")

        try:
            self.fs.makedirs(str(self.directory), exist_ok=True)
        except OSError as e:
            raise StoreError(f"Cannot create store directory {self.directory}: {e}") from e

        logger.debug(f"FileKeyValueStore initialized: {self.path}")

    # =========================================================================
    # File I/O
    # =========================================================================

    def _load(self) -> Dict[str, Dict[str, Any]]:
        """Read every entry from the data file."""
        data: Dict[str, Dict[str, Any]] = {}

        try:
            if not self.fs.exists(str(self.path)):
                return data

            with self.fs.open(str(self.path), "r", encoding="utf-8") as f:
                lines = f.read().splitlines()
        except OSError as e:
            raise StoreError(f"Cannot read store {self.path}: {e}") from e
        except UnicodeDecodeError as e:
            raise StoreError(f"Corrupt store {self.path}: not UTF-8 ({e})") from e

        for lineno, line in enumerate(lines, start=1):
            if not line.strip():
                continue
            try:
                record = json.loads(line)
                data[record["key"]] = record["value"]
            except (ValueError, KeyError, TypeError) as e:
                raise StoreError(f"Corrupt entry in {self.path} line {lineno}: {e}") from e

        return data

    def _save(self, data: Dict[str, Dict[str, Any]]) -> None:
        """Write every entry to a temp file and move it over the data file."""
        try:
            with self.fs.open(str(self._tmp_path), "w", encoding="utf-8") as f:
                for key, value in data.items():
                    f.write(json.dumps({"key": key, "value": value}) + "\n")
            self.fs.mv(str(self._tmp_path), str(self.path))
        except (OSError, TypeError, ValueError) as e:
            self._discard_tmp()
            raise StoreError(f"Cannot write store {self.path}: {e}") from e

        logger.debug(f"Saved {len(data)} entries to {self.path}")

    def _discard_tmp(self) -> None:
        try:
            if self.fs.exists(str(self._tmp_path)):
                self.fs.rm(str(self._tmp_path))
        except OSError as e:
            logger.warning(f"Cannot remove temp file {self._tmp_path}: {e}")

    # =========================================================================
    # KeyValueStore
    # =========================================================================

    def get(self, key: str) -> Optional[Dict[str, Any]]:
        return self._load().get(key)

    def set(self, key: str, value: Dict[str, Any]) -> None:
        data = self._load()
        data[key] = value
        self._save(data)

    def delete(self, key: str) -> None:
        data = self._load()
        if key not in data:
            return
        del data[key]
        self._save(data)

    def keys(self) -> List[str]:
        return list(self._load().keys())

    def all(self) -> Dict[str, Dict[str, Any]]:
        return self._load()

    def clear(self) -> None:
        """Remove the data file."""
        try:
            if self.fs.exists(str(self.path)):
                self.fs.rm(str(self.path))
        except OSError as e:
            raise StoreError(f"Cannot remove store {self.path}: {e}") from e

        logger.info(f"Cleared store: {self.path}")
