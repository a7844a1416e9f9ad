"""
utils/storage.py
-----------------

Durable key/value stores used by the product cache when persistence
is enabled.  A store only needs three synchronous operations:
``read(name)``, ``write(name, text)`` and ``remove(name)``.  Errors
are allowed to propagate; the cache catches and logs them.
"""

from __future__ import annotations

import os
from pathlib import Path
from typing import Dict, Optional, Protocol


class DurableStore(Protocol):
    """Minimal text record store."""

    def read(self, name: str) -> Optional[str]: ...

    def write(self, name: str, text: str) -> None: ...

    def remove(self, name: str) -> None: ...


class FileStore:
    """Stores each record as ``<directory>/<name>.json``.

    The directory is created on the first write.  Writes go through a
    temporary file and ``os.replace`` so a crash never leaves half a
    record behind.
    """

    def __init__(self, directory: str | os.PathLike[str]) -> None:
        self.directory = Path(directory)

    def _path(self, name: str) -> Path:
        return self.directory / f"{name}.json"

    def read(self, name: str) -> Optional[str]:
        path = self._path(name)
        if not path.exists():
            return None
        return path.read_text(encoding="utf-8")

    def write(self, name: str, text: str) -> None:
        self.directory.mkdir(parents=True, exist_ok=True)
        path = self._path(name)
        tmp = path.with_suffix(".json.tmp")
        tmp.write_text(text, encoding="utf-8")
        os.replace(tmp, path)

    def remove(self, name: str) -> None:
        self._path(name).unlink(missing_ok=True)


class MemoryStore:
    """Dict backed store, handy for tests and for throwaway processes."""

    def __init__(self) -> None:
        self.records: Dict[str, str] = {}

    def read(self, name: str) -> Optional[str]:
        return self.records.get(name)

    def write(self, name: str, text: str) -> None:
        self.records[name] = text

    def remove(self, name: str) -> None:
        self.records.pop(name, None)
