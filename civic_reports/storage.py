"""Key-value persistence slot, the stand-in for browser local storage.

Values are strings stored under string keys. FileStorage keeps every key in
one JSON object file; MemoryStorage keeps them in a dict. Both enforce a
total size quota the way a browser does.
"""

import json
import logging
import os
from abc import ABC, abstractmethod
from pathlib import Path
from typing import Dict

DEFAULT_QUOTA_BYTES = 5 * 1024 * 1024

LOG = logging.getLogger("civic_reports.storage")


class StorageError(Exception):
    """Raised when the key-value store cannot be used."""

    pass


class PersistenceReadError(StorageError):
    """Stored data is unreadable or corrupt."""

    pass


class PersistenceWriteError(StorageError):
    """A write to the store did not succeed."""

    pass


class QuotaExceededError(PersistenceWriteError):
    """A write would push the store past its size quota."""

    def __init__(self, needed: int, quota: int) -> None:
        super().__init__(f"storage quota exceeded: {needed} bytes needed, quota is {quota}")
        self.needed = needed
        self.quota = quota


def _usage(items: Dict[str, str]) -> int:
    return sum(len(k.encode("utf-8")) + len(v.encode("utf-8")) for k, v in items.items())


class KeyValueStorage(ABC):
    """Abstract string key-value store (getItem / setItem / removeItem / clear)."""

    def __init__(self, quota_bytes: int | None = DEFAULT_QUOTA_BYTES) -> None:
        self.quota_bytes = quota_bytes

    @abstractmethod
    def get_item(self, key: str) -> str | None:
        """Return the value under key, or None if absent."""
        ...

    @abstractmethod
    def set_item(self, key: str, value: str) -> None:
        """Store value under key, replacing any previous value."""
        ...

    @abstractmethod
    def remove_item(self, key: str) -> None:
        """Delete key if present."""
        ...

    @abstractmethod
    def clear(self) -> None:
        """Delete every key."""
        ...

    def _check_quota(self, items: Dict[str, str]) -> None:
        if self.quota_bytes is None:
            return
        needed = _usage(items)
        if needed > self.quota_bytes:
            raise QuotaExceededError(needed, self.quota_bytes)


class MemoryStorage(KeyValueStorage):
    """Dict-backed store, lost at process exit."""

    def __init__(self, quota_bytes: int | None = None) -> None:
        super().__init__(quota_bytes)
        self._items: Dict[str, str] = {}

    def get_item(self, key: str) -> str | None:
        return self._items.get(key)

    def set_item(self, key: str, value: str) -> None:
        updated = {**self._items, key: value}
        self._check_quota(updated)
        self._items = updated

    def remove_item(self, key: str) -> None:
        self._items.pop(key, None)

    def clear(self) -> None:
        self._items = {}


class FileStorage(KeyValueStorage):
    """All keys in one JSON object file, replaced whole on every write."""

    def __init__(self, path: Path, quota_bytes: int | None = DEFAULT_QUOTA_BYTES) -> None:
        super().__init__(quota_bytes)
        self.path = Path(path)

    def _read_all(self) -> Dict[str, str]:
        try:
            if not self.path.is_file():
                return {}
            data = json.loads(self.path.read_text(encoding="utf-8"))
        except (OSError, UnicodeDecodeError, RecursionError, json.JSONDecodeError) as e:
            raise PersistenceReadError(f"cannot read {self.path}: {e}") from e
        if not isinstance(data, dict) or not all(isinstance(v, str) for v in data.values()):
            raise PersistenceReadError(f"{self.path} is not a string key-value object")
        return data

    def _write_all(self, items: Dict[str, str]) -> None:
        tmp = self.path.with_name(self.path.name + ".tmp")
        try:
            self.path.parent.mkdir(parents=True, exist_ok=True)
            tmp.write_text(json.dumps(items, ensure_ascii=False), encoding="utf-8")
            os.replace(tmp, self.path)
        except OSError as e:
            raise PersistenceWriteError(f"cannot write {self.path}: {e}") from e
        LOG.debug("Wrote %s key(s) to %s", len(items), self.path)

    def _current_for_write(self) -> Dict[str, str]:
        try:
            return self._read_all()
        except PersistenceReadError as e:
            LOG.warning("Discarding unreadable storage file before write: %s", e)
            return {}

    def get_item(self, key: str) -> str | None:
        return self._read_all().get(key)

    def set_item(self, key: str, value: str) -> None:
        updated = {**self._current_for_write(), key: value}
        self._check_quota(updated)
        self._write_all(updated)

    def remove_item(self, key: str) -> None:
        items = self._current_for_write()
        if key in items:
            del items[key]
            self._write_all(items)

    def clear(self) -> None:
        self._write_all({})
