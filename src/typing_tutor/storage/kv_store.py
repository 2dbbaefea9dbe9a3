"""Key/value persistence for learner state (JSON + fcntl.flock + atomic write)."""

import fcntl
import json
import os
import re
import tempfile
from abc import ABC, abstractmethod
from pathlib import Path
from typing import Any

_KEY_PATTERN = re.compile(r"^[A-Za-z0-9_.-]+$")


class StorageError(Exception):
    """Raised when a value cannot be read from or written to a store."""


class KeyValueStore(ABC):
    """Minimal store of JSON-serialisable values keyed by fixed names."""

    @abstractmethod
    def get(self, key: str) -> Any | None:
        """Value stored under ``key``, or None."""

    @abstractmethod
    def set(self, key: str, value: Any) -> None: ...

    @abstractmethod
    def delete(self, key: str) -> None: ...


class InMemoryStore(KeyValueStore):
    """Process-local store, mainly for tests.

    Values are kept as JSON text so callers never share mutable state with
    the store.
    """

    def __init__(self) -> None:
        self._data: dict[str, str] = {}

    def get(self, key: str) -> Any | None:
        raw = self._data.get(key)
        if raw is None:
            return None
        return json.loads(raw)

    def set(self, key: str, value: Any) -> None:
        try:
            self._data[key] = json.dumps(value, allow_nan=False)
        except (TypeError, ValueError) as e:
            raise StorageError(f"Cannot serialise value for {key!r}: {e}") from e

    def delete(self, key: str) -> None:
        self._data.pop(key, None)


class JsonFileStore(KeyValueStore):
    """One ``<key>.json`` file per key under ``root``.

    Writes take an exclusive lock on a sibling ``.lock`` file and replace the
    target atomically, so a reader never sees a half-written file.
    """

    def __init__(self, root: Path) -> None:
        self.root = Path(root)

    def _path(self, key: str) -> Path:
        if not _KEY_PATTERN.match(key):
            raise StorageError(f"Invalid storage key: {key!r}")
        return self.root / f"{key}.json"

    def get(self, key: str) -> Any | None:
        path = self._path(key)
        if not path.exists():
            return None
        try:
            with open(path, encoding="utf-8") as f:
                fcntl.flock(f, fcntl.LOCK_SH)
                data = json.load(f)
                fcntl.flock(f, fcntl.LOCK_UN)
        except (OSError, ValueError) as e:
            raise StorageError(f"Cannot read {path}: {e}") from e
        return data

    def set(self, key: str, value: Any) -> None:
        path = self._path(key)
        try:
            payload = json.dumps(value, indent=2, allow_nan=False)
        except (TypeError, ValueError) as e:
            raise StorageError(f"Cannot serialise value for {key!r}: {e}") from e
        tmp_path: Path | None = None
        try:
            self.root.mkdir(parents=True, exist_ok=True)
            lock_path = self.root / (path.name + ".lock")
            with open(lock_path, "w") as lock_file:
                fcntl.flock(lock_file, fcntl.LOCK_EX)
                with tempfile.NamedTemporaryFile(
                    "w", dir=self.root, delete=False, suffix=".json", encoding="utf-8"
                ) as tmp:
                    tmp_path = Path(tmp.name)
                    tmp.write(payload)
                os.replace(tmp_path, path)
        except OSError as e:
            if tmp_path is not None:
                tmp_path.unlink(missing_ok=True)
            raise StorageError(f"Cannot write {path}: {e}") from e

    def delete(self, key: str) -> None:
        path = self._path(key)
        try:
            path.unlink(missing_ok=True)
        except OSError as e:
            raise StorageError(f"Cannot delete {path}: {e}") from e
