"""A list of JSON records stored in one file, one file per collection.

Every collection shares its file across all records, so each write is a
whole-file load-modify-persist.  Those run under a lock keyed by the
resolved file path, shared by every JsonFile in the process that points
at the same file.
"""

from __future__ import annotations

import json
import os
import tempfile
import threading
from collections.abc import Callable, Iterator
from contextlib import contextmanager
from pathlib import Path

_FILE_LOCKS: dict[Path, threading.RLock] = {}
_FILE_LOCKS_GUARD = threading.Lock()


def _lock_for(file_path: Path) -> threading.RLock:
    key = file_path.resolve()
    with _FILE_LOCKS_GUARD:
        lock = _FILE_LOCKS.get(key)
        if lock is None:
            lock = _FILE_LOCKS[key] = threading.RLock()
        return lock


class JsonFile:

    def __init__(self, file_path: Path) -> None:
        self._file_path = file_path
        self._lock = _lock_for(file_path)
        self._ensure_file()

    @property
    def path(self) -> Path:
        return self._file_path

    @contextmanager
    def locked(self) -> Iterator[None]:
        """Hold the file's lock across several reads and writes."""
        with self._lock:
            yield

    def load(self) -> list[dict]:
        with self._lock:
            return json.loads(self._file_path.read_text(encoding="utf-8"))

    def persist(self, records: list[dict]) -> None:
        # Write-then-rename so a crash never leaves a half-written file.
        with self._lock:
            with tempfile.NamedTemporaryFile(
                "w",
                encoding="utf-8",
                dir=self._file_path.parent,
                prefix=self._file_path.name + ".",
                suffix=".tmp",
                delete=False,
            ) as tmp:
                tmp.write(json.dumps(records, indent=2) + "\n")
            os.replace(tmp.name, self._file_path)

    def update(self, change: Callable[[list[dict]], list[dict] | None]) -> None:
        """Load, apply ``change`` and persist, all under the file's lock.

        ``change`` may edit the list in place, or return a replacement.
        """
        with self._lock:
            records = self.load()
            replaced = change(records)
            self.persist(records if replaced is None else replaced)

    def upsert(self, record: dict, key: str = "id") -> None:
        def put(records: list[dict]) -> None:
            for i, raw in enumerate(records):
                if raw[key] == record[key]:
                    records[i] = record
                    return
            records.append(record)

        self.update(put)

    def append(self, record: dict) -> None:
        self.update(lambda records: records.append(record))

    def remove(self, value: str, key: str = "id") -> None:
        with self._lock:
            records = self.load()
            remaining = [raw for raw in records if raw[key] != value]
            if len(remaining) != len(records):
                self.persist(remaining)

    def _ensure_file(self) -> None:
        with self._lock:
            if not self._file_path.exists():
                self._file_path.parent.mkdir(parents=True, exist_ok=True)
                self._file_path.write_text("[]", encoding="utf-8")
