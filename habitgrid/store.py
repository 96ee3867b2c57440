"""JSON key-value store holding the persisted HabitGrid snapshot.

Each key is one JSON document under <root>/data/<key>.json, replaced
atomically on every write (temp file + flock + rename).
"""

from __future__ import annotations

import fcntl
import json
import logging
import os
import tempfile
import threading
from pathlib import Path
from typing import Any

from habitgrid.errors import StorageUnavailable
from habitgrid.models import TrackerState
from habitgrid.workspace import DEFAULT_STORAGE_KEY, data_dir, workspace_root

logger = logging.getLogger(__name__)


def _atomic_write(path: Path, content: str) -> None:
    path.parent.mkdir(parents=True, exist_ok=True)
    fd, temp_path = tempfile.mkstemp(dir=path.parent, prefix=".tmp_", suffix=".json")
    try:
        with os.fdopen(fd, "w", encoding="utf-8") as f:
            fcntl.flock(f.fileno(), fcntl.LOCK_EX)
            try:
                f.write(content)
                f.flush()
                os.fsync(f.fileno())
            finally:
                fcntl.flock(f.fileno(), fcntl.LOCK_UN)
        os.replace(temp_path, path)
    except Exception:
        if os.path.exists(temp_path):
            os.unlink(temp_path)
        raise


class KeyValueStore:
    """Whole-document JSON storage keyed by a namespace string."""

    def __init__(self, directory: Path) -> None:
        self.directory = directory
        self._lock = threading.Lock()

    def path_for(self, key: str) -> Path:
        return self.directory / f"{key}.json"

    def get(self, key: str) -> dict[str, Any] | None:
        """Return the stored document, or None if the key was never written."""
        path = self.path_for(key)
        try:
            if not path.exists():
                return None
            text = path.read_text(encoding="utf-8")
            if not text.strip():
                return None
            data = json.loads(text)
        except (OSError, json.JSONDecodeError) as e:
            logger.warning("Read of %s failed: %s", path, e)
            raise StorageUnavailable(f"Cannot read {path}: {e}") from e
        if not isinstance(data, dict):
            raise StorageUnavailable(f"Unexpected document type in {path}")
        return data

    def set(self, key: str, document: dict[str, Any]) -> None:
        path = self.path_for(key)
        content = json.dumps(document, indent=2, ensure_ascii=False) + "\n"
        try:
            with self._lock:
                _atomic_write(path, content)
        except OSError as e:
            logger.warning("Write of %s failed: %s", path, e)
            raise StorageUnavailable(f"Cannot write {path}: {e}") from e


class SnapshotStore:
    """Load/save the TrackerState under a single fixed key."""

    def __init__(self, root: Path | None = None, key: str = DEFAULT_STORAGE_KEY) -> None:
        if root is None:
            root = workspace_root()
        self.kv = KeyValueStore(data_dir(root))
        self.key = key

    @property
    def path(self) -> Path:
        return self.kv.path_for(self.key)

    def load(self) -> TrackerState | None:
        """Read the persisted state; None on first run.

        Raises StorageUnavailable on I/O errors, MalformedDateError on
        corrupt day identifiers and CorruptSnapshotError on a wrongly shaped
        document.
        """
        data = self.kv.get(self.key)
        if data is None:
            return None
        return TrackerState.from_dict(data)

    def save(self, state: TrackerState) -> None:
        self.kv.set(self.key, state.to_dict())
