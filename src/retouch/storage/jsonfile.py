"""
One JSON file per session under `<root>/sessions/`.

Writes go to a temp file that is then `os.replace`d over the target, so a
reader never sees a half-written record.
"""

from __future__ import annotations

import asyncio
import json
import logging
import os
import re
from pathlib import Path
from typing import Any, Optional

from retouch.errors import StorageError
from retouch.storage.base import PersistenceBackend, Record

logger = logging.getLogger(__name__)

_SAFE_KEY = re.compile(r"^[A-Za-z0-9_-]+$")


def load_json(path: Path) -> Optional[Record]:
    try:
        with open(path, "r", encoding="utf-8") as handle:
            return json.load(handle)
    except FileNotFoundError:
        return None
    except (json.JSONDecodeError, UnicodeDecodeError) as e:
        logger.warning(f"Skipping corrupt session file {path}: {e}")
        return None


def atomic_write_json(path: Path, data: Any) -> None:
    path.parent.mkdir(parents=True, exist_ok=True)
    tmp_path = path.with_suffix(f"{path.suffix}.tmp")
    payload = json.dumps(data, indent=2, sort_keys=True)
    with open(tmp_path, "w", encoding="utf-8") as handle:
        handle.write(payload)
    os.replace(tmp_path, path)


class JsonFileBackend(PersistenceBackend):
    def __init__(self, root: str | Path):
        self.sessions_dir = Path(root) / "sessions"

    def _path(self, key: str) -> Path:
        if not _SAFE_KEY.match(key):
            raise StorageError(f"Invalid session key: {key!r}")
        return self.sessions_dir / f"{key}.json"

    async def get(self, key: str) -> Optional[Record]:
        return await asyncio.to_thread(load_json, self._path(key))

    async def upsert(self, key: str, record: Record) -> None:
        path = self._path(key)
        try:
            await asyncio.to_thread(atomic_write_json, path, record)
        except OSError as e:
            raise StorageError(f"Failed to write {path}: {e}") from e

    async def delete(self, key: str) -> None:
        path = self._path(key)
        try:
            await asyncio.to_thread(path.unlink, True)
        except OSError as e:
            raise StorageError(f"Failed to delete {path}: {e}") from e

    async def list(self) -> list[Record]:
        return await asyncio.to_thread(self._read_all)

    def _read_all(self) -> list[Record]:
        if not self.sessions_dir.exists():
            return []
        records = []
        for path in sorted(self.sessions_dir.glob("*.json")):
            data = load_json(path)
            if data:
                records.append(data)
        return records
