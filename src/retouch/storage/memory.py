from __future__ import annotations

import copy
from typing import Optional

from retouch.storage.base import PersistenceBackend, Record


class MemoryBackend(PersistenceBackend):
    """Process-local store. Records are deep-copied in and out."""

    def __init__(self) -> None:
        self._records: dict[str, Record] = {}

    async def get(self, key: str) -> Optional[Record]:
        record = self._records.get(key)
        return copy.deepcopy(record) if record is not None else None

    async def upsert(self, key: str, record: Record) -> None:
        self._records[key] = copy.deepcopy(record)

    async def delete(self, key: str) -> None:
        self._records.pop(key, None)

    async def list(self) -> list[Record]:
        return [copy.deepcopy(r) for r in self._records.values()]
