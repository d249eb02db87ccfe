"""
Persistence backend interface.

Records are JSON-serializable dicts keyed by session id. Implementations must
make `upsert` a full replace, `delete` a no-op for unknown ids, and a single
write atomic for one record.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from typing import Any, Optional

Record = dict[str, Any]


class PersistenceBackend(ABC):
    @abstractmethod
    async def get(self, key: str) -> Optional[Record]:
        ...

    @abstractmethod
    async def upsert(self, key: str, record: Record) -> None:
        ...

    @abstractmethod
    async def delete(self, key: str) -> None:
        ...

    @abstractmethod
    async def list(self) -> list[Record]:
        """All records, in no particular order."""

    async def close(self) -> None:
        pass
