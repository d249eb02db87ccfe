"""
Session store — CRUD and recency-ordered listing over Session aggregates.
"""

from __future__ import annotations

import logging
from typing import Optional

from pydantic import ValidationError as PydanticValidationError

from retouch.config import RetouchConfig
from retouch.errors import RetouchError, SessionNotFoundError, StorageError
from retouch.models.session import Session
from retouch.storage.base import PersistenceBackend

logger = logging.getLogger(__name__)


def open_backend(config: RetouchConfig) -> PersistenceBackend:
    """Pick the persistence backend named in the config."""
    if config.storage == "sqlite":
        from retouch.storage.sqlite import SqliteBackend
        return SqliteBackend(config.data_dir / "sessions.db")
    from retouch.storage.jsonfile import JsonFileBackend
    return JsonFileBackend(config.data_dir)


class SessionStore:
    def __init__(self, backend: PersistenceBackend):
        self._backend = backend

    async def create(self, session: Session) -> Session:
        await self.upsert(session)
        return session

    async def get(self, session_id: str) -> Session:
        session = await self.find(session_id)
        if session is None:
            raise SessionNotFoundError(session_id)
        return session

    async def find(self, session_id: str) -> Optional[Session]:
        try:
            record = await self._backend.get(session_id)
        except RetouchError:
            raise
        except Exception as e:
            raise StorageError(f"Failed to read session {session_id}: {e}") from e
        if record is None:
            return None
        try:
            return Session.from_record(record)
        except PydanticValidationError as e:
            raise StorageError(f"Stored session {session_id} is malformed: {e}") from e

    async def list(self) -> list[Session]:
        """All sessions, most recently updated first."""
        try:
            records = await self._backend.list()
        except RetouchError:
            raise
        except Exception as e:
            raise StorageError(f"Failed to list sessions: {e}") from e
        sessions = []
        for record in records:
            try:
                sessions.append(Session.from_record(record))
            except PydanticValidationError as e:
                logger.warning(f"Skipping malformed session record {record.get('id')}: {e}")
        sessions.sort(key=lambda s: (s.updated_at, s.id), reverse=True)
        return sessions

    async def upsert(self, session: Session) -> None:
        """Full replace keyed by id."""
        try:
            await self._backend.upsert(session.id, session.to_record())
        except RetouchError:
            raise
        except Exception as e:
            raise StorageError(f"Failed to save session {session.id}: {e}") from e
        logger.debug(f"Saved session {session.id} ({len(session.turns)} turns, {len(session.versions)} versions)")

    async def delete(self, session_id: str) -> None:
        try:
            await self._backend.delete(session_id)
        except RetouchError:
            raise
        except Exception as e:
            raise StorageError(f"Failed to delete session {session_id}: {e}") from e

    async def close(self) -> None:
        await self._backend.close()
