"""
Session orchestrator — reacts to user intents and drives the store, the
version history and the dispatcher.

States: IDLE (no active session) and ACTIVE (one session in memory). The
in-memory session is authoritative; every mutation is followed by an explicit
`save()` whose failure is logged and reported, never raised.

The dispatcher call is the only long suspension. When its result arrives the
orchestrator checks whether the originating session is still active. If not,
the result goes into the stored copy of that session and the active one is
left alone.
"""

import logging
from enum import Enum
from typing import Optional

from retouch.auth import CredentialResolver
from retouch.config import RetouchConfig
from retouch.dispatcher import GenerationDispatcher
from retouch.errors import RetouchError, StorageError, ValidationError
from retouch.history import (
    MAX_TURNS,
    MAX_VERSIONS,
    append_turn,
    append_version,
    derive_title,
    display_number_for,
    numbered,
    select_attachment,
)
from retouch.models.generation import (
    GenerationAuthFailure,
    GenerationFailure,
    GenerationOutcome,
    GenerationSuccess,
)
from retouch.models.session import AssetVersion, Session, Turn, generate_id, now_ms
from retouch.sessions import SessionStore

logger = logging.getLogger(__name__)

SUCCESS_TEXT = "Here's your edited image:"
GENERIC_FAILURE_PREFIX = "Sorry, there was an error generating your image: "


class OrchestratorState(str, Enum):
    IDLE = "idle"
    ACTIVE = "active"


def reply_for(outcome: GenerationOutcome, version: Optional[AssetVersion] = None) -> Turn:
    """Assistant turn describing a dispatch outcome."""
    if isinstance(outcome, GenerationSuccess):
        return Turn(id=generate_id("_assistant"), role="assistant", content=SUCCESS_TEXT, version=version)
    if isinstance(outcome, GenerationAuthFailure):
        return Turn(id=generate_id("_error"), role="assistant", content=outcome.message, error="auth")
    return Turn(
        id=generate_id("_error"),
        role="assistant",
        content=GENERIC_FAILURE_PREFIX + (outcome.message or "Unknown error occurred"),
        error="generic",
    )


class SessionOrchestrator:
    def __init__(
        self,
        store: SessionStore,
        dispatcher: GenerationDispatcher,
        config: RetouchConfig,
        server_default_available: bool = False,
    ):
        self._store = store
        self._dispatcher = dispatcher
        self._config = config
        self.credentials = CredentialResolver(config, server_default_available)
        self._session: Optional[Session] = None
        self._attached_image: Optional[str] = None
        self._selected_version_id: Optional[str] = None
        self._deleting: set[str] = set()

    @property
    def state(self) -> OrchestratorState:
        return OrchestratorState.ACTIVE if self._session is not None else OrchestratorState.IDLE

    @property
    def active_id(self) -> Optional[str]:
        return self._session.id if self._session is not None else None

    @property
    def session(self) -> Optional[Session]:
        return self._session

    @property
    def attachment(self) -> Optional[str]:
        versions = self._session.versions if self._session else []
        return select_attachment(versions, self._attached_image)

    def _reset_buffers(self) -> None:
        self._attached_image = None
        self._selected_version_id = None

    def new_session(self) -> Session:
        """Start a fresh session. Nothing is stored until it changes."""
        self._session = Session()
        self._reset_buffers()
        logger.info(f"Started session {self._session.id}")
        return self._session

    async def load_session(self, session_id: str) -> Session:
        try:
            found = await self._store.find(session_id)
        except StorageError as e:
            logger.warning(f"Could not load session {session_id}: {e}")
            found = None
        if found is None:
            logger.info(f"Session {session_id} not in store, starting it empty")
            found = Session(id=session_id)
        found.versions = found.versions[:MAX_VERSIONS]
        self._session = found
        self._reset_buffers()
        return found

    async def list_sessions(self) -> list[Session]:
        return await self._store.list()

    async def delete_session(self, session_id: str) -> bool:
        """Delete a session. Returns False when a delete for it is already running."""
        if session_id in self._deleting:
            logger.info(f"Delete of {session_id} already in progress, ignoring")
            return False
        self._deleting.add(session_id)
        try:
            try:
                await self._store.delete(session_id)
            except StorageError as e:
                logger.warning(f"Failed to delete session {session_id}: {e}")
                return False
            logger.info(f"Deleted session {session_id}")
            if self.active_id == session_id:
                await self._replace_active(session_id)
            return True
        finally:
            self._deleting.discard(session_id)

    async def _replace_active(self, deleted_id: str) -> None:
        try:
            remaining = [s for s in await self._store.list() if s.id != deleted_id]
        except StorageError as e:
            logger.warning(f"Could not list sessions after delete: {e}")
            remaining = []
        if remaining:
            await self.load_session(remaining[0].id)
        else:
            self.new_session()

    def attach_image(self, image_ref: str) -> None:
        """Use an uploaded image as the source of the next edit."""
        if not image_ref:
            raise ValidationError("Image reference is empty.")
        if self._session is None:
            self.new_session()
        self._attached_image = image_ref
        self._selected_version_id = None

    def select_version(self, version_id: str) -> AssetVersion:
        versions = self._session.versions if self._session else []
        for version in versions:
            if version.id == version_id:
                self._selected_version_id = version.id
                self._attached_image = version.url
                return version
        raise ValidationError(f"Unknown version: {version_id}", details={"id": version_id})

    def versions(self) -> list[tuple[int, AssetVersion]]:
        return numbered(self._session.versions) if self._session else []

    def selected_display_number(self) -> Optional[int]:
        if self._session is None or not self._session.versions:
            return None
        if self._selected_version_id:
            number = display_number_for(self._session.versions, self._selected_version_id)
            if number is not None:
                return number
        return len(self._session.versions) - 1

    async def save(self) -> bool:
        if self._session is None:
            return False
        return await self._persist(self._session)

    async def _persist(self, session: Session) -> bool:
        session.turns = session.turns[-MAX_TURNS:]
        session.versions = session.versions[:MAX_VERSIONS]
        session.title = derive_title(session.turns)
        session.updated_at = max(now_ms(), session.updated_at)
        try:
            await self._store.upsert(session)
        except StorageError as e:
            logger.warning(f"Session {session.id} not saved, keeping in-memory state: {e}")
            return False
        return True

    async def submit_turn(self, prompt_text: str, backend_id: Optional[str] = None) -> Turn:
        """Run one edit. Returns the assistant turn that answers it.

        Raises ConfigurationError without a usable credential and
        ValidationError without a prompt or an image, before touching any
        state. Dispatch failures become assistant turns.
        """
        credential = self.credentials.require()
        if not prompt_text or not prompt_text.strip():
            raise ValidationError("A prompt is required.", details={"field": "promptText"})
        attachment = self.attachment
        if not attachment:
            raise ValidationError("Attach an image before asking for an edit.",
                                  details={"field": "sourceImageRef"})

        session = self._session if self._session is not None else self.new_session()
        backend_id = backend_id or self._config.backend
        session.turns = append_turn(session.turns, Turn(role="user", content=prompt_text, image=attachment))
        await self._persist(session)

        try:
            outcome = await self._dispatcher.dispatch(backend_id, prompt_text, attachment, credential)
        except RetouchError as e:
            outcome = GenerationFailure(message=e.message)

        if session.id in self._deleting:
            logger.info(f"Session {session.id} is being deleted, dropping its generation result")
            return reply_for(outcome)

        if self.active_id == session.id:
            target = self._session
        else:
            target = await self._detached(session.id)
            if target is None:
                logger.info(f"Session {session.id} is gone, dropping its generation result")
                return reply_for(outcome)

        reply = self._apply(target, outcome, prompt_text, attachment)
        if target is self._session and reply.version is not None:
            self._selected_version_id = reply.version.id
            self._attached_image = reply.version.url
        await self._persist(target)
        return reply

    async def _detached(self, session_id: str) -> Optional[Session]:
        logger.info(f"Result for {session_id} arrived after switching away")
        try:
            return await self._store.find(session_id)
        except StorageError as e:
            logger.warning(f"Could not reload session {session_id}: {e}")
            return None

    def _apply(self, session: Session, outcome: GenerationOutcome, prompt_text: str, attachment: str) -> Turn:
        version = None
        if isinstance(outcome, GenerationSuccess):
            version = AssetVersion(url=outcome.image_url, prompt=prompt_text, backend=outcome.backend)
            session.versions = append_version(session.versions, version, source_image=attachment)
        reply = reply_for(outcome, version)
        session.turns = append_turn(session.turns, reply)
        return reply
