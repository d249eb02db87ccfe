"""
AsyncRetouch — wires configuration, storage, transport and orchestrator.
"""

import logging
from typing import Optional, Union

from retouch.config import RetouchConfig, server_default_credential
from retouch.dispatcher import GenerationDispatcher
from retouch.errors import RetouchError
from retouch.orchestrator import SessionOrchestrator
from retouch.sessions import SessionStore, open_backend
from retouch.storage.base import PersistenceBackend
from retouch.transport.fal import FalClient
from retouch.transport.http import HttpClient

logger = logging.getLogger(__name__)


class AsyncRetouch:
    """Async retouch client.

    With `config.server_url` set, edits go through a retouch server and the
    server's default credential is discovered via its settings endpoint.
    Otherwise fal.ai is called directly and FAL_KEY acts as the default.
    """

    def __init__(
        self,
        config: Optional[RetouchConfig] = None,
        backend: Optional[PersistenceBackend] = None,
        transport: Optional[Union[HttpClient, FalClient]] = None,
    ):
        self.config = config or RetouchConfig()
        self.store = SessionStore(backend or open_backend(self.config))
        if transport is None:
            if self.config.server_url:
                transport = HttpClient(base_url=self.config.server_url, timeout=self.config.timeout)
            else:
                transport = FalClient(
                    default_key=server_default_credential(),
                    base_url=self.config.fal_base_url,
                    timeout=self.config.timeout,
                )
        self.transport = transport
        self.dispatcher = GenerationDispatcher(transport)
        self.editor = SessionOrchestrator(self.store, self.dispatcher, self.config)

    async def server_default_available(self) -> bool:
        if isinstance(self.transport, HttpClient):
            try:
                return (await self.transport.settings()).has_server_default_credential
            except RetouchError as e:
                logger.warning(f"Could not read server settings: {e}")
                return False
        return self.transport.has_default_key

    async def connect(self) -> SessionOrchestrator:
        """Refresh the server-default flag and hand back the orchestrator."""
        self.editor.credentials.server_default_available = await self.server_default_available()
        return self.editor

    async def close(self) -> None:
        await self.transport.close()
        await self.store.close()
