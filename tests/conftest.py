import asyncio
from typing import Optional, Union

import pytest

from retouch.config import RetouchConfig
from retouch.dispatcher import GenerationDispatcher
from retouch.models.generation import GenerationJob
from retouch.orchestrator import SessionOrchestrator
from retouch.sessions import SessionStore
from retouch.storage.memory import MemoryBackend

IMAGE_X = "data:image/png;base64,iVBORw0KGgo="


class FakeBackend:
    """Generation backend double: records calls, replays scripted results."""

    has_default_key = False

    def __init__(self, results: Optional[list[Union[str, Exception]]] = None):
        self.calls: list[tuple[GenerationJob, Optional[str]]] = []
        self.results = list(results or [])

    async def submit(self, job: GenerationJob, credential: Optional[str]) -> str:
        self.calls.append((job, credential))
        result = self.results.pop(0) if self.results else f"https://img.example/{len(self.calls)}.png"
        if isinstance(result, Exception):
            raise result
        return result

    async def close(self) -> None:
        pass


class GatedBackend(FakeBackend):
    """Holds every call until `release` is set."""

    def __init__(self, results=None):
        super().__init__(results)
        self.started = asyncio.Event()
        self.release = asyncio.Event()

    async def submit(self, job, credential):
        self.started.set()
        await self.release.wait()
        return await super().submit(job, credential)


@pytest.fixture
def memory_store() -> SessionStore:
    return SessionStore(MemoryBackend())


@pytest.fixture
def fake_backend() -> FakeBackend:
    return FakeBackend()


def make_editor(
    store: SessionStore,
    backend: FakeBackend,
    fal_key: str = "k1",
    server_default_available: bool = False,
    backend_id: str = "kontext-pro",
) -> SessionOrchestrator:
    config = RetouchConfig(fal_key=fal_key, backend=backend_id)
    return SessionOrchestrator(store, GenerationDispatcher(backend), config, server_default_available)


@pytest.fixture
def editor(memory_store, fake_backend) -> SessionOrchestrator:
    return make_editor(memory_store, fake_backend)
