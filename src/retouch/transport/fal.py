"""
fal.ai client — one synchronous run per call.

POST {base_url}/{endpoint} with the job arguments; the response carries
{"images": [{"url": ...}, ...]}. A call made without a credential uses the
default key this client was built with.
"""

import logging
from typing import Any, Optional

import httpx

from retouch.config import DEFAULT_FAL_BASE_URL
from retouch.errors import AuthError, ConfigurationError, RetouchError
from retouch.models.generation import GenerationJob

logger = logging.getLogger(__name__)


class FalClient:
    def __init__(
        self,
        default_key: Optional[str] = None,
        base_url: str = DEFAULT_FAL_BASE_URL,
        timeout: float = 120.0,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        self._default_key = default_key
        self._client = httpx.AsyncClient(
            base_url=base_url.rstrip("/"),
            headers={"User-Agent": "retouch/0.1.0", "Accept": "application/json"},
            timeout=timeout,
            transport=transport,
        )

    @property
    def has_default_key(self) -> bool:
        return bool(self._default_key)

    async def run(self, endpoint: str, arguments: dict[str, Any], key: str) -> dict[str, Any]:
        resp = await self._client.post(
            f"/{endpoint}",
            json=arguments,
            headers={"Authorization": f"Key {key}", "Content-Type": "application/json"},
        )
        if resp.status_code in (401, 403):
            raise AuthError(f"fal.ai rejected the API key (HTTP {resp.status_code})")
        if resp.status_code >= 400:
            raise RetouchError("http_error", f"HTTP {resp.status_code}: {resp.text[:200]}",
                               {"status": resp.status_code})
        return resp.json()

    async def submit(self, job: GenerationJob, credential: Optional[str]) -> str:
        key = credential or self._default_key
        if not key:
            raise ConfigurationError("No fal.ai key available on this side of the boundary.")
        logger.debug(f"fal.ai request to {job.endpoint} ({job.label})")
        data = await self.run(job.endpoint, job.arguments(), key)
        images = data.get("images") if isinstance(data, dict) else None
        first = images[0] if isinstance(images, list) and images else None
        if not isinstance(first, dict) or not first.get("url"):
            raise RetouchError("empty_result", "The backend returned no image.")
        return first["url"]

    async def close(self) -> None:
        await self._client.aclose()
