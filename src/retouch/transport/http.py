"""
REST client for a retouch server — POST /api/generate-image, GET /api/settings.

The server resolves its own default credential, so a job submitted without a
credential goes out without one.
"""

from typing import Any, Optional

import httpx

from retouch.errors import AuthError, RetouchError
from retouch.models.generation import GenerateRequest, GenerateResponse, GenerationJob, ServerSettings

DEFAULT_BASE_URL = "http://127.0.0.1:8000"


class HttpClient:
    def __init__(
        self,
        base_url: str = DEFAULT_BASE_URL,
        timeout: float = 120.0,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        self._base_url = base_url.rstrip("/")
        self._client = httpx.AsyncClient(
            base_url=f"{self._base_url}/api",
            headers={"User-Agent": "retouch/0.1.0", "Accept": "application/json"},
            timeout=timeout,
            transport=transport,
        )

    @staticmethod
    def _error_message(resp: httpx.Response) -> str:
        try:
            body = resp.json()
        except ValueError:
            return f"HTTP {resp.status_code}: {resp.text[:200]}"
        if isinstance(body, dict):
            return body.get("message") or body.get("error") or f"HTTP {resp.status_code}"
        return f"HTTP {resp.status_code}"

    def _raise_for_status(self, resp: httpx.Response) -> None:
        if resp.status_code < 400:
            return
        message = self._error_message(resp)
        if resp.status_code == 401:
            raise AuthError(message)
        raise RetouchError("http_error", message, {"status": resp.status_code})

    async def get(self, path: str) -> Any:
        resp = await self._client.get(path)
        self._raise_for_status(resp)
        return resp.json()

    async def post(self, path: str, body: Optional[dict[str, Any]] = None) -> Any:
        resp = await self._client.post(path, json=body)
        self._raise_for_status(resp)
        return resp.json()

    async def settings(self) -> ServerSettings:
        return ServerSettings.model_validate(await self.get("/settings"))

    async def generate(self, request: GenerateRequest) -> GenerateResponse:
        return GenerateResponse.model_validate(await self.post("/generate-image", request.to_wire()))

    async def submit(self, job: GenerationJob, credential: Optional[str]) -> str:
        """Run one job through the server and return the produced image URL."""
        request = GenerateRequest(
            prompt_text=job.prompt,
            source_image_ref=job.image_url,
            backend_id=job.backend_id,
            credential=credential,
        )
        return (await self.generate(request)).image_url

    async def close(self) -> None:
        await self._client.aclose()
