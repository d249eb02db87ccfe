"""
HTTP boundary for generation.

    POST /api/generate-image  {promptText, sourceImageRef, backendId, credential?}
        200 {imageUrl, backendId}
        400 {message}                       missing field or no credential
        401 {message, isAuthError: true}    backend rejected the credential
        500 {message}                       any other failure
    GET  /api/settings        {hasServerDefaultCredential}

The server default key (FAL_KEY) is applied here and never leaves the process.

Run with: uvicorn retouch.server:app
"""

import logging
from typing import Optional

from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse
from pydantic import ValidationError as PydanticValidationError

from retouch.auth import resolve_credential
from retouch.config import server_default_credential
from retouch.dispatcher import GenerationBackend, GenerationDispatcher
from retouch.errors import ConfigurationError, ValidationError
from retouch.models.generation import (
    ErrorBody,
    GenerateRequest,
    GenerateResponse,
    GenerationAuthFailure,
    GenerationSuccess,
    ServerSettings,
)
from retouch.transport.fal import FalClient

logger = logging.getLogger(__name__)


def _error(status: int, message: str, is_auth_error: Optional[bool] = None) -> JSONResponse:
    body = ErrorBody(message=message, is_auth_error=is_auth_error)
    return JSONResponse(body.model_dump(by_alias=True, exclude_none=True), status_code=status)


def create_app(backend: Optional[GenerationBackend] = None, default_key: Optional[str] = None) -> FastAPI:
    """Build the app. Without a backend, a FalClient holding `default_key` is used."""
    if backend is None:
        backend = FalClient(default_key=default_key)
    dispatcher = GenerationDispatcher(backend)
    has_default = bool(default_key)

    app = FastAPI(title="retouch")

    @app.get("/api/settings")
    async def settings() -> dict:
        return ServerSettings(has_server_default_credential=has_default).model_dump(by_alias=True)

    @app.post("/api/generate-image")
    async def generate_image(request: Request) -> JSONResponse:
        try:
            body = GenerateRequest.model_validate(await request.json())
        except (ValueError, PydanticValidationError):
            return _error(400, "Missing required fields")

        logger.info(f"Generate request: backend={body.backend_id!r} has_credential={body.credential is not None}")
        if not body.prompt_text or not body.source_image_ref:
            return _error(400, "Missing required fields")

        credential = resolve_credential(body.credential, has_default)
        try:
            outcome = await dispatcher.dispatch(body.backend_id, body.prompt_text, body.source_image_ref, credential)
        except (ValidationError, ConfigurationError) as e:
            return _error(400, e.message)

        if isinstance(outcome, GenerationSuccess):
            response = GenerateResponse(image_url=outcome.image_url, backend_id=body.backend_id)
            return JSONResponse(response.model_dump(by_alias=True))
        if isinstance(outcome, GenerationAuthFailure):
            return _error(401, outcome.message, is_auth_error=True)
        return _error(500, f"Failed to generate image: {outcome.message}")

    return app


app = create_app(default_key=server_default_credential())
