"""
Generation dispatcher.

Maps (backend, prompt, image) onto the backend's parameter profile, makes
exactly one call and classifies the result:

    GenerationSuccess      image URL came back
    GenerationAuthFailure  the backend signalled "unauthorized"
    GenerationFailure      anything else went wrong

Missing prompt or image and a missing credential are precondition failures
and raise instead.
"""

import logging
from typing import Optional, Protocol

import httpx

from retouch.auth import NO_CREDENTIAL_MESSAGE, Credential, NoCredential
from retouch.backends import BackendProfile, resolve_backend
from retouch.errors import AuthError, ConfigurationError, RetouchError, ValidationError
from retouch.models.generation import (
    GenerationAuthFailure,
    GenerationFailure,
    GenerationJob,
    GenerationOutcome,
    GenerationSuccess,
)

logger = logging.getLogger(__name__)

AUTH_REMEDIATION = "Authentication failed. Check your fal.ai API key (retouch settings set-key) and try again."


class GenerationBackend(Protocol):
    async def submit(self, job: GenerationJob, credential: Optional[str]) -> str:
        ...


def _clip(text: str, limit: int = 50) -> str:
    return text if len(text) <= limit else text[:limit] + "..."


def build_job(profile: BackendProfile, prompt_text: str, source_image: str) -> GenerationJob:
    return GenerationJob(
        backend_id=profile.id,
        endpoint=profile.endpoint,
        label=profile.label,
        prompt=prompt_text,
        image_url=source_image,
        strength=profile.strength,
        num_inference_steps=profile.num_inference_steps,
        guidance_scale=profile.guidance_scale,
    )


class GenerationDispatcher:
    def __init__(self, backend: GenerationBackend):
        self._backend = backend

    async def dispatch(
        self,
        backend_id: Optional[str],
        prompt_text: str,
        source_image: Optional[str],
        credential: Credential,
    ) -> GenerationOutcome:
        if not prompt_text or not prompt_text.strip():
            raise ValidationError("A prompt is required.", details={"field": "promptText"})
        if not source_image:
            raise ValidationError("A source image is required.", details={"field": "sourceImageRef"})
        if isinstance(credential, NoCredential):
            raise ConfigurationError(NO_CREDENTIAL_MESSAGE)

        profile = resolve_backend(backend_id)
        if profile.backend is None:
            logger.info(f"Unrecognized backend {backend_id!r}, using fallback profile")
        job = build_job(profile, prompt_text, source_image)
        logger.info(f"Dispatching to {profile.endpoint}: prompt={_clip(prompt_text)!r} "
                    f"image={_clip(source_image)!r}")

        try:
            image_url = await self._backend.submit(job, credential.secret())
        except AuthError as e:
            logger.warning(f"Backend {profile.id} rejected the credential: {e}")
            return GenerationAuthFailure(message=f"{AUTH_REMEDIATION} ({e})")
        except (RetouchError, httpx.HTTPError, ValueError) as e:
            logger.error(f"Generation via {profile.id} failed: {e}")
            return GenerationFailure(message=str(e) or type(e).__name__)
        except Exception as e:
            logger.exception(f"Unexpected error from backend {profile.id}")
            return GenerationFailure(message=str(e) or type(e).__name__)

        logger.info(f"Generation via {profile.id} succeeded")
        return GenerationSuccess(image_url=image_url, backend=profile.label)
