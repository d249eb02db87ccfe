"""
Generation wire models and dispatch outcomes.
"""

from typing import Any, Literal, Optional, Union

from pydantic import BaseModel, ConfigDict, Field


class GenerateRequest(BaseModel):
    """Dispatch request. `credential` is present only for an explicit key."""
    model_config = ConfigDict(populate_by_name=True)

    prompt_text: str = Field("", alias="promptText")
    source_image_ref: str = Field("", alias="sourceImageRef")
    backend_id: str = Field("", alias="backendId")
    credential: Optional[str] = None

    def to_wire(self) -> dict[str, Any]:
        return self.model_dump(by_alias=True, exclude_none=True)


class GenerateResponse(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    image_url: str = Field(alias="imageUrl")
    backend_id: Optional[str] = Field(None, alias="backendId")


class ErrorBody(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    message: str
    is_auth_error: Optional[bool] = Field(None, alias="isAuthError")


class ServerSettings(BaseModel):
    """Settings read surface. Never carries the credential itself."""
    model_config = ConfigDict(populate_by_name=True)

    has_server_default_credential: bool = Field(False, alias="hasServerDefaultCredential")


class GenerationJob(BaseModel):
    """One backend call, with the profile knobs already applied."""
    backend_id: str
    endpoint: str
    label: str
    prompt: str
    image_url: str
    strength: Optional[float] = None
    num_inference_steps: Optional[int] = None
    guidance_scale: Optional[float] = None

    def arguments(self) -> dict[str, Any]:
        """fal.ai input payload; unset knobs are left out."""
        return self.model_dump(
            include={"image_url", "prompt", "strength", "num_inference_steps", "guidance_scale"},
            exclude_none=True,
        )


class GenerationSuccess(BaseModel):
    kind: Literal["success"] = "success"
    image_url: str
    backend: str = ""


class GenerationAuthFailure(BaseModel):
    kind: Literal["auth_failure"] = "auth_failure"
    message: str


class GenerationFailure(BaseModel):
    kind: Literal["failure"] = "failure"
    message: str


GenerationOutcome = Union[GenerationSuccess, GenerationAuthFailure, GenerationFailure]
