"""
Generation backends and their static parameter profiles.

The set is closed. Unrecognized ids coming in from the outside map to
FALLBACK_PROFILE, which sends no extra knobs to the default endpoint.
"""

from enum import Enum
from typing import NamedTuple, Optional

DEFAULT_ENDPOINT = "fal-ai/flux-pro/kontext"


class Backend(str, Enum):
    QWEN_EDIT = "qwen-edit"
    SEEDEDIT = "seededit"
    KONTEXT_PRO = "kontext-pro"


class BackendProfile(NamedTuple):
    backend: Optional[Backend]
    endpoint: str
    label: str
    strength: Optional[float] = None
    num_inference_steps: Optional[int] = None
    guidance_scale: Optional[float] = None

    @property
    def id(self) -> str:
        return self.backend.value if self.backend else "fallback"


PROFILES: dict[Backend, BackendProfile] = {
    Backend.QWEN_EDIT: BackendProfile(
        Backend.QWEN_EDIT, "fal-ai/qwen-image-edit", "Qwen Edit",
        strength=0.8, num_inference_steps=28, guidance_scale=3.5,
    ),
    Backend.SEEDEDIT: BackendProfile(
        Backend.SEEDEDIT, "fal-ai/bytedance/seededit/v3/edit-image", "Seeedit",
        strength=0.75, num_inference_steps=20,
    ),
    Backend.KONTEXT_PRO: BackendProfile(
        Backend.KONTEXT_PRO, DEFAULT_ENDPOINT, "Kontext Pro Edit",
        strength=0.85, num_inference_steps=30, guidance_scale=4.0,
    ),
}

FALLBACK_PROFILE = BackendProfile(None, DEFAULT_ENDPOINT, "Unknown Model")


def resolve_backend(value: Optional[str]) -> BackendProfile:
    """Match by id, endpoint or display label (case-insensitive)."""
    if not value:
        return FALLBACK_PROFILE
    key = value.strip().lower()
    for profile in PROFILES.values():
        if key in (profile.id, profile.endpoint.lower(), profile.label.lower()):
            return profile
    return FALLBACK_PROFILE
