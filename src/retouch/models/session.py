"""
Session models — the persisted aggregate.

A Session embeds its Turns and Asset Versions. Records are stored with
camelCase keys; both camelCase and snake_case are accepted on input.
"""

import time
import uuid
from typing import Literal, Optional

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel

DEFAULT_TITLE = "New Session"


def now_ms() -> int:
    return int(time.time() * 1000)


def generate_id(suffix: str = "") -> str:
    """Time-ordered opaque id: lexical order follows creation order."""
    return f"{time.time_ns():020d}{uuid.uuid4().hex[:6]}{suffix}"


class _Record(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


class AssetVersion(_Record):
    id: str = Field(default_factory=lambda: generate_id("_gen"))
    url: str
    prompt: str = ""
    backend: str = ""
    timestamp: int = Field(default_factory=now_ms)


class Turn(_Record):
    id: str = Field(default_factory=generate_id)
    role: Literal["user", "assistant"]
    content: str = ""
    image: Optional[str] = None
    version: Optional[AssetVersion] = None
    error: Optional[Literal["auth", "generic"]] = None
    timestamp: int = Field(default_factory=now_ms)


class Session(_Record):
    id: str = Field(default_factory=generate_id)
    title: str = DEFAULT_TITLE
    turns: list[Turn] = []
    versions: list[AssetVersion] = []  # most recent first
    created_at: int = Field(default_factory=now_ms)
    updated_at: int = Field(default_factory=now_ms)

    def to_record(self) -> dict:
        return self.model_dump(by_alias=True, mode="json")

    @classmethod
    def from_record(cls, record: dict) -> "Session":
        return cls.model_validate(record)
