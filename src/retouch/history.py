"""
Version and turn history.

Versions are kept most-recent-first and capped at MAX_VERSIONS; turns are kept
oldest-first and capped at MAX_TURNS. Both caps drop the oldest entries for
good. Display numbers are never stored: the oldest surviving version is
always v0, so numbers shift as older entries are evicted.
"""

from typing import Optional

from retouch.models.session import DEFAULT_TITLE, AssetVersion, Turn, generate_id

MAX_VERSIONS = 20
MAX_TURNS = 50
TITLE_LENGTH = 50

ORIGINAL_PROMPT = "Original image"
ORIGINAL_BACKEND = "Original"


def make_original(image_ref: str) -> AssetVersion:
    return AssetVersion(
        id=generate_id("_original"),
        url=image_ref,
        prompt=ORIGINAL_PROMPT,
        backend=ORIGINAL_BACKEND,
    )


def is_original(version: AssetVersion) -> bool:
    return version.prompt == ORIGINAL_PROMPT and version.backend == ORIGINAL_BACKEND


def append_version(
    versions: list[AssetVersion],
    new_version: AssetVersion,
    source_image: Optional[str] = None,
) -> list[AssetVersion]:
    """Return a new list with `new_version` in front.

    An empty history with a known source image is seeded with a synthetic
    original first, so the source becomes v0.
    """
    updated = list(versions)
    if not updated and source_image:
        updated.append(make_original(source_image))
    updated.insert(0, new_version)
    return updated[:MAX_VERSIONS]


def display_number(versions: list[AssetVersion], index: int) -> int:
    if not 0 <= index < len(versions):
        raise IndexError(f"version index {index} out of range")
    return len(versions) - 1 - index


def display_number_for(versions: list[AssetVersion], version_id: str) -> Optional[int]:
    for i, version in enumerate(versions):
        if version.id == version_id:
            return display_number(versions, i)
    return None


def numbered(versions: list[AssetVersion]) -> list[tuple[int, AssetVersion]]:
    """(display number, version) pairs, most recent first."""
    count = len(versions)
    return [(count - 1 - i, version) for i, version in enumerate(versions)]


def select_attachment(versions: list[AssetVersion], explicit: Optional[str] = None) -> Optional[str]:
    """Image for the next request: explicit pick, else the latest version."""
    if explicit:
        return explicit
    if versions:
        return versions[0].url
    return None


def append_turn(turns: list[Turn], turn: Turn) -> list[Turn]:
    return [*turns, turn][-MAX_TURNS:]


def derive_title(turns: list[Turn]) -> str:
    if not turns:
        return DEFAULT_TITLE
    text = turns[0].content
    if len(text) > TITLE_LENGTH:
        return text[:TITLE_LENGTH] + "..."
    return text or DEFAULT_TITLE
