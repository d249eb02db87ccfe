import pytest

from retouch.history import (
    MAX_TURNS,
    MAX_VERSIONS,
    ORIGINAL_BACKEND,
    ORIGINAL_PROMPT,
    append_turn,
    append_version,
    derive_title,
    display_number,
    display_number_for,
    is_original,
    numbered,
    select_attachment,
)
from retouch.models.session import DEFAULT_TITLE, AssetVersion, Turn


def version(n: int) -> AssetVersion:
    return AssetVersion(id=f"v{n}", url=f"https://img.example/{n}.png", prompt=f"edit {n}", backend="Qwen Edit")


def test_first_append_seeds_original():
    versions = append_version([], version(1), source_image="data:x")
    assert len(versions) == 2
    assert versions[0].id == "v1"
    assert is_original(versions[1])
    assert versions[1].url == "data:x"
    assert versions[1].prompt == ORIGINAL_PROMPT
    assert versions[1].backend == ORIGINAL_BACKEND
    assert [n for n, _ in numbered(versions)] == [1, 0]


def test_append_without_source_does_not_seed():
    versions = append_version([], version(1))
    assert [v.id for v in versions] == ["v1"]


def test_append_to_existing_history_does_not_seed_again():
    versions = append_version([version(1)], version(2), source_image="data:x")
    assert [v.id for v in versions] == ["v2", "v1"]


def test_append_does_not_mutate_input():
    original = [version(1)]
    append_version(original, version(2))
    assert [v.id for v in original] == ["v1"]


@pytest.mark.parametrize("count", [1, 5, 19, 20, 21, 40])
def test_cap_order_and_contiguous_numbers(count):
    versions: list[AssetVersion] = []
    for i in range(1, count + 1):
        versions = append_version(versions, version(i), source_image="data:x")
        assert len(versions) <= MAX_VERSIONS
        numbers = [n for n, _ in numbered(versions)]
        assert sorted(numbers) == list(range(len(versions)))
        assert numbers[-1] == 0
    assert versions[0].id == f"v{count}"
    generated = [v.id for v in versions if not is_original(v)]
    assert generated == [f"v{i}" for i in range(count, count - len(generated), -1)]


def test_numbers_shift_when_oldest_is_evicted():
    versions = append_version([], version(1), source_image="data:x")
    for i in range(2, MAX_VERSIONS):
        versions = append_version(versions, version(i))
    assert len(versions) == MAX_VERSIONS
    assert display_number_for(versions, "v1") == 1

    versions = append_version(versions, version(MAX_VERSIONS))
    assert not any(is_original(v) for v in versions)
    assert display_number_for(versions, "v1") == 0


def test_twenty_five_generations_keep_sixth_as_v0():
    versions: list[AssetVersion] = []
    for i in range(1, 26):
        versions = append_version(versions, version(i), source_image="data:x")
    assert len(versions) == 20
    assert numbered(versions)[-1] == (0, versions[-1])
    assert versions[-1].id == "v6"


def test_display_number_bounds():
    versions = [version(3), version(2), version(1)]
    assert display_number(versions, 0) == 2
    assert display_number(versions, 2) == 0
    with pytest.raises(IndexError):
        display_number(versions, 3)
    assert display_number_for(versions, "missing") is None


def test_select_attachment_precedence():
    versions = [version(2), version(1)]
    assert select_attachment(versions, "data:explicit") == "data:explicit"
    assert select_attachment(versions) == versions[0].url
    assert select_attachment([]) is None


def test_append_turn_caps_oldest_first():
    turns: list[Turn] = []
    for i in range(MAX_TURNS + 5):
        turns = append_turn(turns, Turn(role="user", content=f"t{i}"))
    assert len(turns) == MAX_TURNS
    assert turns[0].content == "t5"
    assert turns[-1].content == f"t{MAX_TURNS + 4}"


def test_derive_title():
    assert derive_title([]) == DEFAULT_TITLE
    assert derive_title([Turn(role="user", content="make it blue")]) == "make it blue"
    long = "x" * 60
    assert derive_title([Turn(role="user", content=long)]) == "x" * 50 + "..."
